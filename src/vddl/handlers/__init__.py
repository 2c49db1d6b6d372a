"""
Statement handlers for vddl.

This package provides:
- The DirectHandler interface shared by all statement handlers
- The ALTER TABLE ... DROP COLUMN handler
- The registry resolving optional, edition-specific handlers
"""

from .base import DirectHandler
from .drop_column import DropColumnHandler
from .capabilities import CapabilityRegistry, HandlerFactory

__all__ = [
    "DirectHandler",
    "DropColumnHandler",
    "CapabilityRegistry",
    "HandlerFactory",
]
