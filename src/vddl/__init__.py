"""
vddl: Versioned DDL execution core.

vddl validates and applies schema changes to tables that may live under
version control (branches, tags, commits), and dispatches optional
statement kinds to handlers provided by installed editions.
"""

__version__ = "0.1.0"
__author__ = "vddl Contributors"

from .config import VddlConfig
from .engine import DDLEngine
from .exceptions import (
    VddlError,
    ConfigurationError,
    ValidationError,
    VersionError,
    UnsupportedError,
    InternalError,
)
from .results import CommandResult
from .session import SessionContext

__all__ = [
    "__version__",
    "VddlConfig",
    "DDLEngine",
    "VddlError",
    "ConfigurationError",
    "ValidationError",
    "VersionError",
    "UnsupportedError",
    "InternalError",
    "CommandResult",
    "SessionContext",
]
