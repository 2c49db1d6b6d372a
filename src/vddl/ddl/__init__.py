"""
DDL pipeline package for vddl.

This package provides:
- Validation of DDL eligibility and statement preconditions
- Atomic application of schema changes through the catalog
- Post-mutation metadata refresh decisions and scheduling
"""

from .validator import MutationValidator
from .executor import MutationExecutor, MutationOutcome, ChangeType
from .refresh import RefreshAction, RefreshActionType, RefreshDecider, RefreshScheduler

__all__ = [
    "MutationValidator",
    "MutationExecutor",
    "MutationOutcome",
    "ChangeType",
    "RefreshAction",
    "RefreshActionType",
    "RefreshDecider",
    "RefreshScheduler",
]
