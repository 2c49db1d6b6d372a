"""
Statement results returned to the surrounding system.
"""

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a statement: ok flag, human-readable message, extra details."""

    ok: bool
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def successful(cls, message: str, **details: Any) -> "CommandResult":
        return cls(True, message, dict(details))

    @classmethod
    def failed(cls, message: str, **details: Any) -> "CommandResult":
        return cls(False, message, dict(details))
