"""
Exception classes for vddl.
"""

from typing import Any, Dict, Optional


class VddlError(Exception):
    """Base exception for all vddl errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        result = self.message
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            result += f" [{details_str}]"
        if self.cause:
            result += f" (caused by: {self.cause})"
        return result


class ConfigurationError(VddlError):
    """Raised when there's an error in configuration."""

    pass


class ValidationError(VddlError):
    """Raised when a statement does not match the state of its target."""

    pass


class TableNotFoundError(ValidationError):
    """Raised when the statement's target table does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Table [{path}] not found")
        self.path = path


class ColumnNotFoundError(ValidationError):
    """Raised when a column named by a statement is absent from the table."""

    def __init__(self, column: str, path: str) -> None:
        super().__init__(f"Column [{column}] is not present in table [{path}]")
        self.column = column
        self.path = path


class WouldEmptySchemaError(ValidationError):
    """Raised when a mutation would leave a table without columns."""

    def __init__(self, path: str) -> None:
        super().__init__(
            "Cannot drop all columns of a table", details={"table": path}
        )
        self.path = path


class VersionError(VddlError):
    """Raised when a version reference cannot be used for the statement."""

    pass


class UnresolvableVersionError(VersionError):
    """Raised when a symbolic reference does not exist in the catalog."""

    def __init__(self, source: str, reference: str) -> None:
        super().__init__(
            f"Requested {reference} not found in source [{source}]"
        )
        self.source = source
        self.reference = reference


class NotMutableVersionError(VersionError):
    """Raised when a mutation targets a tag or a bare commit."""

    def __init__(self, reference: str, path: str) -> None:
        super().__init__(
            "DDL and DML operations are only supported for branches - not on "
            f"tags or commits. [{path}] is not on a branch",
            details={"reference": reference},
        )
        self.reference = reference
        self.path = path


class UnsupportedError(VddlError):
    """Raised when a statement kind has no implementation in this build."""

    def __init__(self, statement_label: str) -> None:
        super().__init__(f"{statement_label} action is not supported.")
        self.statement_label = statement_label


class InternalError(VddlError):
    """Raised when the system fails for reasons unrelated to user input."""

    pass


class CapabilityConstructionError(InternalError):
    """Raised when an available capability handler fails to construct."""

    def __init__(self, statement_kind: str, cause: Exception) -> None:
        super().__init__(
            f"Failed to construct handler for statement kind '{statement_kind}'",
            cause=cause,
        )
        self.statement_kind = statement_kind


class MutationOutcomeUnknownError(InternalError):
    """Raised when a catalog mutation did not finish within the timeout.

    The mutation may or may not have been applied; callers must re-query the
    catalog to learn its outcome.
    """

    def __init__(self, path: str, timeout_seconds: float) -> None:
        super().__init__(
            f"Mutation of [{path}] did not complete within {timeout_seconds}s; "
            f"its outcome is unknown",
            details={"timeout_seconds": timeout_seconds},
        )
        self.path = path
        self.timeout_seconds = timeout_seconds


class CatalogError(InternalError):
    """Raised by catalog implementations when an operation fails."""

    pass


class CatalogConflictError(CatalogError):
    """Raised when a branch moved between version resolution and mutation."""

    def __init__(self, branch: str, expected_hash: str, actual_hash: str) -> None:
        super().__init__(
            f"Branch [{branch}] has moved since it was resolved",
            details={"expected": expected_hash, "actual": actual_hash},
        )
        self.branch = branch
        self.expected_hash = expected_hash
        self.actual_hash = actual_hash


class RefreshError(VddlError):
    """Raised when a post-mutation metadata refresh fails."""

    def __init__(self, path: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Failed to refresh dataset [{path}]", cause=cause)
        self.path = path
