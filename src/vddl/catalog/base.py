"""
Abstract catalog interface consumed by the DDL pipeline.

The catalog owns all persisted schema and version state. The pipeline only
reads through it and issues single, atomic mutation calls against it.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .models import (
    CatalogPath,
    CatalogTable,
    MutationOptions,
    ResolvedVersion,
    VersionReference,
)


@dataclass(frozen=True)
class BranchInfo:
    """A branch head as listed by the catalog."""

    name: str
    commit_hash: str


@dataclass(frozen=True)
class DDLSupport:
    """Catalog verdict on whether a table accepts DDL."""

    supported: bool
    message: str = ""

    @classmethod
    def yes(cls) -> "DDLSupport":
        return cls(True)

    @classmethod
    def no(cls, message: str) -> "DDLSupport":
        return cls(False, message)


class Catalog(ABC):
    """
    Interface every catalog backend must implement.

    Implementations must make each mutation atomic per path: either the change
    is recorded under the resolved branch or nothing is visible to later reads.
    """

    @abstractmethod
    async def resolve_single(
        self,
        parts: Sequence[str],
        default_schema: Optional[Sequence[str]] = None,
    ) -> CatalogPath:
        """
        Turn the identifier parts of a statement into a fully qualified path.

        Args:
            parts: Identifier components as written in the statement
            default_schema: Session default schema used for unqualified names
        """

    @abstractmethod
    async def get_table_no_resolve(
        self,
        path: CatalogPath,
        version: Optional[VersionReference] = None,
    ) -> Optional[CatalogTable]:
        """Return the table at ``path`` as seen by ``version``, or None."""

    @abstractmethod
    async def check_ddl_support(
        self, path: CatalogPath, table: CatalogTable
    ) -> DDLSupport:
        """Report whether the table's source accepts DDL statements."""

    @abstractmethod
    async def supports_versioned_tables(self, source: str) -> bool:
        """True when ``source`` natively versions its tables."""

    @abstractmethod
    async def get_default_branch(self, source: str) -> str:
        """Name of the default mutable reference of a versioned source."""

    @abstractmethod
    async def resolve_version(
        self, source: str, reference: VersionReference
    ) -> Optional[ResolvedVersion]:
        """
        Resolve a specified reference against the source's current state.

        Returns None when the referenced branch, tag or commit does not exist.
        """

    @abstractmethod
    async def drop_column(
        self,
        path: CatalogPath,
        column: str,
        options: MutationOptions,
    ) -> Optional[str]:
        """
        Remove ``column`` from the table at ``path``.

        Returns the commit hash recorded for the change on versioned sources,
        None otherwise.
        """

    @abstractmethod
    async def refresh_dataset(self, path: CatalogPath) -> None:
        """Re-derive cached dataset metadata for ``path``."""

    @abstractmethod
    async def list_branches(self, source: str) -> List[BranchInfo]:
        """List the branches of a versioned source."""
