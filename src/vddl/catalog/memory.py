"""
In-memory catalog for vddl.

Reference implementation of the Catalog interface. Versioned sources keep an
immutable commit per change, with branches and tags pointing at commits;
plain sources keep a single mutable table map. Mutations on one source are
serialised and a branch that moved since resolution is rejected.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from ..config import CatalogConfig
from ..exceptions import CatalogConflictError, CatalogError
from .base import BranchInfo, Catalog, DDLSupport
from .models import (
    CatalogPath,
    CatalogTable,
    DatasetType,
    MutationOptions,
    ResolvedVersion,
    TableFormat,
    TableSchema,
    VersionReference,
    VersionType,
)


logger = logging.getLogger(__name__)

TableKey = Tuple[str, ...]


@dataclass(frozen=True)
class Commit:
    """An immutable snapshot of every table in a versioned source."""

    hash: str
    parent: Optional[str]
    tables: Dict[TableKey, CatalogTable]
    message: str = ""


@dataclass
class _Source:
    name: str
    versioned: bool
    supports_ddl: bool
    default_branch: str
    tables: Dict[TableKey, CatalogTable] = field(default_factory=dict)
    commits: Dict[str, Commit] = field(default_factory=dict)
    branches: Dict[str, str] = field(default_factory=dict)
    tags: Dict[str, str] = field(default_factory=dict)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


def _key(path: CatalogPath) -> TableKey:
    return tuple(part.lower() for part in path.parts)


def _new_hash() -> str:
    return uuid.uuid4().hex


class InMemoryCatalog(Catalog):
    """Catalog keeping all sources, tables and versions in process memory."""

    def __init__(self):
        self._sources: Dict[str, _Source] = {}
        self.refreshed_paths: List[CatalogPath] = []

    @classmethod
    def from_config(cls, config: CatalogConfig) -> "InMemoryCatalog":
        """Build a catalog with the sources and tables described by config."""
        catalog = cls()
        for source in config.sources:
            catalog.add_source(
                source.name,
                versioned=source.versioned,
                supports_ddl=source.supports_ddl,
                default_branch=source.default_branch,
            )
            for seed in source.tables:
                catalog.create_table(
                    CatalogPath((source.name, *seed.path)),
                    TableSchema.of(*(tuple(column) for column in seed.columns)),
                    table_format=TableFormat(seed.format),
                    internal=seed.internal,
                )
        return catalog

    # ------------------------------------------------------------------
    # Setup helpers
    # ------------------------------------------------------------------

    def add_source(
        self,
        name: str,
        *,
        versioned: bool = False,
        supports_ddl: bool = True,
        default_branch: str = "main",
    ) -> None:
        if name.lower() in self._sources:
            raise CatalogError(f"Source [{name}] already exists")

        source = _Source(
            name=name,
            versioned=versioned,
            supports_ddl=supports_ddl,
            default_branch=default_branch,
        )
        if versioned:
            root = Commit(hash=_new_hash(), parent=None, tables={}, message="init")
            source.commits[root.hash] = root
            source.branches[default_branch] = root.hash

        self._sources[name.lower()] = source
        logger.debug(f"Added source {name} (versioned={versioned})")

    def create_table(
        self,
        path: CatalogPath,
        schema: TableSchema,
        *,
        table_format: TableFormat = TableFormat.ICEBERG,
        dataset_type: DatasetType = DatasetType.TABLE,
        internal: bool = False,
        branch: Optional[str] = None,
    ) -> CatalogTable:
        """Create a table; on versioned sources this commits to ``branch``."""
        source = self._get_source(path.root)
        table = CatalogTable(
            path=path,
            schema=schema,
            table_format=table_format,
            dataset_type=dataset_type,
            is_internal=internal,
        )

        if not source.versioned:
            source.tables[_key(path)] = table
            return table

        branch = branch or source.default_branch
        head = self._branch_head(source, branch)
        tables = dict(source.commits[head].tables)
        tables[_key(path)] = table
        self._commit(source, branch, head, tables, f"create table {path}")
        return table

    def create_branch(
        self, source_name: str, name: str, from_reference: Optional[VersionReference] = None
    ) -> str:
        source = self._get_versioned_source(source_name)
        if name in source.branches:
            raise CatalogError(f"Branch [{name}] already exists in source [{source_name}]")
        commit_hash = self._lookup_hash(source, from_reference or VersionReference.unspecified())
        if commit_hash is None:
            raise CatalogError(f"Requested {from_reference} not found in source [{source_name}]")
        source.branches[name] = commit_hash
        return commit_hash

    def create_tag(
        self, source_name: str, name: str, from_reference: Optional[VersionReference] = None
    ) -> str:
        source = self._get_versioned_source(source_name)
        if name in source.tags:
            raise CatalogError(f"Tag [{name}] already exists in source [{source_name}]")
        commit_hash = self._lookup_hash(source, from_reference or VersionReference.unspecified())
        if commit_hash is None:
            raise CatalogError(f"Requested {from_reference} not found in source [{source_name}]")
        source.tags[name] = commit_hash
        return commit_hash

    def branch_head(self, source_name: str, branch: str) -> str:
        return self._branch_head(self._get_versioned_source(source_name), branch)

    def has_source(self, name: str) -> bool:
        return name.lower() in self._sources

    # ------------------------------------------------------------------
    # Catalog interface
    # ------------------------------------------------------------------

    async def resolve_single(
        self,
        parts: Sequence[str],
        default_schema: Optional[Sequence[str]] = None,
    ) -> CatalogPath:
        if not parts:
            raise CatalogError("Cannot resolve an empty table name")
        if default_schema and not self.has_source(parts[0]):
            return CatalogPath((*default_schema, *parts))
        return CatalogPath(tuple(parts))

    async def get_table_no_resolve(
        self,
        path: CatalogPath,
        version: Optional[VersionReference] = None,
    ) -> Optional[CatalogTable]:
        source = self._sources.get(path.root.lower())
        if source is None:
            return None

        if not source.versioned:
            return source.tables.get(_key(path))

        commit_hash = self._lookup_hash(source, version or VersionReference.unspecified())
        if commit_hash is None:
            return None
        return source.commits[commit_hash].tables.get(_key(path))

    async def check_ddl_support(
        self, path: CatalogPath, table: CatalogTable
    ) -> DDLSupport:
        source = self._get_source(path.root)
        if not source.supports_ddl:
            return DDLSupport.no(f"Source [{source.name}] does not support DDL operations")
        return DDLSupport.yes()

    async def supports_versioned_tables(self, source: str) -> bool:
        found = self._sources.get(source.lower())
        return found is not None and found.versioned

    async def get_default_branch(self, source: str) -> str:
        return self._get_versioned_source(source).default_branch

    async def resolve_version(
        self, source: str, reference: VersionReference
    ) -> Optional[ResolvedVersion]:
        found = self._get_versioned_source(source)

        if reference.type == VersionType.UNSPECIFIED:
            reference = VersionReference.branch(found.default_branch)

        commit_hash = self._lookup_hash(found, reference)
        if commit_hash is None:
            return None
        if reference.type == VersionType.COMMIT:
            return ResolvedVersion(ref_type=VersionType.COMMIT, commit_hash=commit_hash)
        return ResolvedVersion(
            ref_type=reference.type,
            commit_hash=commit_hash,
            ref_name=reference.value,
        )

    async def drop_column(
        self,
        path: CatalogPath,
        column: str,
        options: MutationOptions,
    ) -> Optional[str]:
        source = self._get_source(path.root)

        async with source.lock:
            if not source.versioned:
                table = source.tables.get(_key(path))
                source.tables[_key(path)] = self._dropped(path, table, column)
                return None

            resolved = options.resolved_version
            if resolved is None:
                branch = source.default_branch
                head = self._branch_head(source, branch)
            else:
                if not resolved.is_branch:
                    raise CatalogError(f"Cannot commit to {resolved}: not a branch")
                branch = resolved.ref_name
                head = self._branch_head(source, branch)
                if head != resolved.commit_hash:
                    raise CatalogConflictError(branch, resolved.commit_hash, head)

            tables = dict(source.commits[head].tables)
            tables[_key(path)] = self._dropped(path, tables.get(_key(path)), column)
            return self._commit(source, branch, head, tables, f"drop column {column} from {path}")

    async def refresh_dataset(self, path: CatalogPath) -> None:
        self._get_source(path.root)
        self.refreshed_paths.append(path)
        logger.debug(f"Refreshed dataset metadata for {path}")

    async def list_branches(self, source: str) -> List[BranchInfo]:
        found = self._get_versioned_source(source)
        return [
            BranchInfo(name=name, commit_hash=commit_hash)
            for name, commit_hash in sorted(found.branches.items())
        ]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _get_source(self, name: str) -> _Source:
        source = self._sources.get(name.lower())
        if source is None:
            raise CatalogError(f"Source [{name}] not found")
        return source

    def _get_versioned_source(self, name: str) -> _Source:
        source = self._get_source(name)
        if not source.versioned:
            raise CatalogError(f"Source [{name}] does not support versioning")
        return source

    def _branch_head(self, source: _Source, branch: str) -> str:
        head = source.branches.get(branch)
        if head is None:
            raise CatalogError(f"Branch [{branch}] not found in source [{source.name}]")
        return head

    def _lookup_hash(self, source: _Source, reference: VersionReference) -> Optional[str]:
        if reference.type == VersionType.UNSPECIFIED:
            return source.branches.get(source.default_branch)
        if reference.type == VersionType.BRANCH:
            return source.branches.get(reference.value)
        if reference.type == VersionType.TAG:
            return source.tags.get(reference.value)
        return reference.value if reference.value in source.commits else None

    def _commit(
        self,
        source: _Source,
        branch: str,
        parent: str,
        tables: Dict[TableKey, CatalogTable],
        message: str,
    ) -> str:
        commit = Commit(hash=_new_hash(), parent=parent, tables=tables, message=message)
        source.commits[commit.hash] = commit
        source.branches[branch] = commit.hash
        logger.debug(f"Committed {commit.hash} on {source.name}@{branch}: {message}")
        return commit.hash

    @staticmethod
    def _dropped(
        path: CatalogPath, table: Optional[CatalogTable], column: str
    ) -> CatalogTable:
        if table is None:
            raise CatalogError(f"Table [{path}] not found")
        if not table.schema.has_field(column):
            raise CatalogError(f"Column [{column}] is not present in table [{path}]")
        if table.schema.field_count == 1:
            raise CatalogError(f"Cannot drop the only column of [{path}]")
        return table.with_schema(table.schema.without_field(column))
