"""
Catalog data model for vddl.

Value types shared by the catalog interface and the DDL pipeline: table
paths, version references, resolved versions, schemas and mutation options.
"""

import time
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterator, Optional, Tuple


class VersionType(str, Enum):
    """Kinds of symbolic version references."""

    UNSPECIFIED = "unspecified"
    BRANCH = "branch"
    TAG = "tag"
    COMMIT = "commit"


class TableFormat(str, Enum):
    """Storage formats a table can be backed by."""

    ICEBERG = "iceberg"
    DELTA = "delta"
    PARQUET = "parquet"
    JSON = "json"
    CSV = "csv"
    UNKNOWN = "unknown"


class DatasetType(str, Enum):
    """Dataset kinds known to the catalog."""

    TABLE = "table"
    VIEW = "view"


@dataclass(frozen=True)
class CatalogPath:
    """Fully qualified table path; the first component is the source name."""

    parts: Tuple[str, ...]

    def __post_init__(self):
        if not self.parts:
            raise ValueError("CatalogPath requires at least one component")
        object.__setattr__(self, "parts", tuple(self.parts))

    @classmethod
    def of(cls, *parts: str) -> "CatalogPath":
        return cls(tuple(parts))

    @property
    def root(self) -> str:
        """Name of the source that owns this path."""
        return self.parts[0]

    @property
    def name(self) -> str:
        return self.parts[-1]

    @property
    def parent(self) -> Optional["CatalogPath"]:
        if len(self.parts) == 1:
            return None
        return CatalogPath(self.parts[:-1])

    def child(self, name: str) -> "CatalogPath":
        return CatalogPath(self.parts + (name,))

    def __iter__(self) -> Iterator[str]:
        return iter(self.parts)

    def __len__(self) -> int:
        return len(self.parts)

    def __str__(self) -> str:
        return ".".join(
            f'"{part}"' if "." in part else part for part in self.parts
        )


@dataclass(frozen=True)
class VersionReference:
    """Symbolic version reference held in session state for one source."""

    type: VersionType = VersionType.UNSPECIFIED
    value: Optional[str] = None

    def __post_init__(self):
        if self.type == VersionType.UNSPECIFIED and self.value is not None:
            raise ValueError("An unspecified version reference carries no value")
        if self.type != VersionType.UNSPECIFIED and not self.value:
            raise ValueError(f"A {self.type.value} reference requires a value")

    @classmethod
    def unspecified(cls) -> "VersionReference":
        return cls()

    @classmethod
    def branch(cls, name: str) -> "VersionReference":
        return cls(VersionType.BRANCH, name)

    @classmethod
    def tag(cls, name: str) -> "VersionReference":
        return cls(VersionType.TAG, name)

    @classmethod
    def commit(cls, commit_hash: str) -> "VersionReference":
        return cls(VersionType.COMMIT, commit_hash)

    @property
    def is_specified(self) -> bool:
        return self.type != VersionType.UNSPECIFIED

    def __str__(self) -> str:
        if not self.is_specified:
            return "default version"
        return f"{self.type.value} {self.value}"


@dataclass(frozen=True, eq=False)
class ResolvedVersion:
    """
    Concrete version handle produced by resolving a VersionReference.

    Equality is identity: two resolutions of the same name are distinct
    handles because the catalog may have advanced between them.
    """

    ref_type: VersionType
    commit_hash: str
    ref_name: Optional[str] = None
    resolved_at: float = field(default_factory=time.time)
    resolution_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self):
        if self.ref_type == VersionType.UNSPECIFIED:
            raise ValueError("A resolved version must be a branch, tag or commit")

    @property
    def is_branch(self) -> bool:
        return self.ref_type == VersionType.BRANCH

    def __str__(self) -> str:
        if self.ref_type == VersionType.COMMIT:
            return f"commit {self.commit_hash}"
        return f"{self.ref_type.value} {self.ref_name} at {self.commit_hash}"


@dataclass(frozen=True)
class SchemaField:
    """A single named, typed column."""

    name: str
    type: str


@dataclass(frozen=True)
class TableSchema:
    """Ordered collection of fields; name lookups ignore case."""

    fields: Tuple[SchemaField, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "fields", tuple(self.fields))

    @classmethod
    def of(cls, *fields: Tuple[str, str]) -> "TableSchema":
        """Build a schema from ``(name, type)`` pairs."""
        return cls(tuple(SchemaField(name, type_) for name, type_ in fields))

    @property
    def field_count(self) -> int:
        return len(self.fields)

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def find_field(self, name: str) -> Optional[SchemaField]:
        """Exact-name match first, otherwise the first case-insensitive match."""
        index = self._field_index(name)
        return None if index is None else self.fields[index]

    def _field_index(self, name: str) -> Optional[int]:
        for i, f in enumerate(self.fields):
            if f.name == name:
                return i
        lowered = name.lower()
        for i, f in enumerate(self.fields):
            if f.name.lower() == lowered:
                return i
        return None

    def has_field(self, name: str) -> bool:
        return self.find_field(name) is not None

    def without_field(self, name: str) -> "TableSchema":
        """Return a copy of this schema with exactly one matching field removed."""
        index = self._field_index(name)
        if index is None:
            return self
        return TableSchema(self.fields[:index] + self.fields[index + 1:])

    def __iter__(self) -> Iterator[SchemaField]:
        return iter(self.fields)


@dataclass(frozen=True)
class CatalogTable:
    """A table as read from the catalog."""

    path: CatalogPath
    schema: TableSchema
    table_format: TableFormat = TableFormat.UNKNOWN
    dataset_type: DatasetType = DatasetType.TABLE
    is_internal: bool = False

    @property
    def is_view(self) -> bool:
        return self.dataset_type == DatasetType.VIEW

    @property
    def is_internal_iceberg_or_json(self) -> bool:
        """True when the table format keeps its own authoritative metadata."""
        if self.table_format == TableFormat.JSON:
            return True
        return self.is_internal and self.table_format == TableFormat.ICEBERG

    def with_schema(self, schema: TableSchema) -> "CatalogTable":
        return replace(self, schema=schema)


@dataclass(frozen=True)
class MutationOptions:
    """Options passed unchanged to the catalog's mutation entry points."""

    resolved_version: Optional[ResolvedVersion] = None

    @classmethod
    def for_version(cls, resolved_version: Optional[ResolvedVersion]) -> "MutationOptions":
        return cls(resolved_version=resolved_version)

