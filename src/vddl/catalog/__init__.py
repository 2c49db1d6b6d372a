"""
Catalog package for vddl.

This package provides:
- Value types for paths, versions, schemas and mutation options
- The abstract catalog interface consumed by the DDL pipeline
- An in-memory reference catalog with branches, tags and commits
"""

from .base import BranchInfo, Catalog, DDLSupport
from .memory import InMemoryCatalog
from .models import (
    CatalogPath,
    CatalogTable,
    DatasetType,
    MutationOptions,
    ResolvedVersion,
    SchemaField,
    TableFormat,
    TableSchema,
    VersionReference,
    VersionType,
)

__all__ = [
    "BranchInfo",
    "Catalog",
    "DDLSupport",
    "InMemoryCatalog",
    "CatalogPath",
    "CatalogTable",
    "DatasetType",
    "MutationOptions",
    "ResolvedVersion",
    "SchemaField",
    "TableFormat",
    "TableSchema",
    "VersionReference",
    "VersionType",
]
