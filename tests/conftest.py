"""
Pytest configuration and shared fixtures for vddl tests.

This module provides shared fixtures and utilities for testing all vddl components.
"""

import os
import tempfile
from typing import Any, Dict

import pytest
import yaml

from vddl.catalog import (
    CatalogPath,
    DatasetType,
    InMemoryCatalog,
    TableFormat,
    TableSchema,
    VersionReference,
)
from vddl.config import VddlConfig
from vddl.ddl import RefreshScheduler
from vddl.engine import DDLEngine
from vddl.handlers import CapabilityRegistry
from vddl.session import QueryContext, SessionContext


# ============================================================================
# Catalog Fixtures
# ============================================================================

ORDERS = CatalogPath.of("lake", "sales", "orders")
LAKE_SINGLE = CatalogPath.of("lake", "sales", "single")
EVENTS = CatalogPath.of("files", "events")
LOGS = CatalogPath.of("files", "logs")
INTERNAL = CatalogPath.of("files", "internal_orders")
FILES_SINGLE = CatalogPath.of("files", "single")
EVENTS_VIEW = CatalogPath.of("files", "v_events")
CUSTOMERS = CatalogPath.of("jdbc", "crm", "customers")


@pytest.fixture
def catalog() -> InMemoryCatalog:
    """
    In-memory catalog with three sources:

    - ``lake``: versioned, branch ``main`` plus tag ``v1`` on the seeded state
    - ``files``: plain source with parquet, json, internal iceberg tables and a view
    - ``jdbc``: plain source that refuses DDL
    """
    catalog = InMemoryCatalog()

    catalog.add_source("lake", versioned=True)
    catalog.create_table(ORDERS, TableSchema.of(("id", "int"), ("name", "string")))
    catalog.create_table(LAKE_SINGLE, TableSchema.of(("id", "int")))
    catalog.create_tag("lake", "v1")

    catalog.add_source("files")
    catalog.create_table(
        EVENTS,
        TableSchema.of(("id", "int"), ("name", "string")),
        table_format=TableFormat.PARQUET,
    )
    catalog.create_table(
        LOGS,
        TableSchema.of(("id", "int"), ("msg", "string")),
        table_format=TableFormat.JSON,
    )
    catalog.create_table(
        INTERNAL,
        TableSchema.of(("id", "int"), ("amount", "double")),
        table_format=TableFormat.ICEBERG,
        internal=True,
    )
    catalog.create_table(
        FILES_SINGLE, TableSchema.of(("id", "int")), table_format=TableFormat.PARQUET
    )
    catalog.create_table(
        EVENTS_VIEW,
        TableSchema.of(("id", "int"), ("name", "string")),
        dataset_type=DatasetType.VIEW,
    )

    catalog.add_source("jdbc", supports_ddl=False)
    catalog.create_table(
        CUSTOMERS,
        TableSchema.of(("id", "int"), ("email", "string")),
        table_format=TableFormat.UNKNOWN,
    )

    return catalog


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def config() -> VddlConfig:
    """Configuration that does not pick up installed capability entry points."""
    return VddlConfig(capabilities={"load_entry_points": False})


@pytest.fixture
def sample_config_data() -> Dict[str, Any]:
    """Raw configuration data as it would appear in YAML."""
    return {
        "service_name": "vddl-test",
        "debug": True,
        "ddl": {"enabled": True, "mutation_timeout_seconds": 30},
        "refresh": {"mode": "async"},
        "capabilities": {"load_entry_points": False, "disabled": []},
        "catalog": {
            "sources": [
                {
                    "name": "lake",
                    "versioned": True,
                    "default_branch": "main",
                    "tables": [
                        {
                            "path": ["sales", "orders"],
                            "columns": [["id", "int"], ["name", "string"]],
                        }
                    ],
                },
                {
                    "name": "files",
                    "tables": [
                        {
                            "path": ["events"],
                            "columns": [["id", "int"], ["name", "string"]],
                            "format": "parquet",
                        }
                    ],
                },
            ]
        },
    }


@pytest.fixture
def temp_config_file(sample_config_data) -> str:
    """Temporary configuration file for testing."""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        yaml.dump(sample_config_data, f)
    yield f.name
    os.unlink(f.name)


# ============================================================================
# Execution Fixtures
# ============================================================================

@pytest.fixture
def session() -> SessionContext:
    return SessionContext()


@pytest.fixture
def tag_session() -> SessionContext:
    """Session pinned to tag ``v1`` of the ``lake`` source."""
    session = SessionContext()
    session.set_session_version_for_source("lake", VersionReference.tag("v1"))
    return session


@pytest.fixture
def registry() -> CapabilityRegistry:
    return CapabilityRegistry()


@pytest.fixture
def engine(catalog, config, registry) -> DDLEngine:
    return DDLEngine(catalog, config, registry)


@pytest.fixture
def query_context(catalog, config, session) -> QueryContext:
    return QueryContext(
        catalog=catalog,
        session=session,
        config=config,
        refresh_scheduler=RefreshScheduler(catalog),
    )
