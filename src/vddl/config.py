"""
Configuration system for vddl using Pydantic.
"""

import os
from pathlib import Path
from typing import Any, List, Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError
from .statements import StatementKind


class DDLConfig(BaseModel):
    """DDL execution configuration."""

    enabled: bool = Field(True, description="Allow DDL statements at all")
    mutation_timeout_seconds: Optional[float] = Field(
        None,
        description="Give up waiting on a catalog mutation after this many seconds",
    )

    @field_validator("mutation_timeout_seconds")
    @classmethod
    def check_timeout(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError("mutation_timeout_seconds must be positive")
        return v


class RefreshConfig(BaseModel):
    """Post-mutation metadata refresh configuration."""

    mode: Literal["sync", "async"] = Field(
        "sync", description="Await the refresh or run it in the background"
    )


class CapabilityConfig(BaseModel):
    """Optional statement handler discovery."""

    load_entry_points: bool = Field(
        True, description="Load capability handlers from installed entry points"
    )
    entry_point_group: str = Field(
        "vddl.capabilities", description="Entry point group to load handlers from"
    )
    disabled: List[str] = Field(
        default_factory=list, description="Statement kinds to leave unregistered"
    )

    @field_validator("disabled")
    @classmethod
    def check_disabled(cls, v: List[str]) -> List[str]:
        known = {kind.value for kind in StatementKind}
        unknown = [name for name in v if name not in known]
        if unknown:
            raise ValueError(
                f"Unknown statement kinds: {unknown}. Known kinds: {sorted(known)}"
            )
        return v


class TableSeed(BaseModel):
    """A table to create in the in-memory catalog at startup."""

    path: List[str] = Field(..., description="Path below the source name")
    columns: List[List[str]] = Field(
        ..., description="Columns as [name, type] pairs"
    )
    format: str = Field("iceberg", description="Table format")
    internal: bool = Field(False, description="Internally managed table")

    @field_validator("columns")
    @classmethod
    def check_columns(cls, v: List[List[str]]) -> List[List[str]]:
        for column in v:
            if len(column) != 2:
                raise ValueError(f"Column must be a [name, type] pair, got {column}")
        return v


class SourceConfig(BaseModel):
    """A catalog source."""

    name: str = Field(..., description="Source name")
    versioned: bool = Field(False, description="Source natively versions tables")
    supports_ddl: bool = Field(True, description="Source accepts DDL")
    default_branch: str = Field("main", description="Default branch name")
    tables: List[TableSeed] = Field(
        default_factory=list, description="Tables to create at startup"
    )


class CatalogConfig(BaseModel):
    """In-memory catalog configuration."""

    sources: List[SourceConfig] = Field(
        default_factory=list, description="Catalog sources"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "INFO", description="Log level"
    )
    format: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )
    file: Optional[str] = Field(None, description="Log file path")
    max_size: int = Field(10485760, description="Max log file size in bytes")  # 10MB
    backup_count: int = Field(5, description="Number of backup log files")


class VddlConfig(BaseSettings):
    """Main vddl configuration."""

    service_name: str = Field("vddl", description="Service name")
    debug: bool = Field(False, description="Enable debug mode")

    ddl: DDLConfig = Field(default_factory=DDLConfig, description="DDL configuration")
    refresh: RefreshConfig = Field(
        default_factory=RefreshConfig, description="Refresh configuration"
    )
    capabilities: CapabilityConfig = Field(
        default_factory=CapabilityConfig, description="Capability discovery"
    )
    catalog: CatalogConfig = Field(
        default_factory=CatalogConfig, description="In-memory catalog configuration"
    )

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="VDDL_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "VddlConfig":
        """Load configuration from a YAML file."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}

            # Expand environment variables in the data
            data = cls._expand_env_vars(data)

            return cls(**data)
        except FileNotFoundError:
            raise ConfigurationError(f"Configuration file not found: {path}")
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}")
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}")

    @classmethod
    def _expand_env_vars(cls, data: Any) -> Any:
        """Recursively expand environment variables in configuration data."""
        if isinstance(data, dict):
            return {k: cls._expand_env_vars(v) for k, v in data.items()}
        elif isinstance(data, list):
            return [cls._expand_env_vars(item) for item in data]
        elif isinstance(data, str):
            return os.path.expandvars(data)
        else:
            return data

    def get_source(self, name: str) -> SourceConfig:
        """Get source configuration by name."""
        for source in self.catalog.sources:
            if source.name == name:
                return source
        raise ConfigurationError(f"Source configuration '{name}' not found")

    def validate_config(self) -> None:
        """Validate the entire configuration for consistency."""
        seen = set()
        for source in self.catalog.sources:
            if source.name in seen:
                raise ConfigurationError(f"Duplicate source '{source.name}'")
            seen.add(source.name)

            for table in source.tables:
                if not table.path:
                    raise ConfigurationError(
                        f"Table in source '{source.name}' has an empty path"
                    )
                if not table.columns:
                    raise ConfigurationError(
                        f"Table {source.name}.{'.'.join(table.path)} has no columns"
                    )

    def to_yaml(self, path: Union[str, Path]) -> None:
        """Save configuration to a YAML file."""
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(
                self.model_dump(mode="json", exclude_none=True),
                f,
                default_flow_style=False,
                indent=2,
                sort_keys=False,
            )
