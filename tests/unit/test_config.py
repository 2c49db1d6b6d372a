"""
Unit tests for the configuration system.
"""

import os
import tempfile

import pytest
import yaml
from pydantic import ValidationError as PydanticValidationError

from vddl.config import CapabilityConfig, DDLConfig, TableSeed, VddlConfig
from vddl.exceptions import ConfigurationError


class TestVddlConfig:
    """Test VddlConfig loading and validation."""

    def test_defaults(self):
        config = VddlConfig()

        assert config.ddl.enabled
        assert config.ddl.mutation_timeout_seconds is None
        assert config.refresh.mode == "sync"
        assert config.capabilities.load_entry_points
        assert config.capabilities.entry_point_group == "vddl.capabilities"
        assert config.catalog.sources == []

    def test_from_yaml(self, temp_config_file):
        config = VddlConfig.from_yaml(temp_config_file)

        assert config.service_name == "vddl-test"
        assert config.refresh.mode == "async"
        assert config.ddl.mutation_timeout_seconds == 30
        assert config.get_source("lake").versioned
        assert config.get_source("files").tables[0].format == "parquet"

    def test_from_yaml_expands_env_vars(self, sample_config_data, monkeypatch):
        monkeypatch.setenv("VDDL_TEST_SERVICE", "from-env")
        sample_config_data["service_name"] = "${VDDL_TEST_SERVICE}"

        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            yaml.dump(sample_config_data, f)
        try:
            config = VddlConfig.from_yaml(f.name)
        finally:
            os.unlink(f.name)

        assert config.service_name == "from-env"

    def test_missing_file(self):
        with pytest.raises(ConfigurationError, match="not found"):
            VddlConfig.from_yaml("/nonexistent/vddl.yaml")

    def test_invalid_yaml(self):
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            f.write("catalog: [unclosed")
        try:
            with pytest.raises(ConfigurationError, match="Invalid YAML"):
                VddlConfig.from_yaml(f.name)
        finally:
            os.unlink(f.name)

    def test_invalid_values(self):
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            yaml.dump({"refresh": {"mode": "eventually"}}, f)
        try:
            with pytest.raises(ConfigurationError, match="Invalid configuration"):
                VddlConfig.from_yaml(f.name)
        finally:
            os.unlink(f.name)

    def test_get_unknown_source(self):
        with pytest.raises(ConfigurationError):
            VddlConfig().get_source("nowhere")

    def test_validate_duplicate_sources(self):
        config = VddlConfig(catalog={"sources": [{"name": "a"}, {"name": "a"}]})

        with pytest.raises(ConfigurationError, match="Duplicate source"):
            config.validate_config()

    def test_validate_empty_table_path(self):
        config = VddlConfig(
            catalog={"sources": [{"name": "a", "tables": [{"path": [], "columns": [["id", "int"]]}]}]}
        )

        with pytest.raises(ConfigurationError, match="empty path"):
            config.validate_config()

    def test_round_trip_through_yaml(self, sample_config_data):
        config = VddlConfig(**sample_config_data)

        with tempfile.NamedTemporaryFile(suffix=".yaml", delete=False) as f:
            path = f.name
        try:
            config.to_yaml(path)
            loaded = VddlConfig.from_yaml(path)
        finally:
            os.unlink(path)

        assert loaded.catalog == config.catalog
        assert loaded.refresh == config.refresh


class TestSectionValidation:
    """Test validators on configuration sections."""

    def test_non_positive_timeout_rejected(self):
        with pytest.raises(PydanticValidationError):
            DDLConfig(mutation_timeout_seconds=0)

    def test_unknown_disabled_kind_rejected(self):
        with pytest.raises(PydanticValidationError):
            CapabilityConfig(disabled=["show_branchs"])

    def test_known_disabled_kind_accepted(self):
        assert CapabilityConfig(disabled=["show_branches"]).disabled == ["show_branches"]

    def test_column_must_be_pair(self):
        with pytest.raises(PydanticValidationError):
            TableSeed(path=["t"], columns=[["id"]])
