"""
Unit tests for mutation validation.
"""

import pytest
from unittest.mock import AsyncMock

from vddl.catalog import Catalog, CatalogPath, CatalogTable, DDLSupport, TableSchema
from vddl.config import DDLConfig
from vddl.ddl import MutationValidator
from vddl.exceptions import (
    ColumnNotFoundError,
    TableNotFoundError,
    ValidationError,
    WouldEmptySchemaError,
)


PATH = CatalogPath.of("files", "events")


def make_table(*columns):
    return CatalogTable(path=PATH, schema=TableSchema.of(*((c, "string") for c in columns)))


@pytest.fixture
def mock_catalog():
    catalog = AsyncMock(spec=Catalog)
    catalog.check_ddl_support.return_value = DDLSupport.yes()
    return catalog


class TestValidateSupportForDDL:
    """Test the DDL eligibility check."""

    @pytest.mark.asyncio
    async def test_supported(self, mock_catalog):
        validator = MutationValidator(mock_catalog)

        result = await validator.validate_support_for_ddl(PATH, make_table("id", "name"))

        assert result.ok
        mock_catalog.check_ddl_support.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_table_raises(self, mock_catalog):
        validator = MutationValidator(mock_catalog)

        with pytest.raises(TableNotFoundError, match="Table \\[files.events\\] not found"):
            await validator.validate_support_for_ddl(PATH, None)

        mock_catalog.check_ddl_support.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_view_raises(self, catalog):
        path = CatalogPath.of("files", "v_events")
        table = await catalog.get_table_no_resolve(path)

        with pytest.raises(ValidationError, match="is a view"):
            await MutationValidator(catalog).validate_support_for_ddl(path, table)

    @pytest.mark.asyncio
    async def test_catalog_refusal_passed_through(self, mock_catalog):
        mock_catalog.check_ddl_support.return_value = DDLSupport.no(
            "Source [files] does not support DDL operations"
        )

        result = await MutationValidator(mock_catalog).validate_support_for_ddl(
            PATH, make_table("id", "name")
        )

        assert not result.ok
        assert result.message == "Source [files] does not support DDL operations"

    @pytest.mark.asyncio
    async def test_disabled_by_config(self, mock_catalog):
        validator = MutationValidator(mock_catalog, DDLConfig(enabled=False))

        result = await validator.validate_support_for_ddl(PATH, make_table("id", "name"))

        assert not result.ok
        assert "disabled" in result.message
        mock_catalog.check_ddl_support.assert_not_awaited()


class TestValidateDropColumn:
    """Test drop column preconditions."""

    def test_valid_drop(self):
        MutationValidator.validate_drop_column(PATH, make_table("id", "name"), "name")

    def test_case_insensitive_match(self):
        MutationValidator.validate_drop_column(PATH, make_table("id", "Name"), "NAME")

    def test_column_not_found(self):
        with pytest.raises(ColumnNotFoundError) as exc_info:
            MutationValidator.validate_drop_column(PATH, make_table("id"), "missing")

        assert str(exc_info.value) == "Column [missing] is not present in table [files.events]"
        assert exc_info.value.column == "missing"

    def test_would_empty_schema(self):
        with pytest.raises(WouldEmptySchemaError, match="Cannot drop all columns of a table"):
            MutationValidator.validate_drop_column(PATH, make_table("id"), "id")

    def test_missing_column_checked_before_field_count(self):
        with pytest.raises(ColumnNotFoundError):
            MutationValidator.validate_drop_column(PATH, make_table("id"), "id2")

    @pytest.mark.parametrize(
        "columns,target,error",
        [
            (("id", "name"), "name", None),
            (("id", "name"), "ID", None),
            (("id",), "id", WouldEmptySchemaError),
            (("id",), "name", ColumnNotFoundError),
            (("a", "b", "c"), "d", ColumnNotFoundError),
            (("a", "b", "c"), "b", None),
        ],
    )
    def test_drop_allowed_iff_present_and_not_last(self, columns, target, error):
        table = make_table(*columns)

        if error is None:
            MutationValidator.validate_drop_column(PATH, table, target)
        else:
            with pytest.raises(error):
                MutationValidator.validate_drop_column(PATH, table, target)

    def test_validation_is_repeatable(self):
        table = make_table("id")
        outcomes = []

        for _ in range(2):
            try:
                MutationValidator.validate_drop_column(PATH, table, "id")
            except ValidationError as e:
                outcomes.append((type(e), str(e)))

        assert outcomes[0] == outcomes[1]
        assert table.schema.field_count == 1
