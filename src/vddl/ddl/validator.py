"""
Mutation validation for vddl.

Checks that a DDL statement may run against its target table before any
version is resolved or any catalog state is changed.
"""

import logging
from typing import Optional

from ..catalog import Catalog, CatalogPath, CatalogTable
from ..config import DDLConfig
from ..exceptions import (
    ColumnNotFoundError,
    TableNotFoundError,
    ValidationError,
    WouldEmptySchemaError,
)
from ..results import CommandResult


logger = logging.getLogger(__name__)


class MutationValidator:
    """Validates DDL eligibility and statement-specific preconditions."""

    def __init__(self, catalog: Catalog, config: Optional[DDLConfig] = None):
        self.catalog = catalog
        self.config = config or DDLConfig()

    async def validate_support_for_ddl(
        self, path: CatalogPath, table: Optional[CatalogTable]
    ) -> CommandResult:
        """
        Confirm the target accepts DDL at all.

        A missing table or a view is a user error and raises. Anything the
        catalog itself refuses is handed back as a failed result carrying the
        catalog's own message, so the handler can return it unchanged.

        Raises:
            TableNotFoundError: If the table does not exist
            ValidationError: If the target is a view
        """
        if table is None:
            raise TableNotFoundError(str(path))

        if table.is_view:
            raise ValidationError(f"[{path}] is a view. DDL operations are not supported on views")

        if not self.config.enabled:
            return CommandResult.failed("DDL operations are disabled")

        support = await self.catalog.check_ddl_support(path, table)
        if not support.supported:
            logger.info(f"Catalog refused DDL on {path}: {support.message}")
            return CommandResult.failed(support.message)

        return CommandResult.successful(f"DDL supported on [{path}]")

    @staticmethod
    def validate_drop_column(
        path: CatalogPath, table: CatalogTable, column: str
    ) -> None:
        """
        Check that ``column`` can be removed from ``table``.

        Raises:
            ColumnNotFoundError: If the column is absent (case-insensitive)
            WouldEmptySchemaError: If it is the table's only column
        """
        if not table.schema.has_field(column):
            raise ColumnNotFoundError(column, str(path))

        if table.schema.field_count <= 1:
            raise WouldEmptySchemaError(str(path))
