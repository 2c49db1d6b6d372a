"""
ALTER TABLE ... DROP COLUMN handler.
"""

from typing import List

from ..catalog import MutationOptions
from ..ddl import MutationExecutor, MutationValidator, RefreshDecider
from ..results import CommandResult
from ..session import QueryContext
from ..statements import SqlAlterTableDropColumn, SqlNode, unwrap
from ..versioning import VersionResolver
from .base import DirectHandler


class DropColumnHandler(DirectHandler):
    """Removes a column from the table named by SqlAlterTableDropColumn."""

    def __init__(self, context: QueryContext):
        super().__init__(context)
        self.validator = MutationValidator(context.catalog, context.config.ddl)
        self.resolver = VersionResolver(context.catalog)
        self.executor = MutationExecutor(
            context.catalog, context.config.ddl.mutation_timeout_seconds
        )
        self.refresh_decider = RefreshDecider(context.catalog)

    async def to_result(self, sql: str, node: SqlNode) -> List[CommandResult]:
        drop_column = unwrap(node, SqlAlterTableDropColumn)
        column = drop_column.column_to_drop
        session = self.context.session

        path = await self.catalog.resolve_single(
            drop_column.table, session.default_schema
        )
        table = await self.catalog.get_table_no_resolve(
            path, session.get_session_version_for_source(path.root)
        )
        if table is None:
            # Raises when the session reference itself does not exist.
            await self.resolver.resolve(path.root, session)

        validate = await self.validator.validate_support_for_ddl(path, table)
        if not validate.ok:
            return [validate]

        self.validator.validate_drop_column(path, table, column)

        resolved = await self.resolver.resolve(path.root, session)
        self.resolver.require_branch(resolved, str(path))

        options = MutationOptions.for_version(resolved)
        outcome = await self.executor.apply_drop_column(path, column, options)

        action = await self.refresh_decider.decide(table, path)
        await self.context.refresh_scheduler.schedule(action)

        details = {"table": str(path)}
        if outcome.commit_hash:
            details["commit_hash"] = outcome.commit_hash
        return [CommandResult.successful(f"Column [{column}] dropped", **details)]
