"""
SHOW BRANCHES handler.

Optional capability: the core never registers it. It is advertised through
the ``vddl.capabilities`` entry point group and loaded at startup by
editions that ship it.
"""

from typing import List

from ..exceptions import ValidationError
from ..results import CommandResult
from ..statements import SqlNode, SqlShowBranches, unwrap
from .base import DirectHandler


class ShowBranchesHandler(DirectHandler):
    """Lists all branches of a versioned source."""

    async def to_result(self, sql: str, node: SqlNode) -> List[CommandResult]:
        show_branches = unwrap(node, SqlShowBranches)
        source = show_branches.source

        if not await self.catalog.supports_versioned_tables(source):
            raise ValidationError(
                f"Source [{source}] does not support versioning; "
                f"SHOW BRANCHES is not available"
            )

        branches = await self.catalog.list_branches(source)
        self.logger.debug(f"Listed {len(branches)} branches in {source}")
        if not branches:
            return [CommandResult.successful(f"No branches in [{source}]")]

        return [
            CommandResult.successful(
                f"Branch [{branch.name}] at {branch.commit_hash}",
                ref_type="Branch",
                ref_name=branch.name,
                commit_hash=branch.commit_hash,
            )
            for branch in branches
        ]
