"""
Statement execution entry point for vddl.
"""

import logging
import time
from typing import List, Optional

from .catalog import Catalog
from .config import VddlConfig
from .ddl import RefreshScheduler
from .exceptions import VddlError
from .handlers import CapabilityRegistry
from .results import CommandResult
from .session import QueryContext, SessionContext
from .statements import SqlNode


logger = logging.getLogger(__name__)


class DDLEngine:
    """
    Executes parsed DDL statements against a catalog.

    Owns the capability registry and the refresh scheduler shared by all
    statements; everything else is built fresh for each execution.
    """

    def __init__(
        self,
        catalog: Catalog,
        config: Optional[VddlConfig] = None,
        registry: Optional[CapabilityRegistry] = None,
    ):
        self.catalog = catalog
        self.config = config or VddlConfig()
        self.refresh_scheduler = RefreshScheduler(catalog, self.config.refresh.mode)

        if registry is None:
            registry = CapabilityRegistry(disabled=self.config.capabilities.disabled)
            if self.config.capabilities.load_entry_points:
                registry.load_entry_points(self.config.capabilities.entry_point_group)
        self.registry = registry

    async def execute(
        self, sql: str, node: SqlNode, session: Optional[SessionContext] = None
    ) -> List[CommandResult]:
        """
        Execute one statement.

        Args:
            sql: Statement text as submitted
            node: Parsed statement
            session: Session issuing the statement

        Returns:
            Non-empty ordered list of command results

        Raises:
            VddlError: Typed failure of the statement, propagated unchanged
        """
        context = QueryContext(
            catalog=self.catalog,
            session=session or SessionContext(),
            config=self.config,
            refresh_scheduler=self.refresh_scheduler,
        )
        start_time = time.time()

        try:
            handler = node.to_direct_handler(context, self.registry)
            results = await handler.to_result(sql, node)
        except VddlError as e:
            logger.warning(f"{node.kind.label} failed: {e}")
            raise
        except Exception as e:
            logger.error(f"{node.kind.label} failed unexpectedly: {e}")
            raise

        elapsed_ms = (time.time() - start_time) * 1000
        logger.info(
            f"{node.kind.label} completed: {len(results)} result(s) "
            f"({elapsed_ms:.1f}ms)"
        )
        return results

    async def close(self) -> None:
        """Wait for background refreshes before shutting down."""
        await self.refresh_scheduler.wait_pending()
