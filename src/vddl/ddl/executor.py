"""
Mutation execution for vddl.

Applies a validated change through the catalog's single mutation entry point
for the statement kind. Catalog errors are propagated unchanged.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..catalog import Catalog, CatalogPath, MutationOptions, ResolvedVersion
from ..exceptions import MutationOutcomeUnknownError


logger = logging.getLogger(__name__)


class ChangeType(str, Enum):
    """Types of schema changes."""

    DROP_COLUMN = "drop_column"


@dataclass(frozen=True)
class MutationOutcome:
    """What a successful mutation changed."""

    change_type: ChangeType
    path: CatalogPath
    target_object: str
    resolved_version: Optional[ResolvedVersion] = None
    commit_hash: Optional[str] = None
    execution_time_ms: float = 0.0

    @property
    def change_id(self) -> str:
        return f"{self.change_type.value}_{self.path}_{self.target_object}"


class MutationExecutor:
    """Runs catalog mutations, optionally bounded by a timeout."""

    def __init__(self, catalog: Catalog, timeout_seconds: Optional[float] = None):
        self.catalog = catalog
        self.timeout_seconds = timeout_seconds

    async def apply_drop_column(
        self,
        path: CatalogPath,
        column: str,
        options: MutationOptions,
    ) -> MutationOutcome:
        """
        Drop ``column`` from the table at ``path`` under ``options``.

        Raises:
            MutationOutcomeUnknownError: If the timeout elapsed before the
                catalog answered; the change may or may not be recorded
        """
        start_time = time.time()

        commit_hash = await self._run(
            path, self.catalog.drop_column(path, column, options)
        )

        outcome = MutationOutcome(
            change_type=ChangeType.DROP_COLUMN,
            path=path,
            target_object=column,
            resolved_version=options.resolved_version,
            commit_hash=commit_hash,
            execution_time_ms=(time.time() - start_time) * 1000,
        )
        logger.info(
            f"Successfully executed {outcome.change_id} "
            f"({outcome.execution_time_ms:.1f}ms)"
        )
        return outcome

    async def _run(self, path: CatalogPath, call):
        if self.timeout_seconds is None:
            return await call

        # The catalog call is not cancellable; a timeout only stops waiting.
        task = asyncio.ensure_future(call)
        try:
            return await asyncio.wait_for(asyncio.shield(task), self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.error(
                f"Mutation of {path} still running after {self.timeout_seconds}s"
            )
            task.add_done_callback(lambda t: _log_late_outcome(path, t))
            raise MutationOutcomeUnknownError(str(path), self.timeout_seconds)


def _log_late_outcome(path: CatalogPath, task: "asyncio.Future") -> None:
    if task.cancelled():
        logger.warning(f"Late mutation of {path} was cancelled")
    elif task.exception() is not None:
        logger.warning(f"Late mutation of {path} failed: {task.exception()}")
    else:
        logger.warning(f"Late mutation of {path} completed after timeout")
