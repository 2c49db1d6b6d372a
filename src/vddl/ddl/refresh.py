"""
Post-mutation metadata refresh for vddl.

Decides whether a successful mutation needs cached dataset metadata to be
re-derived, and runs that refresh either inline or in the background.
Refresh failures never alter a statement result that was already produced;
they are reported on this module's logger and to registered listeners.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Literal, Optional, Set

from ..catalog import Catalog, CatalogPath, CatalogTable
from ..exceptions import RefreshError


logger = logging.getLogger(__name__)

RefreshFailureListener = Callable[[RefreshError], None]


class RefreshActionType(str, Enum):
    """What has to happen after a mutation."""

    NONE = "none"
    REFRESH_DATASET = "refresh_dataset"


@dataclass(frozen=True)
class RefreshAction:
    """Decision produced by the RefreshDecider."""

    action_type: RefreshActionType
    path: Optional[CatalogPath] = None

    @classmethod
    def none(cls) -> "RefreshAction":
        return cls(RefreshActionType.NONE)

    @classmethod
    def refresh_dataset(cls, path: CatalogPath) -> "RefreshAction":
        return cls(RefreshActionType.REFRESH_DATASET, path)

    @property
    def is_required(self) -> bool:
        return self.action_type == RefreshActionType.REFRESH_DATASET


class RefreshDecider:
    """Chooses a refresh action from the table's provenance."""

    def __init__(self, catalog: Catalog):
        self.catalog = catalog

    async def decide(self, table: CatalogTable, path: CatalogPath) -> RefreshAction:
        # Internal Iceberg and JSON tables already carry the new schema.
        if table.is_internal_iceberg_or_json:
            return RefreshAction.none()

        # Versioned sources describe the schema per version themselves.
        if await self.catalog.supports_versioned_tables(path.root):
            return RefreshAction.none()

        return RefreshAction.refresh_dataset(path)


class RefreshScheduler:
    """Runs refresh actions synchronously or as tracked background tasks."""

    def __init__(
        self,
        catalog: Catalog,
        mode: Literal["sync", "async"] = "sync",
    ):
        self.catalog = catalog
        self.mode = mode
        self._listeners: List[RefreshFailureListener] = []
        self._pending: Set[asyncio.Task] = set()

    def add_failure_listener(self, listener: RefreshFailureListener) -> None:
        self._listeners.append(listener)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def schedule(self, action: RefreshAction) -> None:
        """Carry out ``action``; returns once it is done or handed off."""
        if not action.is_required:
            return

        if self.mode == "sync":
            await self._refresh(action.path)
            return

        task = asyncio.create_task(self._refresh(action.path))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        logger.debug(f"Scheduled background refresh of {action.path}")

    async def wait_pending(self) -> None:
        """Wait for every background refresh started so far."""
        if self._pending:
            await asyncio.gather(*list(self._pending))

    async def _refresh(self, path: CatalogPath) -> None:
        try:
            await self.catalog.refresh_dataset(path)
            logger.info(f"Refreshed dataset metadata for {path}")
        except Exception as e:
            error = RefreshError(str(path), cause=e)
            logger.error(str(error))
            self._notify(error)

    def _notify(self, error: RefreshError) -> None:
        for listener in self._listeners:
            try:
                listener(error)
            except Exception as e:
                logger.error(f"Refresh failure listener raised: {e}")
