"""
Registry of optional statement handlers.

Some statement kinds are only implemented by an optional edition of vddl.
Editions register a factory per statement kind, either directly or through
the ``vddl.capabilities`` entry point group. A kind without a factory is a
normal, typed outcome: dispatch raises UnsupportedError.
"""

import logging
from importlib import metadata
from typing import Callable, Dict, Iterable, List, Optional, Union

from ..exceptions import CapabilityConstructionError, UnsupportedError, ValidationError
from ..session import QueryContext
from ..statements import StatementKind
from .base import DirectHandler


logger = logging.getLogger(__name__)

HandlerFactory = Callable[[QueryContext], DirectHandler]

DEFAULT_ENTRY_POINT_GROUP = "vddl.capabilities"


def _lookup_kind(kind: Union[str, StatementKind]) -> Optional[StatementKind]:
    try:
        return StatementKind(kind)
    except ValueError:
        return None


def _label(kind: Union[str, StatementKind]) -> str:
    if isinstance(kind, StatementKind):
        return kind.label
    return str(kind).replace("_", " ").upper()


class CapabilityRegistry:
    """Maps statement kinds to handler factories."""

    def __init__(self, disabled: Optional[Iterable[Union[str, StatementKind]]] = None):
        self._factories: Dict[StatementKind, HandlerFactory] = {}
        self._disabled = set()
        for name in disabled or ():
            kind = _lookup_kind(name)
            if kind is None:
                logger.warning(f"Ignoring unknown statement kind in disabled list: {name}")
                continue
            self._disabled.add(kind)

    def register(self, kind: Union[str, StatementKind], factory: HandlerFactory) -> None:
        """
        Register the factory that builds handlers for ``kind``.

        Args:
            kind: Statement kind or its string value
            factory: Callable taking a QueryContext and returning a DirectHandler

        Raises:
            ValidationError: If the kind is unknown or the factory is not callable
        """
        known = _lookup_kind(kind)
        if known is None:
            raise ValidationError(f"Unknown statement kind: {kind}")
        kind = known
        if not callable(factory):
            raise ValidationError(f"Factory for {kind.value} must be callable")

        if kind in self._disabled:
            logger.info(f"Skipping disabled capability: {kind.value}")
            return

        self._factories[kind] = factory
        logger.info(f"Registered capability: {kind.value}")

    def unregister(self, kind: Union[str, StatementKind]) -> None:
        self._factories.pop(_lookup_kind(kind), None)

    def is_supported(self, kind: Union[str, StatementKind]) -> bool:
        return _lookup_kind(kind) in self._factories

    def supported_kinds(self) -> List[StatementKind]:
        return sorted(self._factories, key=lambda k: k.value)

    def dispatch(self, kind: Union[str, StatementKind], context: QueryContext) -> DirectHandler:
        """
        Build a fresh handler for ``kind``.

        Raises:
            UnsupportedError: If ``kind`` is unknown or has no registered factory
            CapabilityConstructionError: If the factory fails or does not
                return a DirectHandler
        """
        known = _lookup_kind(kind)
        factory = self._factories.get(known)
        if factory is None:
            raise UnsupportedError(_label(kind))
        kind = known

        try:
            handler = factory(context)
        except Exception as e:
            logger.error(f"Failed to create handler for {kind.value}: {e}")
            raise CapabilityConstructionError(kind.value, e) from e

        if not isinstance(handler, DirectHandler):
            error = TypeError(
                f"Factory returned {type(handler).__name__}, not a DirectHandler"
            )
            raise CapabilityConstructionError(kind.value, error)

        logger.debug(f"Dispatched {kind.value} to {type(handler).__name__}")
        return handler

    def load_entry_points(self, group: str = DEFAULT_ENTRY_POINT_GROUP) -> List[str]:
        """
        Register factories advertised by installed distributions.

        Entry point names must be statement kind values; unknown names are
        skipped with a warning.

        Returns:
            Names of the entry points that were registered
        """
        loaded = []
        for entry in metadata.entry_points(group=group):
            try:
                kind = StatementKind(entry.name)
            except ValueError:
                logger.warning(f"Ignoring entry point for unknown statement kind: {entry.name}")
                continue

            self.register(kind, entry.load())
            loaded.append(entry.name)

        return loaded
