"""
Statement nodes handed to vddl by the SQL parser.

Each node knows its statement kind, can render itself back to SQL and
produces the handler that executes it.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Tuple, Type, TypeVar

from .exceptions import InternalError

if TYPE_CHECKING:
    from .handlers.base import DirectHandler
    from .handlers.capabilities import CapabilityRegistry
    from .session import QueryContext


_SIMPLE_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

N = TypeVar("N", bound="SqlNode")


class StatementKind(str, Enum):
    """Statement kinds that can be dispatched to a handler."""

    ALTER_TABLE_DROP_COLUMN = "alter_table_drop_column"
    SHOW_BRANCHES = "show_branches"

    @property
    def label(self) -> str:
        """Human-readable statement name used in messages."""
        return self.value.replace("_", " ").upper()


def quote_identifier(identifier: str) -> str:
    if _SIMPLE_IDENTIFIER.match(identifier):
        return identifier
    return '"' + identifier.replace('"', '""') + '"'


class SqlNode(ABC):
    """Base class for parsed statements."""

    kind: StatementKind

    @abstractmethod
    def unparse(self) -> str:
        """Render the statement as SQL text."""

    @abstractmethod
    def to_direct_handler(
        self, context: "QueryContext", registry: "CapabilityRegistry"
    ) -> "DirectHandler":
        """Build the handler that executes this statement."""


@dataclass(frozen=True)
class SqlAlterTableDropColumn(SqlNode):
    """ALTER TABLE <table> DROP COLUMN <column>"""

    table: Tuple[str, ...]
    column_to_drop: str

    kind = StatementKind.ALTER_TABLE_DROP_COLUMN

    def __post_init__(self):
        object.__setattr__(self, "table", tuple(self.table))

    def unparse(self) -> str:
        table = ".".join(quote_identifier(part) for part in self.table)
        return f"ALTER TABLE {table} DROP COLUMN {quote_identifier(self.column_to_drop)}"

    def to_direct_handler(
        self, context: "QueryContext", registry: "CapabilityRegistry"
    ) -> "DirectHandler":
        # Import here to avoid circular imports
        from .handlers.drop_column import DropColumnHandler

        return DropColumnHandler(context)


@dataclass(frozen=True)
class SqlShowBranches(SqlNode):
    """SHOW BRANCHES IN <source>"""

    source: str

    kind = StatementKind.SHOW_BRANCHES

    def unparse(self) -> str:
        return f"SHOW BRANCHES IN {quote_identifier(self.source)}"

    def to_direct_handler(
        self, context: "QueryContext", registry: "CapabilityRegistry"
    ) -> "DirectHandler":
        # Only available when an installed edition registers a handler.
        return registry.dispatch(self.kind, context)


def unwrap(node: SqlNode, node_class: Type[N]) -> N:
    """Narrow ``node`` to ``node_class`` or fail as an internal error."""
    if not isinstance(node, node_class):
        raise InternalError(
            f"Expected {node_class.__name__} but got {type(node).__name__}"
        )
    return node
