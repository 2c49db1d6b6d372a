"""
Abstract base class for statement handlers.
"""

import logging
from abc import ABC, abstractmethod
from typing import List

from ..results import CommandResult
from ..session import QueryContext
from ..statements import SqlNode


class DirectHandler(ABC):
    """
    Executes one statement kind directly against the catalog.

    Handlers are built fresh for every statement from the current
    QueryContext and are never reused.
    """

    def __init__(self, context: QueryContext):
        self.context = context
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    def catalog(self):
        return self.context.catalog

    @abstractmethod
    async def to_result(self, sql: str, node: SqlNode) -> List[CommandResult]:
        """
        Execute ``node`` and return its results.

        Args:
            sql: Original statement text, used for logging only
            node: Parsed statement

        Returns:
            A non-empty, ordered list of command results
        """
