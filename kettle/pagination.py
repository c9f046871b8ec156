"""
Pagination support for Kettle.

This module provides the page result returned by queries and the mutable
query state (limit, index, cursor) a record carries between calls.
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass
class PageResult(Generic[T]):
    """
    Represents a single page of results with pagination cursor.

    Attributes:
        items: Items of this page
        last_evaluated_key: Cursor for the next page (None if no more pages)
        count: Number of items in this page
    """

    items: list[T]
    last_evaluated_key: dict[str, Any] | None
    count: int

    @property
    def has_more(self) -> bool:
        """Returns True if there are more pages available."""
        return self.last_evaluated_key is not None


@dataclass
class QueryState:
    """
    Query parameters accumulated on a record before find_many().

    last_evaluated_key is output only: it is set after a bounded query runs.
    """

    limit: int | None = None
    index_name: str | None = None
    exclusive_start_key: dict[str, Any] | None = None
    consistent_read: bool = False
    last_evaluated_key: dict[str, Any] | None = None

    def is_bounded(self) -> bool:
        return self.limit is not None and self.limit > 0

    def reset(self) -> None:
        """Clears every input parameter together."""
        self.limit = None
        self.index_name = None
        self.exclusive_start_key = None
        self.consistent_read = False
