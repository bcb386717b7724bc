"""Bounded, write-through query history."""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

from nlq_console.config import HistoryConfig
from nlq_console.storage import Storage
from nlq_console.types import HistoryLog, QueryHistoryItem, QueryResult, utc_now

logger = logging.getLogger(__name__)

T = TypeVar("T")


class HistoryStore:
    """Newest-first summaries of past queries, capped and persisted.

    Items only record the query text and the shape of its result (type, chart,
    table); result payloads are never stored. Every ``record`` call rewrites
    the whole capped log to durable storage.
    """

    def __init__(self, storage: Storage, config: HistoryConfig | None = None) -> None:
        self.storage = storage
        self.config = config or HistoryConfig()
        self._items: list[QueryHistoryItem] = []
        self._last_id = 0

    @property
    def items(self) -> HistoryLog:
        return tuple(self._items)

    def load(self) -> HistoryLog:
        try:
            raw = self.storage.load_json(self.config.storage_key)
        except ValueError:
            logger.exception("Error loading query history; starting empty")
            raw = None

        items: list[QueryHistoryItem] = []
        if isinstance(raw, list):
            for entry in raw:
                if not isinstance(entry, dict):
                    continue
                try:
                    items.append(QueryHistoryItem.from_dict(entry))
                except (KeyError, TypeError, ValueError):
                    logger.warning("Skipping malformed history entry: %r", entry)
        elif raw is not None:
            logger.warning("Ignoring query history that is not a list")

        self._items = items[: self.config.max_items]
        self._last_id = max((item.id for item in self._items), default=0)
        return self.items

    def record(self, query: str, result: QueryResult) -> QueryHistoryItem:
        item = QueryHistoryItem(
            id=self._next_id(),
            query=query,
            timestamp=utc_now(),
            result_type=result.result_type,
            has_chart=result.has_chart,
            has_table=result.has_table,
        )
        self._items = [item, *self._items][: self.config.max_items]
        self.storage.save_json(
            self.config.storage_key, [entry.to_dict() for entry in self._items]
        )
        return item

    def get(self, item_id: int) -> QueryHistoryItem:
        for item in self._items:
            if item.id == item_id:
                return item
        raise KeyError(f"History item not found: {item_id}")

    def repeat(
        self, item: QueryHistoryItem, submit: Callable[[str], Awaitable[T]]
    ) -> Awaitable[T]:
        """Re-run a past query through ``submit``."""
        return submit(item.query)

    def _next_id(self) -> int:
        # Millisecond clock, bumped so ids stay strictly increasing.
        self._last_id = max(int(time.time() * 1000), self._last_id + 1)
        return self._last_id
