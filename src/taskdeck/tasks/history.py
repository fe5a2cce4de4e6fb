# src/taskdeck/tasks/history.py

from __future__ import annotations

import logging

from .task_models import Task

logger = logging.getLogger(__name__)


class HistoryCache:
    """
    Most-recently-viewed items, oldest first.

    Backed by an id-keyed dict: dicts keep insertion order, so pop + re-insert moves
    an entry to the tail in O(1), and the head is the oldest view.

    limit=None keeps every distinct view; limit=N drops the oldest entry once more
    than N are held.
    """

    def __init__(self, limit: int | None = None) -> None:
        if limit is not None and limit <= 0:
            limit = None
        self._limit = limit
        self._entries: dict[int, Task] = {}

    @property
    def limit(self) -> int | None:
        return self._limit

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._entries

    def record(self, item: Task | None) -> None:
        if item is None:
            return
        self._entries.pop(item.id, None)
        self._entries[item.id] = item.copy()

        if self._limit is not None:
            while len(self._entries) > self._limit:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
                logger.debug("History limit reached; dropped id=%s", oldest)

    def evict(self, item_id: int) -> None:
        self._entries.pop(item_id, None)

    def snapshot(self) -> list[Task]:
        return [item.copy() for item in self._entries.values()]

    def clear(self) -> None:
        self._entries.clear()
