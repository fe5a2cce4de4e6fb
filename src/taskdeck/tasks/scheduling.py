# src/taskdeck/tasks/scheduling.py

from __future__ import annotations

"""
Scheduling index.

Keeps the set of admitted time-boxed items (tasks and subtasks with both a start
time and a duration) and answers two questions:
- would a candidate window overlap an admitted one?
- what do the admitted items look like ordered by start time?

Windows are half-open: [start, start + duration). Zero-length windows never overlap.
The index only bookkeeps; the caller decides when to admit (after a successful check).
"""

import bisect
import logging
from datetime import datetime

from .task_models import Task

logger = logging.getLogger(__name__)


def windows_overlap(a: Task, b: Task) -> bool:
    a_start, a_end = a.start_time, a.end_time
    b_start, b_end = b.start_time, b.end_time
    if a_start is None or a_end is None or b_start is None or b_end is None:
        return False
    if a_start == a_end or b_start == b_end:
        return False
    return a_start < b_end and b_start < a_end


class SchedulingIndex:
    def __init__(self) -> None:
        self._items: dict[int, Task] = {}
        # (start_time, id) kept sorted for the priority view.
        self._order: list[tuple[datetime, int]] = []

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def find_conflict(self, candidate: Task, excluding_id: int | None = None) -> Task | None:
        """Return a copy of the earliest admitted item overlapping `candidate`, if any."""
        if not candidate.is_time_boxed:
            return None
        for _, item_id in self._order:
            if item_id == excluding_id:
                continue
            item = self._items[item_id]
            if windows_overlap(candidate, item):
                return item.copy()
        return None

    def overlaps(self, candidate: Task, excluding_id: int | None = None) -> bool:
        return self.find_conflict(candidate, excluding_id) is not None

    def admit(self, item: Task) -> None:
        if not item.is_time_boxed:
            return
        if item.id in self._items:
            self.release(item.id)
        stored = item.copy()
        # insort first: if the key cannot be ordered, nothing has been recorded yet.
        bisect.insort(self._order, (stored.start_time, stored.id))
        self._items[stored.id] = stored
        logger.debug("Admitted id=%s window=%s..%s", stored.id, stored.start_time, stored.end_time)

    def release(self, item: Task | int) -> None:
        item_id = item if isinstance(item, int) else item.id
        stored = self._items.pop(item_id, None)
        if stored is None:
            return
        key = (stored.start_time, stored.id)
        pos = bisect.bisect_left(self._order, key)
        if pos < len(self._order) and self._order[pos] == key:
            del self._order[pos]

    def prioritized(self) -> list[Task]:
        return [self._items[item_id].copy() for _, item_id in self._order]

    def clear(self) -> None:
        self._items.clear()
        self._order.clear()
