# tests/helpers.py

from __future__ import annotations

from datetime import datetime, timedelta

from taskdeck.tasks.task_models import Subtask, Task

BASE = datetime(2026, 10, 20, 10, 0)


def at(hh: int, mm: int = 0) -> datetime:
    return BASE.replace(hour=hh, minute=mm)


def timed(title: str, start: datetime, minutes: int, **kw) -> Task:
    return Task(title=title, start_time=start, duration=timedelta(minutes=minutes), **kw)


def timed_sub(title: str, epic_id: int, start: datetime, minutes: int, **kw) -> Subtask:
    return Subtask(
        title=title,
        start_time=start,
        duration=timedelta(minutes=minutes),
        epic_id=epic_id,
        **kw,
    )
