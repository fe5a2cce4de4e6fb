# src/taskdeck/tasks/task_api.py

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timedelta

from ..core.state import AppState
from .errors import NotFoundError
from .task_models import Epic, Subtask, Task, TaskKind, TaskStatus

logger = logging.getLogger(__name__)

START_PREFIX = "@"
MINUTES_PREFIX = "~"


def parse_start(raw: str) -> datetime:
    """'2026-10-20T10:00' or '2026-10-20 10:00' (a leading '@' is allowed)."""
    text = raw.strip().removeprefix(START_PREFIX).strip()
    if not text:
        raise ValueError("empty start time")
    try:
        start = datetime.fromisoformat(text)
    except ValueError:
        raise ValueError(f"bad start time {raw!r} (use YYYY-MM-DDTHH:MM)") from None
    if start.tzinfo is not None:
        raise ValueError(f"bad start time {raw!r} (local time only, no UTC offset)")
    return start


def parse_minutes(raw: str) -> timedelta:
    """'90' or '~90' -> 90 minutes. Negative values are rejected."""
    text = raw.strip().removeprefix(MINUTES_PREFIX).strip()
    try:
        minutes = int(text)
    except ValueError:
        raise ValueError(f"bad duration {raw!r} (use ~<minutes>)") from None
    if minutes < 0:
        raise ValueError("duration cannot be negative")
    return timedelta(minutes=minutes)


def split_plan_args(args: list[str]) -> tuple[str, datetime | None, timedelta | None]:
    """
    Split command args into (title, start, duration).

    '@<iso>' tokens set the start, '~<minutes>' tokens set the duration,
    everything else is joined into the title.
    """
    title_parts: list[str] = []
    start: datetime | None = None
    duration: timedelta | None = None

    for token in args:
        if token.startswith(START_PREFIX):
            start = parse_start(token)
        elif token.startswith(MINUTES_PREFIX):
            duration = parse_minutes(token)
        else:
            title_parts.append(token)

    title = " ".join(title_parts).strip()
    if not title:
        raise ValueError("title is required")
    return title, start, duration


def _default_duration(state: AppState, start: datetime | None, duration: timedelta | None):
    if start is not None and duration is None:
        minutes = int(getattr(state.settings, "default_duration_minutes", 60))
        return timedelta(minutes=minutes)
    return duration


def plan_task(
    state: AppState,
    *,
    title: str,
    description: str = "",
    start: datetime | None = None,
    duration: timedelta | None = None,
) -> Task:
    """
    Convenience helper: add a plain task.
    A start without a duration gets settings.default_duration_minutes.
    """
    task = Task(
        title=title,
        description=description,
        start_time=start,
        duration=_default_duration(state, start, duration),
    )
    stored = state.task_store.add_task(task)
    logger.info("Planned task id=%s start=%s", stored.id, stored.start_time)
    return stored


def plan_epic(state: AppState, *, title: str, description: str = "") -> Epic:
    stored = state.task_store.add_epic(Epic(title=title, description=description))
    logger.info("Planned epic id=%s", stored.id)
    return stored


def plan_subtask(
    state: AppState,
    *,
    epic_id: int,
    title: str,
    description: str = "",
    start: datetime | None = None,
    duration: timedelta | None = None,
) -> Subtask:
    subtask = Subtask(
        title=title,
        description=description,
        start_time=start,
        duration=_default_duration(state, start, duration),
        epic_id=epic_id,
    )
    stored = state.task_store.add_subtask(subtask)
    logger.info("Planned subtask id=%s epic=%s", stored.id, epic_id)
    return stored


def set_status(state: AppState, kind: TaskKind, item_id: int, status: TaskStatus) -> Task:
    """
    Change the status of a task or subtask through a full-replace update.

    Looks the item up via get_all_* so the change is not recorded as a view.
    Epic status is derived, so epics are rejected.
    """
    store = state.task_store
    if kind is TaskKind.TASK:
        current = next((t for t in store.get_all_tasks() if t.id == item_id), None)
        if current is None:
            raise NotFoundError(f"task {item_id} not found")
        return store.update_task(replace(current, status=status))

    if kind is TaskKind.SUBTASK:
        current_sub = next((s for s in store.get_all_subtasks() if s.id == item_id), None)
        if current_sub is None:
            raise NotFoundError(f"subtask {item_id} not found")
        return store.update_subtask(replace(current_sub, status=status))

    raise ValueError("epic status is derived from its subtasks")


def format_window(item: Task) -> str:
    if item.start_time is None and item.duration is None:
        return "unscheduled"
    parts: list[str] = []
    if item.start_time is not None:
        parts.append(f"{item.start_time:%Y-%m-%d %H:%M}")
    end = item.end_time
    if end is not None:
        parts.append(f"-> {end:%Y-%m-%d %H:%M}")
    if item.duration is not None:
        parts.append(f"({int(item.duration.total_seconds() // 60)} min)")
    return " ".join(parts)


def format_item(item: Task) -> str:
    line = f"[{item.kind.value} {item.id}] {item.title} <{item.status.value}> {format_window(item)}"
    if isinstance(item, Subtask):
        line += f" epic={item.epic_id}"
    return line
