# src/taskdeck/tasks/task_models.py

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import StrEnum

from .errors import SelfReferenceError


class TaskStatus(StrEnum):
    """Work item lifecycle status."""

    NEW = "new"
    IN_PROGRESS = "in_progress"
    DONE = "done"

    @classmethod
    def parse(cls, raw: str | None) -> TaskStatus:
        """Accept 'done', 'DONE', 'in-progress', 'In Progress', ..."""
        if not raw or not raw.strip():
            raise ValueError("status is required")
        key = raw.strip().lower().replace("-", "_").replace(" ", "_")
        try:
            return cls(key)
        except ValueError:
            allowed = ", ".join(s.value for s in cls)
            raise ValueError(f"unknown status {raw!r} (expected one of: {allowed})") from None


class TaskKind(StrEnum):
    TASK = "task"
    EPIC = "epic"
    SUBTASK = "subtask"


@dataclass(slots=True)
class Task:
    """
    Plain work item.

    id == 0 means "not assigned yet"; the store allocates a positive id on add.
    A task is time-boxed only when both start_time and duration are set.
    """

    title: str
    description: str = ""
    status: TaskStatus = TaskStatus.NEW
    id: int = 0
    duration: timedelta | None = None
    start_time: datetime | None = None

    @property
    def kind(self) -> TaskKind:
        return TaskKind.TASK

    @property
    def end_time(self) -> datetime | None:
        if self.start_time is None or self.duration is None:
            return None
        return self.start_time + self.duration

    @property
    def is_time_boxed(self) -> bool:
        return self.start_time is not None and self.duration is not None

    def copy(self) -> Task:
        return replace(self)


@dataclass(slots=True)
class Epic(Task):
    """
    Grouping task. Status and the time window are derived from subtasks
    (see apply_aggregate); subtask_ids keeps insertion order without duplicates.
    """

    subtask_ids: list[int] = field(default_factory=list)
    aggregated_end: datetime | None = None

    @property
    def kind(self) -> TaskKind:
        return TaskKind.EPIC

    @property
    def end_time(self) -> datetime | None:
        return self.aggregated_end

    @property
    def is_time_boxed(self) -> bool:
        # Epic windows are derived; they never take part in conflict checks.
        return False

    def copy(self) -> Epic:
        return replace(self, subtask_ids=list(self.subtask_ids))

    def add_subtask_id(self, subtask_id: int) -> None:
        if subtask_id == self.id:
            raise SelfReferenceError(f"epic {self.id} cannot contain itself as a subtask")
        if subtask_id not in self.subtask_ids:
            self.subtask_ids.append(subtask_id)

    def remove_subtask_id(self, subtask_id: int) -> None:
        if subtask_id in self.subtask_ids:
            self.subtask_ids.remove(subtask_id)

    def clear_subtasks(self) -> None:
        self.subtask_ids.clear()

    def apply_aggregate(self, subtasks: list[Subtask]) -> None:
        """Recompute status, duration, start and end from the given subtasks."""
        self.status = epic_status(s.status for s in subtasks)
        self.duration, self.start_time, self.aggregated_end = epic_window(subtasks)


@dataclass(slots=True)
class Subtask(Task):
    epic_id: int = field(kw_only=True)

    @property
    def kind(self) -> TaskKind:
        return TaskKind.SUBTASK

    def copy(self) -> Subtask:
        return replace(self)


def epic_status(statuses: Iterable[TaskStatus]) -> TaskStatus:
    """
    Status rule for epics:
    - no subtasks or all NEW -> NEW
    - all DONE -> DONE
    - anything else -> IN_PROGRESS
    """
    seen = set(statuses)
    if not seen or seen == {TaskStatus.NEW}:
        return TaskStatus.NEW
    if seen == {TaskStatus.DONE}:
        return TaskStatus.DONE
    return TaskStatus.IN_PROGRESS


def epic_window(
    subtasks: list[Subtask],
) -> tuple[timedelta | None, datetime | None, datetime | None]:
    """Return (duration, start, end) for an epic owning `subtasks`."""
    if not subtasks:
        return None, None, None

    duration = sum((s.duration for s in subtasks if s.duration is not None), timedelta())
    starts = [s.start_time for s in subtasks if s.start_time is not None]
    ends = [e for e in (s.end_time for s in subtasks) if e is not None]

    start = min(starts) if starts else None
    end = max(ends) if ends else None
    return duration, start, end
