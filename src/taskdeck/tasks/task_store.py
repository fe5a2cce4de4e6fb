# src/taskdeck/tasks/task_store.py

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field

from .errors import (
    InvalidReferenceError,
    NotFoundError,
    SelfReferenceError,
    TimeConflictError,
)
from .history import HistoryCache
from .scheduling import SchedulingIndex
from .task_models import Epic, Subtask, Task, TaskKind

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class StoreSnapshot:
    """Every entity of a store, as copies (see TaskStore.snapshot / TaskStore.restore)."""

    tasks: list[Task] = field(default_factory=list)
    epics: list[Epic] = field(default_factory=list)
    subtasks: list[Subtask] = field(default_factory=list)


@dataclass(slots=True)
class _Captured:
    next_id: int
    tasks: dict[int, Task]
    epics: dict[int, Epic]
    subtasks: dict[int, Subtask]
    history: list[Task]


class TaskStore:
    """
    In-memory task store: tasks, epics and subtasks.

    Responsibilities:
    - allocate ids from one counter shared by all kinds (never reused)
    - keep epic status / time window in sync with their subtasks
    - reject time-boxed items whose window overlaps an admitted one
    - record lookups by id in the view history

    Every entity handed out (including the one echoed back from add/update) is a copy.
    A rejected operation leaves entities, scheduling index and history untouched.

    Thread-safety:
    - one coarse RLock held for the whole of each public method
    """

    def __init__(self, history_limit: int | None = None) -> None:
        self._lock = threading.RLock()
        self._next_id = 1
        self._tasks: dict[int, Task] = {}
        self._epics: dict[int, Epic] = {}
        self._subtasks: dict[int, Subtask] = {}
        self._index = SchedulingIndex()
        self._history = HistoryCache(limit=history_limit)
        logger.info("TaskStore ready history_limit=%s", self._history.limit)

    # ---- low-level helpers ----

    def _id_in_use(self, item_id: int) -> bool:
        return item_id in self._tasks or item_id in self._epics or item_id in self._subtasks

    def _candidate_id(self, supplied: int) -> int:
        return supplied if supplied > 0 else self._next_id

    def _ensure_free(self, item_id: int) -> None:
        if self._id_in_use(item_id):
            raise ValueError(f"id {item_id} is already in use")

    def _commit_id(self, item_id: int) -> None:
        self._next_id = max(self._next_id, item_id + 1)

    def _check_window(self, candidate: Task) -> None:
        if candidate.start_time is not None and candidate.start_time.tzinfo is not None:
            raise ValueError(
                f"{candidate.kind.value} '{candidate.title}': start time must be naive local time"
            )
        conflict = self._index.find_conflict(candidate, excluding_id=candidate.id)
        if conflict is None:
            return
        logger.info(
            "Time conflict: %s id=%s overlaps id=%s",
            candidate.kind.value,
            candidate.id,
            conflict.id,
        )
        raise TimeConflictError(
            f"{candidate.kind.value} '{candidate.title}' "
            f"[{candidate.start_time:%Y-%m-%d %H:%M} - {candidate.end_time:%Y-%m-%d %H:%M}) "
            f"overlaps {conflict.kind.value} {conflict.id} '{conflict.title}'",
            conflicting_id=conflict.id,
        )

    def _swap_window(self, current: Task, candidate: Task) -> None:
        """Release current's slot, check and admit candidate; on any failure re-admit current."""
        self._index.release(current.id)
        try:
            self._check_window(candidate)
            self._index.admit(candidate)
        except Exception:
            self._index.release(candidate.id)
            self._index.admit(current)
            raise

    def _refresh_epic(self, epic: Epic) -> None:
        owned = [self._subtasks[sid] for sid in epic.subtask_ids if sid in self._subtasks]
        epic.apply_aggregate(owned)
        logger.debug(
            "Epic %s aggregated status=%s start=%s duration=%s end=%s",
            epic.id,
            epic.status.value,
            epic.start_time,
            epic.duration,
            epic.end_time,
        )

    def _forget(self, item_id: int) -> None:
        self._index.release(item_id)
        self._history.evict(item_id)

    # ---- add ----

    def add_task(self, task: Task) -> Task:
        if task is None:
            raise ValueError("task is required")
        if task.kind is not TaskKind.TASK:
            raise ValueError(f"add_task expects a plain task, got {task.kind.value}")

        with self._lock:
            item_id = self._candidate_id(task.id)
            self._ensure_free(item_id)

            stored = task.copy()
            stored.id = item_id
            self._check_window(stored)

            self._index.admit(stored)
            self._tasks[item_id] = stored
            self._commit_id(item_id)
            logger.debug("Task added id=%s status=%s", item_id, stored.status.value)
            return stored.copy()

    def add_epic(self, epic: Epic) -> Epic:
        """
        Add an epic. Caller-supplied subtasks, status and time fields are ignored:
        a new epic starts empty and NEW, and only subtasks change that.
        """
        if epic is None:
            raise ValueError("epic is required")
        if epic.kind is not TaskKind.EPIC:
            raise ValueError(f"add_epic expects an epic, got {epic.kind.value}")

        with self._lock:
            item_id = self._candidate_id(epic.id)
            self._ensure_free(item_id)

            stored = Epic(title=epic.title, description=epic.description, id=item_id)
            self._epics[item_id] = stored
            self._commit_id(item_id)
            logger.debug("Epic added id=%s", item_id)
            return stored.copy()

    def add_subtask(self, subtask: Subtask) -> Subtask:
        if subtask is None:
            raise ValueError("subtask is required")
        if subtask.kind is not TaskKind.SUBTASK:
            raise ValueError(f"add_subtask expects a subtask, got {subtask.kind.value}")

        with self._lock:
            item_id = self._candidate_id(subtask.id)
            if subtask.id > 0 and subtask.epic_id == subtask.id:
                raise SelfReferenceError(f"subtask {item_id} cannot be its own epic")

            epic = self._epics.get(subtask.epic_id)
            if epic is None:
                logger.info("Subtask rejected: epic %s does not exist", subtask.epic_id)
                raise InvalidReferenceError(f"epic {subtask.epic_id} does not exist")

            self._ensure_free(item_id)

            stored = subtask.copy()
            stored.id = item_id
            self._check_window(stored)

            self._index.admit(stored)
            self._subtasks[item_id] = stored
            epic.add_subtask_id(item_id)
            self._refresh_epic(epic)
            self._commit_id(item_id)
            logger.debug("Subtask added id=%s epic=%s", item_id, epic.id)
            return stored.copy()

    # ---- lookups ----

    def get_task_by_id(self, task_id: int) -> Task | None:
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None:
                return None
            self._history.record(task)
            return task.copy()

    def get_epic_by_id(self, epic_id: int) -> Epic | None:
        with self._lock:
            epic = self._epics.get(epic_id)
            if epic is None:
                return None
            self._history.record(epic)
            return epic.copy()

    def get_subtask_by_id(self, subtask_id: int) -> Subtask | None:
        with self._lock:
            subtask = self._subtasks.get(subtask_id)
            if subtask is None:
                return None
            self._history.record(subtask)
            return subtask.copy()

    def get_all_tasks(self) -> list[Task]:
        with self._lock:
            return [t.copy() for _, t in sorted(self._tasks.items())]

    def get_all_epics(self) -> list[Epic]:
        with self._lock:
            return [e.copy() for _, e in sorted(self._epics.items())]

    def get_all_subtasks(self) -> list[Subtask]:
        with self._lock:
            return [s.copy() for _, s in sorted(self._subtasks.items())]

    def get_subtasks_of_epic(self, epic_id: int) -> list[Subtask]:
        """Subtasks in the order they were added to the epic; [] for an unknown epic."""
        with self._lock:
            epic = self._epics.get(epic_id)
            if epic is None:
                return []
            return [self._subtasks[sid].copy() for sid in epic.subtask_ids if sid in self._subtasks]

    def get_prioritized_tasks(self) -> list[Task]:
        with self._lock:
            return self._index.prioritized()

    def get_history(self) -> list[Task]:
        with self._lock:
            return self._history.snapshot()

    def counts(self) -> dict[str, int]:
        with self._lock:
            return {
                "tasks": len(self._tasks),
                "epics": len(self._epics),
                "subtasks": len(self._subtasks),
            }

    # ---- updates (full replacement) ----

    def update_task(self, task: Task) -> Task:
        if task is None:
            raise ValueError("task is required")

        with self._lock:
            current = self._tasks.get(task.id)
            if current is None:
                raise NotFoundError(f"task {task.id} not found")

            candidate = Task(
                title=task.title,
                description=task.description,
                status=task.status,
                id=current.id,
                duration=task.duration,
                start_time=task.start_time,
            )
            self._swap_window(current, candidate)
            self._tasks[candidate.id] = candidate
            logger.debug("Task updated id=%s status=%s", candidate.id, candidate.status.value)
            return candidate.copy()

    def update_epic(self, epic: Epic) -> Epic:
        """Only title/description are taken from the caller; the rest is re-derived."""
        if epic is None:
            raise ValueError("epic is required")

        with self._lock:
            current = self._epics.get(epic.id)
            if current is None:
                raise NotFoundError(f"epic {epic.id} not found")

            current.title = epic.title
            current.description = epic.description
            self._refresh_epic(current)
            logger.debug("Epic updated id=%s", current.id)
            return current.copy()

    def update_subtask(self, subtask: Subtask) -> Subtask:
        if subtask is None:
            raise ValueError("subtask is required")

        with self._lock:
            current = self._subtasks.get(subtask.id)
            if current is None:
                raise NotFoundError(f"subtask {subtask.id} not found")
            if subtask.epic_id == subtask.id:
                raise SelfReferenceError(f"subtask {subtask.id} cannot be its own epic")
            if subtask.epic_id != current.epic_id:
                raise InvalidReferenceError(
                    f"subtask {subtask.id} belongs to epic {current.epic_id}; "
                    f"moving it to epic {subtask.epic_id} is not supported"
                )

            candidate = Subtask(
                title=subtask.title,
                description=subtask.description,
                status=subtask.status,
                id=current.id,
                duration=subtask.duration,
                start_time=subtask.start_time,
                epic_id=current.epic_id,
            )
            self._swap_window(current, candidate)
            self._subtasks[candidate.id] = candidate

            epic = self._epics.get(candidate.epic_id)
            if epic is not None:
                self._refresh_epic(epic)
            logger.debug("Subtask updated id=%s status=%s", candidate.id, candidate.status.value)
            return candidate.copy()

    # ---- deletes ----

    def delete_task_by_id(self, task_id: int) -> None:
        with self._lock:
            if self._tasks.pop(task_id, None) is None:
                raise NotFoundError(f"task {task_id} not found")
            self._forget(task_id)
            logger.debug("Task deleted id=%s", task_id)

    def delete_epic_by_id(self, epic_id: int) -> None:
        with self._lock:
            epic = self._epics.pop(epic_id, None)
            if epic is None:
                raise NotFoundError(f"epic {epic_id} not found")
            for sid in epic.subtask_ids:
                self._subtasks.pop(sid, None)
                self._forget(sid)
            self._history.evict(epic_id)
            logger.debug("Epic deleted id=%s subtasks=%s", epic_id, epic.subtask_ids)

    def delete_subtask_by_id(self, subtask_id: int) -> None:
        with self._lock:
            subtask = self._subtasks.pop(subtask_id, None)
            if subtask is None:
                raise NotFoundError(f"subtask {subtask_id} not found")
            self._forget(subtask_id)

            epic = self._epics.get(subtask.epic_id)
            if epic is not None:
                epic.remove_subtask_id(subtask_id)
                self._refresh_epic(epic)
            logger.debug("Subtask deleted id=%s epic=%s", subtask_id, subtask.epic_id)

    def delete_all_tasks(self) -> None:
        with self._lock:
            for task_id in self._tasks:
                self._forget(task_id)
            n = len(self._tasks)
            self._tasks.clear()
            logger.debug("All tasks deleted n=%s", n)

    def delete_all_epics(self) -> None:
        with self._lock:
            for subtask_id in self._subtasks:
                self._forget(subtask_id)
            for epic_id in self._epics:
                self._history.evict(epic_id)
            n = len(self._epics)
            self._subtasks.clear()
            self._epics.clear()
            logger.debug("All epics deleted n=%s", n)

    def delete_all_subtasks(self) -> None:
        with self._lock:
            for subtask_id in self._subtasks:
                self._forget(subtask_id)
            n = len(self._subtasks)
            self._subtasks.clear()
            for epic in self._epics.values():
                epic.clear_subtasks()
                self._refresh_epic(epic)
            logger.debug("All subtasks deleted n=%s", n)

    # ---- snapshot / restore ----

    def snapshot(self) -> StoreSnapshot:
        with self._lock:
            return StoreSnapshot(
                tasks=self.get_all_tasks(),
                epics=self.get_all_epics(),
                subtasks=self.get_all_subtasks(),
            )

    def _capture(self) -> _Captured:
        return _Captured(
            next_id=self._next_id,
            tasks={k: v.copy() for k, v in self._tasks.items()},
            epics={k: v.copy() for k, v in self._epics.items()},
            subtasks={k: v.copy() for k, v in self._subtasks.items()},
            history=self._history.snapshot(),
        )

    def _rollback(self, captured: _Captured) -> None:
        self._next_id = captured.next_id
        self._tasks = captured.tasks
        self._epics = captured.epics
        self._subtasks = captured.subtasks

        self._index.clear()
        for item in (*self._tasks.values(), *self._subtasks.values()):
            self._index.admit(item)

        self._history.clear()
        for item in captured.history:
            self._history.record(item)

    def restore(self, snapshot: StoreSnapshot) -> None:
        """
        Re-insert a snapshot keeping its ids.

        Epics go first so subtasks can reference them; subtasks are replayed in each
        epic's own order so subtask lists and the derived epic fields come out the same.
        If any item is rejected, the store is put back as it was and the error propagates.
        """
        with self._lock:
            captured = self._capture()
            try:
                for epic in snapshot.epics:
                    self.add_epic(epic)
                for task in snapshot.tasks:
                    self.add_task(task)

                by_id = {s.id: s for s in snapshot.subtasks}
                ordered: list[Subtask] = []
                for epic in snapshot.epics:
                    ordered.extend(by_id.pop(sid) for sid in epic.subtask_ids if sid in by_id)
                ordered.extend(by_id.values())
                for subtask in ordered:
                    self.add_subtask(subtask)
            except Exception as e:
                logger.warning("Restore failed (%s); store rolled back", e)
                self._rollback(captured)
                raise

            logger.info(
                "Restored tasks=%s epics=%s subtasks=%s next_id=%s",
                len(snapshot.tasks),
                len(snapshot.epics),
                len(snapshot.subtasks),
                self._next_id,
            )
