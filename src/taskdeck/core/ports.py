# src/taskdeck/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by adapters.

Connectors and commands depend on this Protocol instead of the concrete TaskStore,
so a wrapped store (e.g. one that snapshots after every write) can be dropped in.
"""

from typing import Protocol

from ..tasks.task_models import Epic, Subtask, Task
from ..tasks.task_store import StoreSnapshot


class TaskRepo(Protocol):
    # Creation
    def add_task(self, task: Task) -> Task: ...
    def add_epic(self, epic: Epic) -> Epic: ...
    def add_subtask(self, subtask: Subtask) -> Subtask: ...

    # Lookups (by-id lookups are recorded in the view history)
    def get_task_by_id(self, task_id: int) -> Task | None: ...
    def get_epic_by_id(self, epic_id: int) -> Epic | None: ...
    def get_subtask_by_id(self, subtask_id: int) -> Subtask | None: ...
    def get_all_tasks(self) -> list[Task]: ...
    def get_all_epics(self) -> list[Epic]: ...
    def get_all_subtasks(self) -> list[Subtask]: ...
    def get_subtasks_of_epic(self, epic_id: int) -> list[Subtask]: ...
    def get_prioritized_tasks(self) -> list[Task]: ...
    def get_history(self) -> list[Task]: ...
    def counts(self) -> dict[str, int]: ...

    # Full-replace updates
    def update_task(self, task: Task) -> Task: ...
    def update_epic(self, epic: Epic) -> Epic: ...
    def update_subtask(self, subtask: Subtask) -> Subtask: ...

    # Deletes (cascading)
    def delete_task_by_id(self, task_id: int) -> None: ...
    def delete_epic_by_id(self, epic_id: int) -> None: ...
    def delete_subtask_by_id(self, subtask_id: int) -> None: ...
    def delete_all_tasks(self) -> None: ...
    def delete_all_epics(self) -> None: ...
    def delete_all_subtasks(self) -> None: ...

    # Persistence adapters
    def snapshot(self) -> StoreSnapshot: ...
    def restore(self, snapshot: StoreSnapshot) -> None: ...
