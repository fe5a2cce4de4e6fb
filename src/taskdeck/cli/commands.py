# src/taskdeck/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import cast

from ..core.state import AppState
from ..tasks import task_api
from ..tasks.errors import TaskStoreError
from ..tasks.task_models import TaskKind, TaskStatus

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

# Outcome codes used when rendering store errors (same numbers an HTTP adapter would use).
ERROR_CODES: dict[str, int] = {
    "not_found": 404,
    "time_conflict": 406,
    "invalid_reference": 422,
    "self_reference": 422,
}


def format_error(err: TaskStoreError) -> str:
    code = ERROR_CODES.get(err.kind, 500)
    return f"Error {code} ({err.kind}): {err.detail}"


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /task, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Store rejections and bad arguments come back as a reply, not an exception.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return h3(state, args, emit)
            h2 = cast(CommandHandler2, handler)
            return h2(state, args)
        except TaskStoreError as e:
            logger.info("/%s rejected: %s", name, e)
            return format_error(e)
        except ValueError as e:
            logger.debug("/%s bad arguments: %s", name, e)
            return f"Bad arguments: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _parse_id(args: list[str], pos: int = 0) -> int:
    try:
        return int(args[pos])
    except (IndexError, ValueError):
        raise ValueError("a numeric id is required") from None


def _lines(title: str, items: list[str], empty: str) -> str:
    if not items:
        return empty
    return "\n".join([title, *(f"  {s}" for s in items)])


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    counts = state.task_store.counts()
    history = state.task_store.get_history()
    limit = getattr(state.settings, "history_limit", 0) or "unbounded"
    return (
        "Status:\n"
        f"  Tasks: {counts['tasks']}  Epics: {counts['epics']}  Subtasks: {counts['subtasks']}\n"
        f"  Scheduled: {len(state.task_store.get_prioritized_tasks())}\n"
        f"  History: {len(history)} (limit: {limit})"
    )


def cmd_task(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /task add <title> [@start] [~minutes]
    /task show <id> | list | set <id> <status> | rm <id> | clear
    """
    usage = (
        "Usage:\n"
        "  /task add <title> [@YYYY-MM-DDTHH:MM] [~minutes]\n"
        "  /task show <id> | /task list | /task set <id> <status>\n"
        "  /task rm <id> | /task clear"
    )
    if not args:
        return usage

    sub = args[0].lower()
    store = state.task_store

    if sub == "add":
        title, start, duration = task_api.split_plan_args(args[1:])
        task = task_api.plan_task(state, title=title, start=start, duration=duration)
        return f"Added {task_api.format_item(task)}"

    if sub == "show":
        task_id = _parse_id(args, 1)
        task = store.get_task_by_id(task_id)
        if task is None:
            return f"Task {task_id} not found."
        return task_api.format_item(task)

    if sub == "list":
        return _lines(
            "Tasks:",
            [task_api.format_item(t) for t in store.get_all_tasks()],
            "No tasks.",
        )

    if sub == "set":
        task_id = _parse_id(args, 1)
        status = TaskStatus.parse(args[2] if len(args) > 2 else None)
        task = task_api.set_status(state, TaskKind.TASK, task_id, status)
        return f"Updated {task_api.format_item(task)}"

    if sub in ("rm", "del"):
        task_id = _parse_id(args, 1)
        store.delete_task_by_id(task_id)
        return f"Task {task_id} deleted."

    if sub == "clear":
        store.delete_all_tasks()
        return "All tasks deleted."

    return usage


def cmd_epic(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    usage = (
        "Usage:\n"
        "  /epic add <title> | /epic show <id> | /epic list\n"
        "  /epic rm <id> | /epic clear"
    )
    if not args:
        return usage

    sub = args[0].lower()
    store = state.task_store

    if sub == "add":
        title = " ".join(args[1:]).strip()
        if not title:
            raise ValueError("title is required")
        epic = task_api.plan_epic(state, title=title)
        return f"Added {task_api.format_item(epic)}"

    if sub == "show":
        epic_id = _parse_id(args, 1)
        epic = store.get_epic_by_id(epic_id)
        if epic is None:
            return f"Epic {epic_id} not found."
        subs = [task_api.format_item(s) for s in store.get_subtasks_of_epic(epic_id)]
        return _lines(task_api.format_item(epic), subs, f"{task_api.format_item(epic)}\n  (no subtasks)")

    if sub == "list":
        return _lines(
            "Epics:",
            [task_api.format_item(e) for e in store.get_all_epics()],
            "No epics.",
        )

    if sub in ("rm", "del"):
        epic_id = _parse_id(args, 1)
        store.delete_epic_by_id(epic_id)
        return f"Epic {epic_id} and its subtasks deleted."

    if sub == "clear":
        if emit:
            emit("Deleting every epic also deletes every subtask.")
        store.delete_all_epics()
        return "All epics deleted."

    return usage


def cmd_sub(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    usage = (
        "Usage:\n"
        "  /sub add <epic_id> <title> [@YYYY-MM-DDTHH:MM] [~minutes]\n"
        "  /sub show <id> | /sub set <id> <status> | /sub rm <id> | /sub clear"
    )
    if not args:
        return usage

    sub = args[0].lower()
    store = state.task_store

    if sub == "add":
        epic_id = _parse_id(args, 1)
        title, start, duration = task_api.split_plan_args(args[2:])
        subtask = task_api.plan_subtask(
            state, epic_id=epic_id, title=title, start=start, duration=duration
        )
        return f"Added {task_api.format_item(subtask)}"

    if sub == "show":
        subtask_id = _parse_id(args, 1)
        subtask = store.get_subtask_by_id(subtask_id)
        if subtask is None:
            return f"Subtask {subtask_id} not found."
        return task_api.format_item(subtask)

    if sub == "set":
        subtask_id = _parse_id(args, 1)
        status = TaskStatus.parse(args[2] if len(args) > 2 else None)
        subtask = task_api.set_status(state, TaskKind.SUBTASK, subtask_id, status)
        return f"Updated {task_api.format_item(subtask)}"

    if sub in ("rm", "del"):
        subtask_id = _parse_id(args, 1)
        store.delete_subtask_by_id(subtask_id)
        return f"Subtask {subtask_id} deleted."

    if sub == "clear":
        store.delete_all_subtasks()
        return "All subtasks deleted; every epic is back to new."

    return usage


def cmd_history(state: AppState, args: list[str]) -> str:
    items = state.task_store.get_history()
    return _lines(
        "Recently viewed (oldest first):",
        [task_api.format_item(i) for i in items],
        "History is empty.",
    )


def cmd_prioritized(state: AppState, args: list[str]) -> str:
    items = state.task_store.get_prioritized_tasks()
    return _lines(
        "Scheduled items by start time:",
        [task_api.format_item(i) for i in items],
        "Nothing scheduled.",
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show item counts and history size.")
registry.register("task", cmd_task, help_text="Tasks: /task add|show|list|set|rm|clear.")
registry.register("epic", cmd_epic, help_text="Epics: /epic add|show|list|rm|clear.")
registry.register(
    "sub", cmd_sub, help_text="Subtasks: /sub add|show|set|rm|clear.", aliases=["subtask"]
)
registry.register("history", cmd_history, help_text="Show recently viewed items.")
registry.register(
    "prioritized", cmd_prioritized, help_text="Show scheduled items by start time.", aliases=["prio"]
)
