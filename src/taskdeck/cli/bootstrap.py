# src/taskdeck/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the local (gitignored) data directory exists,
- wires the concrete TaskStore into AppState.

The store is constructed here and passed along explicitly; nothing else builds one.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.state import AppState
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    history_limit = int(getattr(settings, "history_limit", 0) or 0)
    state = AppState(
        settings=settings,
        task_store=TaskStore(history_limit=history_limit or None),
    )
    logger.debug("AppState created data_dir=%s", settings.data_dir)
    return state
