# src/taskdeck/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from .ports import TaskRepo


@dataclass
class AppState:
    # Settings object (config.Settings in the app, SimpleNamespace in tests).
    settings: Any
    task_store: TaskRepo

    # Serializes command handling across connectors.
    lock: Any = field(default_factory=threading.RLock)
