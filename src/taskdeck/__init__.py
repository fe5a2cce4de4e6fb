"""taskdeck: personal tracker for tasks, epics and subtasks."""

__version__ = "0.1.0"
