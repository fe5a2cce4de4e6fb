# src/taskdeck/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "taskdeck.log"

# Minimum level a record needs to reach the console, by logger name.
# Scheduling/history log every admit and eviction; that belongs in the file only.
CONSOLE_MIN_LEVELS: dict[str, int] = {
    "taskdeck.tasks.scheduling": logging.WARNING,
    "taskdeck.tasks.history": logging.WARNING,
    "py.warnings": logging.WARNING,
}


class _ConsoleNoiseFilter(logging.Filter):
    """
    Console filter:
    - taskdeck loggers pass, unless listed in CONSOLE_MIN_LEVELS
    - captured warnings.warn(...) calls show at WARNING+
    - anything else (third-party) only at ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        min_level = CONSOLE_MIN_LEVELS.get(record.name)
        if min_level is not None:
            return record.levelno >= min_level
        if record.name.startswith("taskdeck."):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskdeck",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Install a filtered stderr handler and a full log file under `log_dir`.

    Replaces any handlers already on the root logger, so calling it twice is harmless.
    Returns the log file path.
    """
    log_file = Path(log_dir) / LOG_FILE_NAME
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(min(console_level, file_level))
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.addFilter(_ConsoleNoiseFilter())

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)

    for handler in (console, file_handler):
        handler.setFormatter(fmt)
        root.addHandler(handler)

    logging.captureWarnings(True)
    return log_file
