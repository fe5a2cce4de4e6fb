# src/taskdeck/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs the console REPL in the main thread.
"""

from __future__ import annotations

import logging
import signal
import threading

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    # choose console log level from settings.log_level
    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_dir = getattr(settings, "data_dir", ".local/taskdeck")
    setup_logging(log_dir=log_dir, console_level=console_level)

    logger.info("Starting %s...", getattr(settings, "app_name", "taskdeck"))

    state = create_initial_state(settings=settings)

    if settings.console_enabled:
        try:
            run_console_loop(state)
        finally:
            logger.info("Bye.")
        return

    # Nothing else to drive the store; wait for a signal so the process can be embedded/supervised.
    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    try:
        signal.signal(signal.SIGINT, _handle_signal)
        signal.signal(signal.SIGTERM, _handle_signal)
    except (ValueError, OSError):
        # Not in the main thread, or the platform lacks SIGTERM.
        logger.debug("Signal handlers not installed.", exc_info=True)

    logger.info("Console disabled. Press Ctrl+C to stop.")
    stop_main.wait()
    logger.info("Bye.")


if __name__ == "__main__":
    main()
