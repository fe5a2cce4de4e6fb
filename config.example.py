# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
See src/taskdeck/config.py for parsing and defaults.

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKDECK_APP_NAME": "App display name (default: taskdeck).",
    "TASKDECK_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Paths (gitignored)
    "TASKDECK_DATA_DIR": "Local data directory holding taskdeck.log (default: .local/taskdeck).",
    # Connectors
    "TASKDECK_CONSOLE_ENABLED": "Run the console REPL (true/false, default: true).",
    # Task store
    "TASKDECK_HISTORY_LIMIT": "Keep only the N most recently viewed items (default: 0 = unbounded).",
    "TASKDECK_DEFAULT_DURATION_MINUTES": (
        "Duration given to items planned with a start but no ~minutes (default: 60)."
    ),
}
