# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKTRACK_APP_NAME": "App display name (default: tasktrack).",
    "TASKTRACK_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Paths (gitignored)
    "TASKTRACK_DATA_DIR": "Local data directory (default: .local/tasktrack).",
    "TASKTRACK_TASKS_DB_PATH": "TaskStore SQLite path (default: <data_dir>/tasks.sqlite3).",
    # Lifecycle switches
    "TASKTRACK_SWEEP_SKIPS_COMPLETED": (
        "Exclude completed tasks from the overdue sweep (true/false, default: false)."
    ),
    "TASKTRACK_AUTO_COMPLETE_PARENT": (
        "Complete a parent automatically once its last subtask is completed (true/false, default: false)."
    ),
}
