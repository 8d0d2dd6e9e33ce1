# src/tasktrack/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..tasks.task_lifecycle import TaskService
from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    # Settings (or a SimpleNamespace in tests) kept for other modules.
    settings: Any

    task_store: TaskStore
    tasks: TaskService
