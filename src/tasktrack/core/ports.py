# src/tasktrack/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The lifecycle rules depend on this Protocol instead of the SQLite store.
Any backing store (relational, document, in-memory) can implement it as long as it keeps:
- unique auto-assigned ids,
- referential integrity on parent_id (violations raise TaskError invalid),
- predicate-based bulk status update (the overdue sweep inside list()).
"""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..tasks.task_models import Task


class TaskRepo(Protocol):
    def create(
            self,
            description: str,
            due_date: float | None = None,
            parent_id: int | None = None,
    ) -> int: ...

    # Task plus its direct subtasks. Raises TaskError not_found.
    def get_by_id(self, task_id: int) -> Task: ...

    def update_by_id(self, task_id: int, task: Task) -> None: ...

    # Overdue sweep first, then top-level tasks with direct subtasks.
    def list(self, now_ts: float | None = None) -> list[Task]: ...

    def complete_parent_if_done(self, parent_id: int) -> bool: ...
