# src/tasktrack/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

from ..core.errors import TaskError


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Notes:
    - "overdue" is set by the list sweep, but stays a valid input value
      so every status can be re-set through an edit.
    """

    NEW = "new"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    OVERDUE = "overdue"

    @classmethod
    def parse(cls, raw: str) -> TaskStatus:
        """Strict parsing of caller input: exact, case-sensitive values only."""
        try:
            return cls(raw)
        except ValueError:
            allowed = ", ".join(s.value for s in cls)
            raise TaskError.invalid(f"status must be one of: {allowed}") from None

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.NEW
        try:
            return cls(raw)
        except ValueError:
            return cls.NEW


def ts_to_iso(ts: float | None) -> str | None:
    if ts is None:
        return None
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


@dataclass(slots=True)
class Task:
    id: int
    description: str
    status: TaskStatus = TaskStatus.NEW
    due_date: float | None = None
    parent_id: int | None = None

    # Resolved one level deep by the store, never persisted.
    subtasks: list[Task] = field(default_factory=list)

    created_at: float = 0.0
    updated_at: float = 0.0

    @property
    def is_top_level(self) -> bool:
        return self.parent_id is None

    def all_subtasks_completed(self) -> bool:
        return all(sub.status == TaskStatus.COMPLETED for sub in self.subtasks)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "description": self.description,
            "status": self.status.value,
        }
        if self.due_date is not None:
            out["due_date"] = ts_to_iso(self.due_date)
        if self.parent_id is not None:
            out["parent_id"] = self.parent_id
        if self.subtasks:
            out["sub_tasks"] = [sub.to_dict() for sub in self.subtasks]
        return out


@dataclass(slots=True, frozen=True)
class NewTask:
    """Add request."""

    description: str
    due_date: float | None = None
    parent_id: int | None = None


@dataclass(slots=True, frozen=True)
class TaskEdit:
    """Partial edit request. None means "leave as is"."""

    description: str | None = None
    status: str | None = None
    due_date: float | None = None

    def is_empty(self) -> bool:
        return self.description is None and self.status is None and self.due_date is None
