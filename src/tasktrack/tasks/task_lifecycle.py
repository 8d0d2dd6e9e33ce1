# src/tasktrack/tasks/task_lifecycle.py

"""
Task lifecycle rules layered on top of a TaskRepo.

This is where the business invariants the store does not guarantee live:
- a due date must be in the future when the task is created,
- a top-level task cannot be completed while any direct subtask is not completed,
- only the four known statuses can be requested.

Domain errors (TaskError) coming from the repo are propagated as-is.
The update path (fetch -> merge -> persist) is not transactional; a concurrent
update between fetch and persist can be lost.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import replace

from ..core.errors import TaskError
from ..core.ports import TaskRepo
from .task_models import NewTask, Task, TaskEdit, TaskStatus

logger = logging.getLogger(__name__)

ERR_DUE_DATE_NOT_FUTURE = "due_date must be in the future"
ERR_SUBTASKS_NOT_COMPLETED = "all subtasks must be completed first"
ERR_DESCRIPTION_REQUIRED = "description is required"


class TaskService:
    def __init__(
        self,
        repo: TaskRepo,
        *,
        clock: Callable[[], float] = time.time,
        auto_complete_parent: bool = False,
    ) -> None:
        self.repo = repo
        self._clock = clock
        self._auto_complete_parent = auto_complete_parent

    def create(self, request: NewTask) -> Task:
        description = (request.description or "").strip()
        if not description:
            raise TaskError.invalid(ERR_DESCRIPTION_REQUIRED)

        if request.due_date is not None and request.due_date <= self._clock():
            raise TaskError.invalid(ERR_DUE_DATE_NOT_FUTURE)

        task_id = self.repo.create(description, request.due_date, request.parent_id)
        logger.info("Task created id=%s parent_id=%s", task_id, request.parent_id)
        return self.repo.get_by_id(task_id)

    def get(self, task_id: int) -> Task:
        return self.repo.get_by_id(task_id)

    def update(self, task_id: int, edit: TaskEdit) -> Task:
        """
        Apply a partial edit and return the merged snapshot.

        The returned task reflects what was written, it is not re-read from the repo.
        """
        status = TaskStatus.parse(edit.status) if edit.status is not None else None

        if edit.description is not None and not edit.description.strip():
            raise TaskError.invalid(ERR_DESCRIPTION_REQUIRED)

        current = self.repo.get_by_id(task_id)

        # Gate uses the subtasks fetched above, no second query.
        if status == TaskStatus.COMPLETED and current.is_top_level and not current.all_subtasks_completed():
            raise TaskError.invalid(ERR_SUBTASKS_NOT_COMPLETED)

        merged = replace(
            current,
            description=edit.description.strip() if edit.description is not None else current.description,
            status=status if status is not None else current.status,
            due_date=edit.due_date if edit.due_date is not None else current.due_date,
        )

        self.repo.update_by_id(task_id, merged)
        logger.debug("Task updated id=%s status=%s", task_id, merged.status.value)

        if (
            self._auto_complete_parent
            and status == TaskStatus.COMPLETED
            and merged.parent_id is not None
        ):
            self.repo.complete_parent_if_done(merged.parent_id)

        return merged

    def list(self) -> list[Task]:
        return self.repo.list(now_ts=self._clock())
