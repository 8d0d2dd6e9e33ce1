# tests/test_errors.py

from __future__ import annotations

import pytest

from tasktrack.core.errors import ErrorCode, StorageError, TaskError, error_code
from tasktrack.tasks.task_models import TaskStatus


def test_error_code_classifies_domain_and_infrastructure_errors() -> None:
    assert error_code(TaskError.invalid("bad")) == ErrorCode.INVALID
    assert error_code(TaskError.not_found()) == ErrorCode.NOT_FOUND
    assert error_code(TaskError.conflict("dup")) == ErrorCode.CONFLICT
    assert error_code(StorageError("db down")) is None
    assert error_code(RuntimeError("boom")) is None


def test_task_error_text_and_dict() -> None:
    err = TaskError.invalid("due_date must be in the future")
    assert str(err) == "<invalid> due_date must be in the future"
    assert err.to_dict() == {"code": "invalid", "message": "due_date must be in the future"}
    assert TaskError(ErrorCode.NOT_FOUND).to_dict() == {"code": "not_found"}


def test_task_errors_compare_by_code_and_message() -> None:
    assert TaskError.invalid("x") == TaskError.invalid("x")
    assert TaskError.invalid("x") != TaskError.conflict("x")


def test_status_parse_is_strict() -> None:
    assert TaskStatus.parse("in-progress") is TaskStatus.IN_PROGRESS
    for raw in ("in_progress", "IN-PROGRESS", " new", "Completed"):
        with pytest.raises(TaskError) as exc:
            TaskStatus.parse(raw)
        assert exc.value.code == ErrorCode.INVALID


def test_status_from_db_is_lenient() -> None:
    assert TaskStatus.from_db(None) is TaskStatus.NEW
    assert TaskStatus.from_db("garbage") is TaskStatus.NEW
    assert TaskStatus.from_db("overdue") is TaskStatus.OVERDUE
