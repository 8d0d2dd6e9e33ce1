# src/tasktrack/core/errors.py

"""
Error taxonomy shared by the store, the lifecycle rules and the boundary layer.

Two kinds of failure exist:
- TaskError: a domain error tagged with an ErrorCode (invalid / not_found / conflict).
  Built once where the rule is checked and propagated unchanged.
- StorageError: an opaque infrastructure failure (SQLite, schema, I/O).
  Carries context for diagnosis but no domain code.

Boundary code should classify with error_code() rather than isinstance chains.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    INVALID = "invalid"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"  # reserved, no rule raises it yet


class TaskError(Exception):
    """Domain error: caller-visible, carries a code."""

    def __init__(self, code: ErrorCode, message: str = "") -> None:
        self.code = ErrorCode(code)
        self.message = message
        super().__init__(str(self))

    @classmethod
    def invalid(cls, message: str) -> TaskError:
        return cls(ErrorCode.INVALID, message)

    @classmethod
    def not_found(cls, message: str = "task not found") -> TaskError:
        return cls(ErrorCode.NOT_FOUND, message)

    @classmethod
    def conflict(cls, message: str) -> TaskError:
        return cls(ErrorCode.CONFLICT, message)

    def __str__(self) -> str:
        return f"<{self.code.value}> {self.message}".rstrip()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TaskError):
            return NotImplemented
        return self.code == other.code and self.message == other.message

    def __hash__(self) -> int:
        return hash((self.code, self.message))

    def to_dict(self) -> dict[str, str]:
        out = {"code": self.code.value}
        if self.message:
            out["message"] = self.message
        return out


class StorageError(Exception):
    """Infrastructure failure. Never has a domain code."""


def error_code(exc: BaseException) -> ErrorCode | None:
    """Return the domain code for exc, or None when it is not a domain error."""
    if isinstance(exc, TaskError):
        return exc.code
    return None
