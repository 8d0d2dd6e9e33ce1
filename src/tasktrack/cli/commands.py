# src/tasktrack/cli/commands.py

from __future__ import annotations

import json
import logging
import shlex
from collections.abc import Callable
from datetime import datetime

from ..core.errors import StorageError, TaskError, error_code
from ..core.state import AppState
from ..tasks.task_models import NewTask, Task, TaskEdit

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)

INTERNAL_ERROR_TEXT = "Oops! Something went wrong."


class UsageError(ValueError):
    """Malformed command arguments (not a domain error)."""


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError as e:
            return f"usage error: {e}"
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            return handler(state, args)
        except UsageError as e:
            return f"usage error: {e}"
        except (TaskError, StorageError) as e:
            return render_error(e)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def render_error(exc: Exception) -> str:
    """Map an error to its outward text: domain errors by code, everything else opaque."""
    if isinstance(exc, TaskError) and error_code(exc) is not None:
        body = exc.to_dict()
        return f"error [{body['code']}]: {body.get('message', '')}".rstrip()
    logger.error("Command failed: %s", exc, exc_info=exc)
    return f"error: {INTERNAL_ERROR_TEXT}"


def render_tasks(tasks: Task | list[Task]) -> str:
    if isinstance(tasks, Task):
        return json.dumps(tasks.to_dict(), ensure_ascii=False, indent=2)
    return json.dumps([t.to_dict() for t in tasks], ensure_ascii=False, indent=2)


def parse_due(raw: str) -> float:
    """ISO-8601 -> epoch seconds. Naive values are read as local time."""
    try:
        dt = datetime.fromisoformat(raw)
    except ValueError:
        raise UsageError(f"invalid date {raw!r}, expected ISO-8601 (e.g. 2030-01-31T09:00)") from None
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt.timestamp()


def parse_id(raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise UsageError(f"invalid task id {raw!r}") from None


def split_options(args: list[str], allowed: set[str]) -> tuple[list[str], dict[str, str]]:
    """
    Split ["a", "b", "--due", "x"] into positional words and {"due": "x"}.

    Only the allowed option names are consumed; any other "--word" stays part of the text.
    A bare "--" ends option parsing.
    """
    words: list[str] = []
    opts: dict[str, str] = {}
    i = 0
    while i < len(args):
        a = args[i]
        if a == "--":
            words.extend(args[i + 1 :])
            break
        key = a[2:].lower() if a.startswith("--") else ""
        if key in allowed:
            if i + 1 >= len(args):
                raise UsageError(f"option {a} needs a value")
            opts[key] = args[i + 1]
            i += 2
            continue
        words.append(a)
        i += 1
    return words, opts


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <description> [--due ISO8601] [--parent ID]
    """
    words, opts = split_options(args, {"due", "parent"})
    if not words:
        raise UsageError("/add <description> [--due ISO8601] [--parent ID]")

    request = NewTask(
        description=" ".join(words),
        due_date=parse_due(opts["due"]) if "due" in opts else None,
        parent_id=parse_id(opts["parent"]) if "parent" in opts else None,
    )
    task = state.tasks.create(request)
    return render_tasks(task)


def cmd_get(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        raise UsageError("/get <id>")
    return render_tasks(state.tasks.get(parse_id(args[0])))


def cmd_edit(state: AppState, args: list[str]) -> str:
    """
    /edit <id> [--description TEXT] [--status STATUS] [--due ISO8601]
    """
    words, opts = split_options(args, {"description", "status", "due"})
    if len(words) != 1:
        raise UsageError("/edit <id> [--description TEXT] [--status STATUS] [--due ISO8601]")

    edit = TaskEdit(
        description=opts.get("description"),
        status=opts.get("status"),
        due_date=parse_due(opts["due"]) if "due" in opts else None,
    )
    if edit.is_empty():
        raise UsageError("nothing to change; pass --description, --status or --due")

    task = state.tasks.update(parse_id(words[0]), edit)
    return render_tasks(task)


def cmd_list(state: AppState, args: list[str]) -> str:
    tasks = state.tasks.list()
    if not tasks:
        return "No tasks."
    return render_tasks(tasks)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register(
    "add", cmd_add, help_text="Create a task: /add <description> [--due ISO8601] [--parent ID]."
)
registry.register("get", cmd_get, help_text="Show a task and its subtasks: /get <id>.")
registry.register(
    "edit",
    cmd_edit,
    help_text="Edit a task: /edit <id> [--description TEXT] [--status STATUS] [--due ISO8601].",
)
registry.register("list", cmd_list, help_text="List top-level tasks (marks overdue ones first).", aliases=["ls"])
