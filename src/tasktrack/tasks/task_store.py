# src/tasktrack/tasks/task_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import time
from collections.abc import Iterator
from pathlib import Path

from ..core.errors import StorageError, TaskError
from .task_models import Task, TaskStatus

logger = logging.getLogger(__name__)

ERR_MSG_PARENT_ID_INVALID = "parent_id=%d is not present in table"


class TaskStore:
    """
    SQLite task store.

    The schema is intentionally simple and migration-safe:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    parent_id is a real foreign key (PRAGMA foreign_keys=ON on every connection),
    so referential integrity is checked by SQLite and surfaced as TaskError(invalid).

    Thread-safety:
    - each method opens its own SQLite connection
    - every public call is a single statement-level transaction, nothing spans calls
    """

    def __init__(
        self,
        db_path: str | Path = "tasks.sqlite3",
        *,
        sweep_skips_completed: bool = False,
    ) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._sweep_skips_completed = sweep_skips_completed
        self._ensure_schema()
        try:
            total = self.count_tasks()
        except StorageError:
            total = -1
        logger.info(
            "TaskStore ready db=%s total=%s sweep_skips_completed=%s",
            self._db_path,
            total,
            sweep_skips_completed,
        )

    @property
    def db_path(self) -> Path:
        return self._db_path

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")

    @contextlib.contextmanager
    def _connect(self, action: str) -> Iterator[sqlite3.Connection]:
        """Open a short-lived connection; wrap raw SQLite failures as StorageError."""
        try:
            conn = self._get_conn()
        except sqlite3.Error as e:
            raise StorageError(f"failed to open task db {self._db_path}: {e}") from e
        try:
            self._configure_conn(conn)
            yield conn
        except sqlite3.Error as e:
            raise StorageError(f"failed to {action}: {e}") from e
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._connect("prepare schema") as conn:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    description TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'new',
                    due_date REAL,
                    parent_id INTEGER REFERENCES tasks(id),
                    created_at REAL NOT NULL DEFAULT 0,
                    updated_at REAL NOT NULL DEFAULT 0
                )
                """
            )

            # Migrations (safe): add missing columns.
            cur.execute("PRAGMA table_info(tasks)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
                logger.info("TaskStore migration: added column %s", name)

            add_col("status", "TEXT NOT NULL DEFAULT 'new'")
            add_col("due_date", "REAL")
            add_col("parent_id", "INTEGER REFERENCES tasks(id)")
            add_col("created_at", "REAL NOT NULL DEFAULT 0")
            add_col("updated_at", "REAL NOT NULL DEFAULT 0")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_parent ON tasks(parent_id)")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_status_due ON tasks(status, due_date)")

            conn.commit()

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=int(row["id"]),
            description=str(row["description"] or ""),
            status=TaskStatus.from_db(row["status"]),
            due_date=float(row["due_date"]) if row["due_date"] is not None else None,
            parent_id=int(row["parent_id"]) if row["parent_id"] is not None else None,
            created_at=float(row["created_at"] or 0.0),
            updated_at=float(row["updated_at"] or 0.0),
        )

    # ---- public API ----

    def count_tasks(self) -> int:
        with self._connect("count tasks") as conn:
            (n,) = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()
            return int(n)

    def create(
        self,
        description: str,
        due_date: float | None = None,
        parent_id: int | None = None,
    ) -> int:
        """
        Insert a new task with status "new" and return its id.

        Raises TaskError(invalid) if parent_id does not reference an existing task.
        No row is written in that case.
        """
        now = time.time()
        with self._connect("insert task") as conn:
            try:
                cur = conn.execute(
                    """
                    INSERT INTO tasks(description, status, due_date, parent_id, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        description.strip(),
                        TaskStatus.NEW.value,
                        float(due_date) if due_date is not None else None,
                        int(parent_id) if parent_id is not None else None,
                        now,
                        now,
                    ),
                )
                conn.commit()
            except sqlite3.IntegrityError as e:
                conn.rollback()
                if parent_id is None:
                    raise
                logger.debug("Rejected task with dangling parent_id=%s: %s", parent_id, e)
                raise TaskError.invalid(ERR_MSG_PARENT_ID_INVALID % int(parent_id)) from None

            rowid = cur.lastrowid
            if rowid is None:
                raise StorageError("SQLite did not return lastrowid for tasks insert")
            task_id = int(rowid)
            logger.debug("Task added id=%s parent_id=%s due_date=%s", task_id, parent_id, due_date)
            return task_id

    def get_by_id(self, task_id: int) -> Task:
        """Return the task and its direct subtasks (one level, not recursive)."""
        with self._connect("select task") as conn:
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (int(task_id),)).fetchone()
            if row is None:
                raise TaskError.not_found()

            task = self._row_to_task(row)
            subs = conn.execute(
                "SELECT * FROM tasks WHERE parent_id = ? ORDER BY id ASC",
                (task.id,),
            ).fetchall()
            task.subtasks = [self._row_to_task(r) for r in subs]
            return task

    def update_by_id(self, task_id: int, task: Task) -> None:
        """Overwrite description/status/due_date with the snapshot's values."""
        with self._connect("update task") as conn:
            cur = conn.execute(
                """
                UPDATE tasks
                SET description = ?,
                    status = ?,
                    due_date = ?,
                    updated_at = ?
                WHERE id = ?
                """,
                (
                    task.description,
                    TaskStatus(task.status).value,
                    task.due_date,
                    time.time(),
                    int(task_id),
                ),
            )
            conn.commit()
            if cur.rowcount == 0:
                raise TaskError.not_found()

    def mark_overdue(self, now_ts: float | None = None) -> int:
        """
        Overdue sweep: status -> overdue for every task whose due_date < now.

        Completed tasks are swept too unless the store was built with
        sweep_skips_completed=True. Returns the number of rows changed.
        """
        if now_ts is None:
            now_ts = time.time()

        sql = """
            UPDATE tasks
            SET status = 'overdue', updated_at = ?
            WHERE due_date IS NOT NULL
              AND due_date < ?
              AND status != 'overdue'
        """
        if self._sweep_skips_completed:
            sql += " AND status != 'completed'"

        with self._connect("mark overdue tasks") as conn:
            cur = conn.execute(sql, (float(now_ts), float(now_ts)))
            conn.commit()
            n = int(cur.rowcount)
        if n:
            logger.info("Overdue sweep marked %d task(s)", n)
        return n

    def list(self, now_ts: float | None = None) -> list[Task]:
        """
        Run the overdue sweep, then return every top-level task with its direct subtasks.

        Reading mutates state on purpose: overdue is materialized lazily here,
        there is no background sweeper.
        """
        self.mark_overdue(now_ts)

        with self._connect("list tasks") as conn:
            top = [
                self._row_to_task(r)
                for r in conn.execute("SELECT * FROM tasks WHERE parent_id IS NULL ORDER BY id ASC")
            ]
            children = conn.execute(
                """
                SELECT c.*
                FROM tasks c
                JOIN tasks p ON p.id = c.parent_id
                WHERE p.parent_id IS NULL
                ORDER BY c.id ASC
                """
            ).fetchall()

        by_parent: dict[int, list[Task]] = {}
        for r in children:
            sub = self._row_to_task(r)
            if sub.parent_id is not None:
                by_parent.setdefault(sub.parent_id, []).append(sub)

        for t in top:
            t.subtasks = by_parent.get(t.id, [])
        return top

    def complete_parent_if_done(self, parent_id: int) -> bool:
        """
        Atomically transitions the parent to completed when none of its
        direct subtasks is left uncompleted.

        Returns True if the parent row changed.
        """
        with self._connect("complete parent task") as conn:
            cur = conn.execute(
                """
                UPDATE tasks
                SET status = 'completed', updated_at = ?
                WHERE id = ?
                  AND status != 'completed'
                  AND NOT EXISTS (
                    SELECT 1 FROM tasks c
                    WHERE c.parent_id = tasks.id
                      AND c.status != 'completed'
                    )
                """,
                (time.time(), int(parent_id)),
            )
            conn.commit()
            changed = cur.rowcount == 1
        if changed:
            logger.info("Parent task id=%s auto-completed", parent_id)
        return changed
