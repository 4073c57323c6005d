"""
Database schema and management for the task service (SQLite).
"""
import sqlite3
import os
import time
import logging
from typing import Optional, List, Dict, Any, Tuple

from taskmcp.models.task_models import (
    TaskStatus,
    Priority,
    TERMINAL_STATUSES,
    TITLE_MAX_LENGTH,
    DESCRIPTION_MAX_LENGTH,
    ASSIGNED_TO_MAX_LENGTH,
    TAGS_MAX_LENGTH,
)

logger = logging.getLogger(__name__)

# Query performance threshold (seconds) - queries slower than this will be logged
QUERY_SLOW_THRESHOLD = float(os.getenv("DB_QUERY_SLOW_THRESHOLD", "0.1"))

# Columns written by insert_tasks, in order
TASK_COLUMNS = (
    "title",
    "description",
    "status",
    "priority",
    "due_date",
    "created_at",
    "updated_at",
    "assigned_to",
    "tags",
)

# Columns that update_task may change
UPDATABLE_COLUMNS = frozenset(c for c in TASK_COLUMNS if c != "created_at")


def _sql_in_list(values) -> str:
    return ", ".join(f"'{v}'" for v in values)


SCHEMA_SQL = f"""
CREATE TABLE IF NOT EXISTS tasks (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    title       TEXT NOT NULL CHECK (length(title) BETWEEN 1 AND {TITLE_MAX_LENGTH}),
    description TEXT CHECK (description IS NULL OR length(description) <= {DESCRIPTION_MAX_LENGTH}),
    status      TEXT NOT NULL CHECK (status IN ({_sql_in_list(s.value for s in TaskStatus)})),
    priority    TEXT NOT NULL CHECK (priority IN ({_sql_in_list(p.value for p in Priority)})),
    due_date    TEXT,
    created_at  TEXT NOT NULL,
    updated_at  TEXT NOT NULL,
    assigned_to TEXT CHECK (assigned_to IS NULL OR length(assigned_to) <= {ASSIGNED_TO_MAX_LENGTH}),
    tags        TEXT CHECK (tags IS NULL OR length(tags) <= {TAGS_MAX_LENGTH}),
    CHECK (created_at <= updated_at)
);

CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status);
CREATE INDEX IF NOT EXISTS idx_tasks_priority ON tasks(priority);
CREATE INDEX IF NOT EXISTS idx_tasks_due_date ON tasks(due_date);
"""


class TaskDatabase:
    """SQLite database holding the tasks table."""

    def __init__(self, db_path: str):
        """
        Initialize database connection and create schema if needed.

        Args:
            db_path: Path to the SQLite database file
        """
        self.db_path = db_path
        self.db_type = "sqlite"
        self._ensure_db_directory()
        self._init_schema()

    def _ensure_db_directory(self):
        """Ensure database directory exists."""
        db_dir = os.path.dirname(os.path.abspath(self.db_path))
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """
        Open a new connection.

        Connections run in autocommit mode; multi-statement work opens its
        own transaction with BEGIN.
        """
        conn = sqlite3.connect(self.db_path, isolation_level=None, timeout=30.0)
        conn.row_factory = sqlite3.Row
        return conn

    def _execute_with_logging(self, cursor, query: str, params: Tuple = ()):
        """Execute a query, logging slow statements."""
        start_time = time.time()
        result = cursor.execute(query, params)
        duration = time.time() - start_time

        log_level = logging.WARNING if duration >= QUERY_SLOW_THRESHOLD else logging.DEBUG
        query_preview = " ".join(query.split())
        if len(query_preview) > 200:
            query_preview = query_preview[:200] + "..."
        logger.log(log_level, f"Query executed in {duration:.4f}s: {query_preview}")
        return result

    def _init_schema(self):
        """Create tables and indexes."""
        conn = self._get_connection()
        try:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.executescript(SCHEMA_SQL)
            logger.info(f"Database schema initialized at {self.db_path}")
        except Exception as e:
            logger.error(f"Failed to initialize schema: {e}")
            raise
        finally:
            conn.close()

    def insert_tasks(self, rows: List[Dict[str, Any]]) -> List[int]:
        """
        Insert all rows in a single transaction.

        Either every row is committed or none is.

        Args:
            rows: Row dictionaries keyed by TASK_COLUMNS

        Returns:
            Assigned task IDs in input order

        Raises:
            sqlite3.Error: If any insert fails (the transaction is rolled back)
        """
        if not rows:
            return []

        placeholders = ", ".join("?" for _ in TASK_COLUMNS)
        query = f"INSERT INTO tasks ({', '.join(TASK_COLUMNS)}) VALUES ({placeholders})"

        conn = self._get_connection()
        task_ids = []
        try:
            cursor = conn.cursor()
            cursor.execute("BEGIN IMMEDIATE")
            try:
                for row in rows:
                    self._execute_with_logging(cursor, query, tuple(row.get(c) for c in TASK_COLUMNS))
                    task_ids.append(cursor.lastrowid)
                conn.commit()
            except Exception:
                conn.rollback()
                logger.error(f"Batch insert of {len(rows)} tasks rolled back")
                raise
            logger.info(f"Inserted {len(task_ids)} tasks (ids {task_ids[0]}..{task_ids[-1]})")
            return task_ids
        finally:
            conn.close()

    def get_task(self, task_id: int) -> Optional[Dict[str, Any]]:
        """Get a task by ID."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            self._execute_with_logging(cursor, "SELECT * FROM tasks WHERE id = ?", (task_id,))
            row = cursor.fetchone()
            return dict(row) if row else None
        finally:
            conn.close()

    def list_tasks(self) -> List[Dict[str, Any]]:
        """List all tasks ordered by ID."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            self._execute_with_logging(cursor, "SELECT * FROM tasks ORDER BY id")
            return [dict(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def count_tasks(self) -> int:
        """Count all tasks."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            self._execute_with_logging(cursor, "SELECT COUNT(*) AS count FROM tasks")
            return cursor.fetchone()["count"]
        finally:
            conn.close()

    def count_by_status(self, status: str) -> int:
        """Count tasks with the given status."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            self._execute_with_logging(cursor, "SELECT COUNT(*) AS count FROM tasks WHERE status = ?", (status,))
            return cursor.fetchone()["count"]
        finally:
            conn.close()

    def count_by_priority(self, priority: str) -> int:
        """Count tasks with the given priority."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            self._execute_with_logging(cursor, "SELECT COUNT(*) AS count FROM tasks WHERE priority = ?", (priority,))
            return cursor.fetchone()["count"]
        finally:
            conn.close()

    def get_task_statistics(self, now: str) -> Dict[str, Any]:
        """
        Read total, overdue and grouped counts inside one read transaction,
        so every figure comes from the same snapshot.

        Args:
            now: Reference time in storage format; tasks due strictly before it
                 and not in a terminal status are overdue

        Returns:
            Dictionary with total, overdue, status_counts and priority_counts
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("BEGIN")
            try:
                self._execute_with_logging(cursor, "SELECT COUNT(*) AS count FROM tasks")
                total = cursor.fetchone()["count"]

                terminal = tuple(s.value for s in TERMINAL_STATUSES)
                self._execute_with_logging(cursor, f"""
                    SELECT COUNT(*) AS count FROM tasks
                    WHERE due_date IS NOT NULL
                        AND due_date < ?
                        AND status NOT IN ({', '.join('?' for _ in terminal)})
                """, (now, *terminal))
                overdue = cursor.fetchone()["count"]

                self._execute_with_logging(cursor, "SELECT status, COUNT(*) AS count FROM tasks GROUP BY status")
                status_counts = {row["status"]: row["count"] for row in cursor.fetchall()}

                self._execute_with_logging(cursor, "SELECT priority, COUNT(*) AS count FROM tasks GROUP BY priority")
                priority_counts = {row["priority"]: row["count"] for row in cursor.fetchall()}
            finally:
                conn.commit()

            return {
                "total": total,
                "overdue": overdue,
                "status_counts": status_counts,
                "priority_counts": priority_counts,
            }
        finally:
            conn.close()

    def get_tasks_by_assignee(self, assigned_to: str) -> List[Dict[str, Any]]:
        """Get tasks assigned to a person (case-insensitive)."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            self._execute_with_logging(
                cursor,
                "SELECT * FROM tasks WHERE lower(assigned_to) = lower(?) ORDER BY id",
                (assigned_to,),
            )
            return [dict(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def get_tasks_by_tag(self, tag: str) -> List[Dict[str, Any]]:
        """Get tasks whose tags column contains the given text."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            self._execute_with_logging(
                cursor,
                "SELECT * FROM tasks WHERE tags LIKE '%' || ? || '%' ORDER BY id",
                (tag,),
            )
            return [dict(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def update_task(self, task_id: int, fields: Dict[str, Any]) -> bool:
        """
        Update columns of a task.

        Args:
            task_id: Task ID
            fields: Column values; must include updated_at

        Returns:
            True if a row was updated, False if the task does not exist
        """
        unknown = set(fields) - UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Cannot update columns: {', '.join(sorted(unknown))}")
        if not fields:
            return False

        assignments = ", ".join(f"{column} = ?" for column in fields)
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            self._execute_with_logging(
                cursor,
                f"UPDATE tasks SET {assignments} WHERE id = ?",
                (*fields.values(), task_id),
            )
            updated = cursor.rowcount > 0
            if updated:
                logger.info(f"Updated task {task_id}: {', '.join(fields)}")
            return updated
        finally:
            conn.close()

    def delete_task(self, task_id: int) -> bool:
        """Delete a task. Returns True if a row was deleted."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            self._execute_with_logging(cursor, "DELETE FROM tasks WHERE id = ?", (task_id,))
            deleted = cursor.rowcount > 0
            if deleted:
                logger.info(f"Deleted task {task_id}")
            return deleted
        finally:
            conn.close()

    def delete_all_tasks(self) -> int:
        """Delete every task. Returns the number of rows removed."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            self._execute_with_logging(cursor, "DELETE FROM tasks")
            return cursor.rowcount
        finally:
            conn.close()
