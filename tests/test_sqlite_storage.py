"""
Tests for the SQLite storage implementation.
"""
import os
import shutil
import sqlite3
import tempfile
from datetime import datetime
from unittest.mock import patch

import pytest

from taskmcp.database import TaskDatabase
from taskmcp.models import TaskCreate, TaskStatus, Priority
from taskmcp.storage import SQLiteTaskStorage

FIXED_NOW = datetime(2025, 3, 1, 12, 0, 0)


class FakeClock:
    """Clock returning a settable fixed time."""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock(FIXED_NOW)


@pytest.fixture
def storage(clock):
    """Create storage over a temporary database."""
    temp_dir = tempfile.mkdtemp()
    db = TaskDatabase(os.path.join(temp_dir, "test.db"))
    yield SQLiteTaskStorage(db, clock=clock)
    shutil.rmtree(temp_dir)


def draft(title="Task", status=TaskStatus.TODO, priority=Priority.MEDIUM, **kwargs):
    return TaskCreate(title=title, status=status, priority=priority, **kwargs)


class TestAppendBatch:
    """Tests for append_batch."""

    def test_returns_tasks_in_input_order(self, storage):
        saved = storage.append_batch([draft("A"), draft("B"), draft("C")])
        assert [t.title for t in saved] == ["A", "B", "C"]
        assert saved[0].id < saved[1].id < saved[2].id

    def test_batch_shares_one_timestamp(self, storage):
        saved = storage.append_batch([draft("A"), draft("B")])
        assert {t.created_at for t in saved} == {FIXED_NOW}
        assert all(t.created_at == t.updated_at for t in saved)

    def test_stores_enum_names_and_optional_fields(self, storage):
        [task] = storage.append_batch([draft(
            "A",
            status=TaskStatus.ON_HOLD,
            priority=Priority.URGENT,
            due_date=datetime(2025, 4, 1, 9, 30, 0),
            assigned_to="jane@example.com",
            tags="a,b",
        )])
        row = storage.db.get_task(task.id)
        assert row["status"] == "ON_HOLD"
        assert row["priority"] == "URGENT"
        assert row["due_date"] == "2025-04-01 09:30:00"
        assert row["assigned_to"] == "jane@example.com"

    def test_result_is_built_without_reading_back(self, storage):
        """A failing read after the commit cannot turn a stored batch into an error."""
        read_error = sqlite3.OperationalError("too many SQL variables")
        with patch.object(TaskDatabase, "get_task", side_effect=read_error), \
                patch.object(TaskDatabase, "list_tasks", side_effect=read_error):
            saved = storage.append_batch([draft("A"), draft("B", due_date=datetime(2025, 4, 1, 9, 30))])

        assert [t.title for t in saved] == ["A", "B"]
        assert saved == storage.list_tasks()

    def test_empty_batch(self, storage):
        assert storage.append_batch([]) == []

    def test_constraint_violation_persists_nothing(self, storage):
        with pytest.raises(sqlite3.IntegrityError):
            storage.append_batch([draft("ok"), draft("too long", tags="t" * 501)])
        assert storage.list_tasks() == []


class TestReadStatistics:
    """Tests for read_statistics."""

    def test_converts_keys_to_enum_members(self, storage):
        storage.append_batch([
            draft(status=TaskStatus.DONE, priority=Priority.HIGH),
            draft(status=TaskStatus.TODO, priority=Priority.HIGH),
        ])
        stats = storage.read_statistics(FIXED_NOW)
        assert stats.total == 2
        assert stats.status_counts == {TaskStatus.DONE: 1, TaskStatus.TODO: 1}
        assert stats.priority_counts == {Priority.HIGH: 2}

    def test_overdue_uses_reference_time(self, storage):
        storage.append_batch([
            draft(status=TaskStatus.TODO, due_date=datetime(2025, 2, 1)),
            draft(status=TaskStatus.DONE, due_date=datetime(2025, 2, 1)),
        ])
        assert storage.read_statistics(FIXED_NOW).overdue == 1
        assert storage.read_statistics(datetime(2025, 1, 1)).overdue == 0


class TestMutations:
    """Tests for update and delete."""

    def test_update_refreshes_updated_at(self, storage, clock):
        [task] = storage.append_batch([draft()])
        clock.now = datetime(2025, 3, 2, 8, 0, 0)
        updated = storage.update_task(task.id, status=TaskStatus.DONE)
        assert updated.status is TaskStatus.DONE
        assert updated.created_at == FIXED_NOW
        assert updated.updated_at == datetime(2025, 3, 2, 8, 0, 0)

    def test_update_normalizes_string_due_date(self, storage):
        [task] = storage.append_batch([draft()])
        updated = storage.update_task(task.id, due_date="2025-02-01T06:00:00+02:00")
        assert updated.due_date == datetime(2025, 2, 1, 4, 0, 0)
        assert storage.db.get_task(task.id)["due_date"] == "2025-02-01 04:00:00"
        assert storage.read_statistics(FIXED_NOW).overdue == 1

    def test_update_missing_task(self, storage):
        assert storage.update_task(123, status=TaskStatus.DONE) is None

    def test_delete(self, storage):
        [a, b] = storage.append_batch([draft("a"), draft("b")])
        assert storage.delete_task(a.id) is True
        assert [t.id for t in storage.list_tasks()] == [b.id]
        assert storage.delete_all() == 1
        assert storage.get_task(b.id) is None


class TestQueries:
    """Tests for count and lookup queries."""

    def test_counts_and_lookups(self, storage):
        storage.append_batch([
            draft("a", status=TaskStatus.TODO, priority=Priority.LOW, assigned_to="Ann", tags="ui"),
            draft("b", status=TaskStatus.TODO, priority=Priority.HIGH, assigned_to="bob", tags="api,db"),
        ])
        assert storage.count_by_status(TaskStatus.TODO) == 2
        assert storage.count_by_priority(Priority.HIGH) == 1
        assert [t.title for t in storage.find_by_assignee("ann")] == ["a"]
        assert [t.title for t in storage.find_by_tag("db")] == ["b"]
