from datetime import date, datetime

import pytest

from src.timetrack.timetrack.core.enums import AttendanceStatus, TaskPriority
from src.timetrack.timetrack.core.exceptions import NoRecordForTodayError, TaskNotFoundError

DAY = date(2025, 1, 8)


def test_add_task_creates_absent_placeholder(service, identity, attendance_repo):
    record, task = service.add_task(
        identity, description="Review pull requests", time_allocated=60, priority=TaskPriority.HIGH,
        now=datetime(2025, 1, 8, 7, 30),
    )

    assert record.status == AttendanceStatus.ABSENT
    assert record.check_ins == []
    assert task.priority == TaskPriority.HIGH
    assert task.created_at == datetime(2025, 1, 8, 7, 30)
    assert attendance_repo.count(identity.employee_id) == 1


def test_check_in_on_placeholder_keeps_tasks(service, identity):
    _, task = service.add_task(identity, description="Standup notes", now=datetime(2025, 1, 8, 7, 30))
    record = service.check_in(identity, now=datetime(2025, 1, 8, 8, 0), shift_id="morning")

    assert record.status == AttendanceStatus.PRESENT
    assert task.task_id in record.tasks
    assert len(record.check_ins) == 1


def test_update_task_sets_and_clears_completed_at(service, identity):
    _, task = service.add_task(identity, description="Deploy", now=datetime(2025, 1, 8, 9, 0))

    _, updated = service.update_task(
        identity.employee_id, task.task_id, time_spent=45, completed=True, now=datetime(2025, 1, 8, 10, 0)
    )
    assert updated.completed is True
    assert updated.time_spent == 45
    assert updated.completed_at == datetime(2025, 1, 8, 10, 0)

    _, again = service.update_task(identity.employee_id, task.task_id, completed=True, now=datetime(2025, 1, 8, 11, 0))
    assert again.completed_at == datetime(2025, 1, 8, 10, 0)

    _, reopened = service.update_task(identity.employee_id, task.task_id, completed=False, now=datetime(2025, 1, 8, 12, 0))
    assert reopened.completed is False
    assert reopened.completed_at is None
    assert reopened.time_spent == 45


def test_update_and_delete_require_todays_record(service, identity):
    with pytest.raises(NoRecordForTodayError):
        service.update_task(identity.employee_id, "t1", completed=True, now=datetime(2025, 1, 8, 9, 0))
    with pytest.raises(NoRecordForTodayError):
        service.delete_task(identity.employee_id, "t1", now=datetime(2025, 1, 8, 9, 0))


def test_unknown_task_is_not_found(service, identity):
    service.add_task(identity, description="Something", now=datetime(2025, 1, 8, 9, 0))

    with pytest.raises(TaskNotFoundError):
        service.update_task(identity.employee_id, "missing", completed=True, now=datetime(2025, 1, 8, 9, 5))
    with pytest.raises(TaskNotFoundError):
        service.delete_task(identity.employee_id, "missing", now=datetime(2025, 1, 8, 9, 5))


def test_delete_task_keeps_remaining_order(service, identity, attendance_repo):
    ids = [
        service.add_task(identity, description=f"task {n}", now=datetime(2025, 1, 8, 9, n))[1].task_id
        for n in range(3)
    ]

    record = service.delete_task(identity.employee_id, ids[1], now=datetime(2025, 1, 8, 10, 0))

    assert [t.task_id for t in record.tasks] == [ids[0], ids[2]]
    assert record.tasks.get(ids[2]).description == "task 2"
    assert [t.task_id for t in attendance_repo.find_one(identity.employee_id, DAY).tasks] == [ids[0], ids[2]]
