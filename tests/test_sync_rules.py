from itertools import product

import pytest

from models.task import Task
from services.sync_rules import (
    REASON_CANCELLED,
    REASON_MISSING_DUE_DATE,
    can_sync_task,
    filter_syncable_tasks,
)

PRIORITIES = ("high", "medium", "low")
STATUSES = ("pending", "in_progress", "completed", "cancelled")
DUE_DATES = (None, "2024-06-01T09:00:00Z")
EXTRAS = (
    {},
    {"estimated_time": "2h", "tags": ["a"], "notes": "n", "description": "d"},
)


def _task(index=0, **fields):
    return Task(id=f"t{index}", title=f"Task {index}", **fields)


@pytest.mark.parametrize("priority, status, due_date, extra", list(product(PRIORITIES, STATUSES, DUE_DATES, EXTRAS)))
def test_eligibility_boundary(priority, status, due_date, extra):
    result = can_sync_task(_task(priority=priority, status=status, due_date=due_date, **extra))

    if due_date is None:
        assert result.can_sync is False
        assert result.reason == REASON_MISSING_DUE_DATE
    elif status == "cancelled":
        assert result.can_sync is False
        assert result.reason == REASON_CANCELLED
    else:
        assert result.can_sync is True
        assert result.reason is None


def test_completed_tasks_are_eligible():
    assert can_sync_task(_task(status="completed", due_date="2024-06-01T09:00:00Z")).can_sync


def test_filter_keeps_order():
    tasks = [
        _task(1, due_date="2024-06-03T09:00:00Z"),
        _task(2),
        _task(3, due_date="2024-06-01T09:00:00Z", status="cancelled"),
        _task(4, due_date="2024-06-02T09:00:00Z", status="completed"),
        _task(5, due_date="2024-06-01T09:00:00Z"),
    ]

    assert [task.id for task in filter_syncable_tasks(tasks)] == ["t1", "t4", "t5"]


def test_filter_accepts_any_iterable():
    tasks = (_task(i, due_date="2024-06-01T09:00:00Z") for i in range(3))
    assert len(filter_syncable_tasks(tasks)) == 3
