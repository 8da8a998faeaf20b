"""Which tasks may be pushed to Google Calendar."""

from __future__ import annotations

from typing import Iterable, List, NamedTuple, Optional

from models.task import Task


REASON_MISSING_DUE_DATE = "La tarea debe tener una fecha de vencimiento"
REASON_CANCELLED = "No se pueden sincronizar tareas canceladas"


class SyncEligibility(NamedTuple):
    can_sync: bool
    reason: Optional[str] = None


def can_sync_task(task: Task) -> SyncEligibility:
    # completed tasks stay eligible; skipping them is a caller policy
    if not task.due_date:
        return SyncEligibility(False, REASON_MISSING_DUE_DATE)
    if task.status == "cancelled":
        return SyncEligibility(False, REASON_CANCELLED)
    return SyncEligibility(True)


def filter_syncable_tasks(tasks: Iterable[Task]) -> List[Task]:
    return [task for task in tasks if can_sync_task(task).can_sync]


__all__ = [
    "REASON_CANCELLED",
    "REASON_MISSING_DUE_DATE",
    "SyncEligibility",
    "can_sync_task",
    "filter_syncable_tasks",
]
