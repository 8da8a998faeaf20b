# synapse/models/task.py
from typing import List, Optional
from datetime import datetime

from sqlmodel import SQLModel, Field


TASK_STATUSES = ("pending", "in_progress", "completed", "cancelled")


class Task(SQLModel):
    """Task record as handed over by the task storage layer."""

    id: str
    title: str
    description: Optional[str] = None
    priority: str = "medium"      # high / medium / low
    status: str = "pending"       # pending / in_progress / completed / cancelled
    due_date: Optional[datetime] = None
    estimated_time: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
