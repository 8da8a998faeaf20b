"""Models exposed by the Synapse calendar sync."""
from .task import Task
from .task_calendar_event import TaskCalendarEvent

__all__ = ["Task", "TaskCalendarEvent"]
