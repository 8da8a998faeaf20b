"""Mapping table between tasks and the calendar events created for them."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TaskCalendarEvent(SQLModel, table=True):
    """Cached link from a task to its Google Calendar event.

    The event description stays the source of truth; this row is a lookup
    shortcut and may go stale when events are edited in the calendar.
    """

    __tablename__ = "task_calendar_events"

    id: Optional[int] = Field(default=None, primary_key=True)
    task_id: str = Field(index=True, unique=True, description="Task identifier")
    calendar_id: str = Field(description="Google Calendar identifier")
    google_event_id: str = Field(index=True, description="Google Calendar event identifier")
    last_synced_at: datetime = Field(
        default_factory=_utc_now,
        description="Last synchronization timestamp in UTC",
    )
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)


__all__ = ["TaskCalendarEvent"]
