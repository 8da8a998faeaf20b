"""Persistence helpers for task ↔ calendar event mappings."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from models.task_calendar_event import TaskCalendarEvent
from storage.db import get_session
from utils.datetime_utils import utc_now


class CalendarSyncStore:
    """Wrapper around SQLModel sessions for the task_calendar_events table."""

    def __init__(self, session_factory: Callable[[], Session] = get_session) -> None:
        self._session_factory = session_factory

    def get_mapping(self, task_id: str) -> Optional[TaskCalendarEvent]:
        with self._session_factory() as session:
            stmt = select(TaskCalendarEvent).where(TaskCalendarEvent.task_id == task_id)
            return session.exec(stmt).first()

    def get_mapping_by_event(self, google_event_id: str) -> Optional[TaskCalendarEvent]:
        if not google_event_id:
            return None
        with self._session_factory() as session:
            stmt = select(TaskCalendarEvent).where(TaskCalendarEvent.google_event_id == google_event_id)
            return session.exec(stmt).first()

    def list_mappings(self) -> List[TaskCalendarEvent]:
        with self._session_factory() as session:
            return list(session.exec(select(TaskCalendarEvent)))

    def count(self) -> int:
        with self._session_factory() as session:
            return int(session.exec(select(func.count()).select_from(TaskCalendarEvent)).one())

    def upsert_mapping(
        self,
        task_id: str,
        *,
        calendar_id: str,
        google_event_id: str,
        synced_at: Optional[datetime] = None,
    ) -> TaskCalendarEvent:
        synced_at = synced_at or utc_now()
        with self._session_factory() as session:
            stmt = select(TaskCalendarEvent).where(TaskCalendarEvent.task_id == task_id)
            mapping = session.exec(stmt).first()
            if mapping is None:
                mapping = TaskCalendarEvent(
                    task_id=task_id,
                    calendar_id=calendar_id,
                    google_event_id=google_event_id,
                    last_synced_at=synced_at,
                )
            else:
                mapping.calendar_id = calendar_id
                mapping.google_event_id = google_event_id
                mapping.last_synced_at = synced_at
                mapping.updated_at = utc_now()
            session.add(mapping)
            session.commit()
            session.refresh(mapping)
            return mapping

    def delete_mapping(self, task_id: str) -> bool:
        with self._session_factory() as session:
            stmt = select(TaskCalendarEvent).where(TaskCalendarEvent.task_id == task_id)
            mapping = session.exec(stmt).first()
            if not mapping:
                return False
            session.delete(mapping)
            session.commit()
            return True


__all__ = ["CalendarSyncStore"]
