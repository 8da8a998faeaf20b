"""Exceptions raised by the calendar sync services."""

from __future__ import annotations

from typing import Optional


class CalendarSyncError(Exception):
    """Base class for calendar sync failures."""

    user_message = "No se pudo sincronizar con el calendario"


class NotAuthenticatedError(CalendarSyncError):
    """No usable Google access token; no remote call was attempted."""

    user_message = "No autenticado con Google Calendar"


class CalendarAccessError(CalendarSyncError):
    user_message = "No tienes acceso a este calendario"

    def __init__(self, calendar_id: str) -> None:
        super().__init__(f"Calendar {calendar_id!r} is not accessible")
        self.calendar_id = calendar_id


class CalendarOperationError(CalendarSyncError):
    """A remote calendar operation failed. The original error is ``__cause__``."""

    def __init__(self, operation: str, cause: Optional[BaseException] = None) -> None:
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Calendar operation {operation!r} failed{detail}")
        self.operation = operation
        self.cause = cause


__all__ = [
    "CalendarAccessError",
    "CalendarOperationError",
    "CalendarSyncError",
    "NotAuthenticatedError",
]
