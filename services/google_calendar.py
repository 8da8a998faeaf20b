from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Union

import httplib2
from google.auth.exceptions import GoogleAuthError
from google.oauth2.credentials import Credentials
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from httplib2 import HttpLib2Error

from core.settings import CALENDAR_SYNC
from models.calendar_event import CalendarEvent, CalendarInfo
from services.errors import CalendarOperationError, NotAuthenticatedError
from utils.datetime_utils import (
    day_range,
    month_range,
    resolve_time_zone,
    to_rfc3339_utc,
    utc_now,
    week_range,
)

logger = logging.getLogger("synapse.calendar")

TimeBound = Union[datetime, str, None]

_REMOTE_ERRORS = (HttpError, GoogleAuthError, HttpLib2Error, OSError)
_GONE_STATUS = {404, 410}
_EVENT_KEYS = ("id", "summary", "description", "start", "end", "colorId", "reminders")


# ---------- service construction ----------
def _build_service(access_token: str, timeout: Optional[float]) -> Any:
    creds = Credentials(token=access_token)
    http = AuthorizedHttp(creds, http=httplib2.Http(timeout=timeout))
    return build("calendar", "v3", http=http, cache_discovery=False)


def _http_status(exc: BaseException) -> Optional[int]:
    resp = getattr(exc, "resp", None)
    status = getattr(resp, "status", None)
    try:
        return int(status) if status is not None else None
    except (TypeError, ValueError):
        return None


def _time_bound(value: TimeBound) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value or None
    return to_rfc3339_utc(value)


def _normalize_calendar(item: Dict[str, Any]) -> CalendarInfo:
    calendar: CalendarInfo = {
        "id": item.get("id") or "",
        "summary": item.get("summary") or "",
        "primary": bool(item.get("primary")),
        "accessRole": item.get("accessRole") or "",
    }
    for key in ("description", "backgroundColor", "foregroundColor"):
        if item.get(key):
            calendar[key] = item[key]
    return calendar


def _normalize_event(item: Dict[str, Any]) -> CalendarEvent:
    event: CalendarEvent = {
        "summary": item.get("summary") or "",
        "start": dict(item.get("start") or {}),
        "end": dict(item.get("end") or {}),
    }
    for key in _EVENT_KEYS:
        if key not in event and item.get(key) is not None:
            event[key] = item[key]
    return event


# ---------- gateway ----------
class GoogleCalendar:
    """
    Thin wrapper over the Calendar v3 API.

    ``auth`` is any object exposing ``get_access_token()``. A fresh service is
    built for every call so token refreshes done elsewhere are always picked up.
    """

    def __init__(
        self,
        auth,
        *,
        timeout: Optional[float] = None,
        time_zone: Optional[str] = None,
        service_factory: Optional[Callable[[str, Optional[float]], Any]] = None,
    ):
        self.auth = auth
        self.timeout = CALENDAR_SYNC.request_timeout_sec if timeout is None else timeout
        self.time_zone = time_zone or CALENDAR_SYNC.default_time_zone
        self._service_factory = service_factory or _build_service

    def _service(self) -> Any:
        token = self.auth.get_access_token() if self.auth is not None else None
        if not token:
            raise NotAuthenticatedError("No Google access token available")
        return self._service_factory(token, self.timeout)

    def _execute(self, operation: str, make_request: Callable[[Any], Any]) -> Any:
        service = self._service()
        try:
            return make_request(service).execute(num_retries=0)
        except _REMOTE_ERRORS as exc:
            logger.error("Calendar %s failed: %s", operation, exc)
            raise CalendarOperationError(operation, exc) from exc

    # ----- calendars -----
    def list_calendars(self) -> List[CalendarInfo]:
        calendars: List[CalendarInfo] = []
        page_token: Optional[str] = None
        while True:
            response = self._execute(
                "list_calendars",
                lambda svc: svc.calendarList().list(pageToken=page_token),
            )
            calendars.extend(_normalize_calendar(item) for item in response.get("items", []))
            page_token = response.get("nextPageToken")
            if not page_token:
                break
        return calendars

    def get_primary_calendar(self) -> Optional[CalendarInfo]:
        calendars = self.list_calendars()
        for calendar in calendars:
            if calendar.get("primary"):
                return calendar
        return calendars[0] if calendars else None

    def has_calendar_access(self, calendar_id: str) -> bool:
        return any(calendar.get("id") == calendar_id for calendar in self.list_calendars())

    # ----- events -----
    def list_events(
        self,
        calendar_id: str,
        time_min: TimeBound = None,
        time_max: TimeBound = None,
        max_results: int = CALENDAR_SYNC.max_results,
    ) -> List[CalendarEvent]:
        params: Dict[str, Any] = dict(
            calendarId=calendar_id,
            singleEvents=True,
            orderBy="startTime",
            maxResults=max_results,
        )
        if _time_bound(time_min):
            params["timeMin"] = _time_bound(time_min)
        if _time_bound(time_max):
            params["timeMax"] = _time_bound(time_max)

        events: List[CalendarEvent] = []
        while len(events) < max_results:
            response = self._execute("list_events", lambda svc: svc.events().list(**params))
            events.extend(_normalize_event(item) for item in response.get("items", []))
            page_token = response.get("nextPageToken")
            if not page_token:
                break
            params["pageToken"] = page_token
        return events[:max_results]

    def get_event(self, calendar_id: str, event_id: str) -> Optional[CalendarEvent]:
        service = self._service()
        try:
            item = service.events().get(calendarId=calendar_id, eventId=event_id).execute(num_retries=0)
        except HttpError as exc:
            if _http_status(exc) in _GONE_STATUS:
                return None
            logger.error("Calendar get_event failed: %s", exc)
            raise CalendarOperationError("get_event", exc) from exc
        except _REMOTE_ERRORS as exc:
            logger.error("Calendar get_event failed: %s", exc)
            raise CalendarOperationError("get_event", exc) from exc
        if not item or not item.get("id") or item.get("status") == "cancelled":
            return None
        return _normalize_event(item)

    def create_event(self, calendar_id: str, event: CalendarEvent) -> CalendarEvent:
        body = {key: value for key, value in event.items() if key != "id"}
        created = self._execute(
            "create_event",
            lambda svc: svc.events().insert(calendarId=calendar_id, body=body),
        )
        logger.info("Created event %s in %s", created.get("id"), calendar_id)
        return _normalize_event(created)

    def update_event(self, calendar_id: str, event_id: str, event: CalendarEvent) -> CalendarEvent:
        body = dict(event)
        body["id"] = event_id
        updated = self._execute(
            "update_event",
            lambda svc: svc.events().update(calendarId=calendar_id, eventId=event_id, body=body),
        )
        logger.info("Updated event %s in %s", event_id, calendar_id)
        return _normalize_event(updated)

    def delete_event(self, calendar_id: str, event_id: str) -> None:
        service = self._service()
        try:
            service.events().delete(calendarId=calendar_id, eventId=event_id).execute(num_retries=0)
        except HttpError as exc:
            if _http_status(exc) in _GONE_STATUS:
                logger.info("Event %s already gone from %s", event_id, calendar_id)
                return
            logger.error("Calendar delete_event failed: %s", exc)
            raise CalendarOperationError("delete_event", exc) from exc
        except _REMOTE_ERRORS as exc:
            logger.error("Calendar delete_event failed: %s", exc)
            raise CalendarOperationError("delete_event", exc) from exc
        logger.info("Deleted event %s from %s", event_id, calendar_id)

    # ----- ranges -----
    def get_today_events(self, calendar_id: str, now: Optional[datetime] = None) -> List[CalendarEvent]:
        start, end = day_range(now or utc_now(), resolve_time_zone(self.time_zone))
        return self.list_events(calendar_id, start, end)

    def get_week_events(self, calendar_id: str, now: Optional[datetime] = None) -> List[CalendarEvent]:
        start, end = week_range(now or utc_now(), resolve_time_zone(self.time_zone))
        return self.list_events(calendar_id, start, end)

    def get_month_events(self, calendar_id: str, now: Optional[datetime] = None) -> List[CalendarEvent]:
        start, end = month_range(now or utc_now(), resolve_time_zone(self.time_zone))
        return self.list_events(calendar_id, start, end)


__all__ = ["GoogleCalendar"]
