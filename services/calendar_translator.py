"""Utilities for Synapse task ↔ Google Calendar event translation."""

from __future__ import annotations

import copy
from datetime import datetime, timedelta
import re
from typing import Any, Dict, Mapping, Optional

from core.priorities import DEFAULT_PRIORITY, priority_color_id, priority_from_color_id
from core.settings import CALENDAR_SYNC, CalendarSyncSettings
from models.calendar_event import CalendarEvent
from models.task import Task
from services.description_codec import DEFAULT_CODEC, LabeledParagraphCodec
from services.event_identity import add_title_marker, is_synapse_event, strip_title_marker
from utils.datetime_utils import ensure_utc, parse_event_start, to_rfc3339_utc, utc_now


_HOURS_RE = re.compile(r"(\d+(?:[.,]\d+)?)\s*h", re.I)
_MINUTES_RE = re.compile(r"(\d+)\s*min", re.I)

_FIELD_MAPPING: Dict[str, Dict[str, str]] = {
    "task": {
        "title": "summary",
        "description": "description",
        "due_date": "start.dateTime",
        "priority": "colorId",
        "estimated_time": "description (parsed)",
        "tags": "description (parsed)",
        "notes": "description (parsed)",
    },
    "event": {
        "summary": "title",
        "description": "description",
        "start": "due_date",
        "colorId": "priority",
        "reminders": "auto-generated",
    },
}


def estimate_duration_minutes(estimated_time: Optional[str], default: int = 60) -> int:
    """Read "2h", "1.5h", "30min" or "1h 30min" style estimates."""
    if not estimated_time:
        return default
    text = estimated_time.lower()
    minutes = 0.0
    hours_match = _HOURS_RE.search(text)
    if hours_match:
        minutes += float(hours_match.group(1).replace(",", ".")) * 60
    minutes_match = _MINUTES_RE.search(text)
    if minutes_match:
        minutes += int(minutes_match.group(1))
    return int(minutes) if minutes >= 1 else default


def get_task_event_mapping() -> Dict[str, Dict[str, str]]:
    return copy.deepcopy(_FIELD_MAPPING)


def _default_reminders(settings: CalendarSyncSettings) -> Dict[str, Any]:
    return {
        "useDefault": False,
        "overrides": [
            {"method": reminder.method, "minutes": reminder.minutes}
            for reminder in settings.reminder_overrides
        ],
    }


def encode_task_to_event(
    task: Task,
    *,
    time_zone: Optional[str] = None,
    now: Optional[datetime] = None,
    settings: CalendarSyncSettings = CALENDAR_SYNC,
    codec: LabeledParagraphCodec = DEFAULT_CODEC,
) -> CalendarEvent:
    """Build the event payload for ``task``.

    Eligibility is not checked here. Without a due date the event starts at
    ``now``; the estimate only stretches the event when
    ``settings.duration_from_estimate`` is on.
    """
    start = ensure_utc(task.due_date) or ensure_utc(now) or utc_now()
    minutes = settings.default_event_minutes
    if settings.duration_from_estimate:
        minutes = estimate_duration_minutes(task.estimated_time, minutes)
    end = start + timedelta(minutes=minutes)
    zone = time_zone or settings.default_time_zone

    return {
        "summary": add_title_marker(task.title, marker=settings.title_marker),
        "description": codec.pack(task),
        "start": {"dateTime": to_rfc3339_utc(start), "timeZone": zone},
        "end": {"dateTime": to_rfc3339_utc(end), "timeZone": zone},
        "colorId": priority_color_id(task.priority),
        "reminders": _default_reminders(settings),
    }


def decode_event_to_task(
    event: Optional[Mapping[str, Any]],
    *,
    settings: CalendarSyncSettings = CALENDAR_SYNC,
    codec: LabeledParagraphCodec = DEFAULT_CODEC,
) -> Dict[str, Any]:
    """Turn an event into a task patch. Keys are only present when recovered."""
    event = event if isinstance(event, Mapping) else {}
    summary = event.get("summary") if isinstance(event.get("summary"), str) else ""
    description = event.get("description") if isinstance(event.get("description"), str) else ""
    start = event.get("start")
    due_date = parse_event_start(start) if isinstance(start, Mapping) else None

    if not is_synapse_event(event, marker=settings.title_marker):
        patch: Dict[str, Any] = {
            "title": summary or settings.untitled_event,
            "description": description,
            "priority": DEFAULT_PRIORITY,
            "status": "pending",
        }
    else:
        patch = {
            "title": strip_title_marker(summary, marker=settings.title_marker) or settings.untitled_task,
            "description": codec.base_description(description),
            "priority": priority_from_color_id(event.get("colorId")),
            "status": "pending",
        }
        patch.update(codec.unpack(description))

    if due_date is not None:
        patch["due_date"] = due_date
    return patch


def update_event_from_task(
    existing_event: Mapping[str, Any],
    task: Task,
    *,
    time_zone: Optional[str] = None,
    now: Optional[datetime] = None,
    settings: CalendarSyncSettings = CALENDAR_SYNC,
    codec: LabeledParagraphCodec = DEFAULT_CODEC,
) -> CalendarEvent:
    """Re-encode ``task`` for an event that already exists in the calendar.

    The event id is carried over, and reminders the user customized in the
    calendar survive; only events on default reminders get the fixed set.
    """
    updated = encode_task_to_event(task, time_zone=time_zone, now=now, settings=settings, codec=codec)
    if existing_event.get("id"):
        updated["id"] = existing_event["id"]
    reminders = existing_event.get("reminders")
    # an empty reminders object counts as default and gets the fixed set
    if isinstance(reminders, Mapping) and reminders and not reminders.get("useDefault"):
        updated["reminders"] = copy.deepcopy(dict(reminders))
    return updated


__all__ = [
    "decode_event_to_task",
    "encode_task_to_event",
    "estimate_duration_minutes",
    "get_task_event_mapping",
    "update_event_from_task",
]
