"""Shapes of the Google Calendar payloads this app reads and writes.

Events stay plain dicts on the wire; these ``TypedDict`` declarations only
name the subset of keys the sync code touches.
"""

from __future__ import annotations

from typing import List, TypedDict


class EventDateTime(TypedDict, total=False):
    dateTime: str
    date: str
    timeZone: str


class ReminderOverride(TypedDict):
    method: str
    minutes: int


class EventReminders(TypedDict, total=False):
    useDefault: bool
    overrides: List[ReminderOverride]


class CalendarEvent(TypedDict, total=False):
    id: str
    summary: str
    description: str
    start: EventDateTime
    end: EventDateTime
    colorId: str
    reminders: EventReminders


class CalendarInfo(TypedDict, total=False):
    id: str
    summary: str
    description: str
    primary: bool
    accessRole: str
    backgroundColor: str
    foregroundColor: str


__all__ = [
    "CalendarEvent",
    "CalendarInfo",
    "EventDateTime",
    "EventReminders",
    "ReminderOverride",
]
