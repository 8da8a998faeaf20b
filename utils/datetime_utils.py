"""Utilities for working with RFC3339 timestamps, UTC datetimes and local ranges."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Any, Mapping, Optional, Tuple, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

UTC = timezone.utc


def parse_rfc3339(s: Optional[str]) -> Optional[datetime]:
    """Parse a RFC3339 string and return a timezone-aware UTC datetime."""

    if not s:
        return None

    value = s.strip()
    if not value:
        return None

    if value.endswith("Z") or value.endswith("z"):
        value = value[:-1] + "+00:00"

    if "." in value:
        head, tail = value.split(".", 1)
        if "+" in tail:
            frac, tz = tail.split("+", 1)
            sign = "+"
        elif "-" in tail:
            frac, tz = tail.split("-", 1)
            sign = "-"
        else:
            frac, tz = tail, "00:00"
            sign = "+"
        frac = (frac + "000000")[:6]
        value = f"{head}.{frac}{sign}{tz}"
    try:
        dt = datetime.fromisoformat(value)
    except ValueError:
        return None

    return ensure_utc(dt)


def to_rfc3339_utc(dt: Optional[Union[datetime, str]]) -> Optional[str]:
    """Convert a datetime (or string) to RFC3339 in UTC with second precision."""

    if dt is None:
        return None
    if isinstance(dt, str):
        dt = parse_rfc3339(dt)
    if dt is None:
        return None
    dt = ensure_utc(dt)
    return dt.replace(microsecond=0).isoformat().replace("+00:00", "Z")


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def utc_now() -> datetime:
    return datetime.now(UTC)


def midnight_utc(d: date) -> datetime:
    return datetime.combine(d, time.min, tzinfo=UTC)


def resolve_time_zone(name: Optional[str]) -> tzinfo:
    """Return the zone for an IANA name, UTC when it is empty or unknown."""

    if not name:
        return UTC
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return UTC


def parse_event_start(payload: Optional[Mapping[str, Any]]) -> Optional[datetime]:
    """Read a Google ``start``/``end`` object: ``dateTime`` first, then all-day ``date``."""

    if not payload:
        return None
    date_time = payload.get("dateTime")
    if date_time:
        return parse_rfc3339(str(date_time))
    all_day = payload.get("date")
    if all_day:
        try:
            return midnight_utc(datetime.strptime(str(all_day), "%Y-%m-%d").date())
        except ValueError:
            return None
    return None


def day_range(now: datetime, tz: tzinfo) -> Tuple[datetime, datetime]:
    local = now.astimezone(tz)
    start = datetime.combine(local.date(), time.min, tzinfo=tz)
    return start, datetime.combine(local.date() + timedelta(days=1), time.min, tzinfo=tz)


def week_range(now: datetime, tz: tzinfo) -> Tuple[datetime, datetime]:
    """Sunday-to-Sunday window holding ``now``."""

    local = now.astimezone(tz)
    # weekday(): Monday == 0, so Sunday sits six days after Monday
    offset = (local.weekday() + 1) % 7
    first = local.date() - timedelta(days=offset)
    start = datetime.combine(first, time.min, tzinfo=tz)
    return start, datetime.combine(first + timedelta(days=7), time.min, tzinfo=tz)


def month_range(now: datetime, tz: tzinfo) -> Tuple[datetime, datetime]:
    """First day of the month at midnight to the last day at 23:59:59."""

    local = now.astimezone(tz)
    first = local.date().replace(day=1)
    if first.month == 12:
        following = first.replace(year=first.year + 1, month=1)
    else:
        following = first.replace(month=first.month + 1)
    last = following - timedelta(days=1)
    start = datetime.combine(first, time.min, tzinfo=tz)
    return start, datetime.combine(last, time(23, 59, 59), tzinfo=tz)


__all__ = [
    "UTC",
    "day_range",
    "ensure_utc",
    "midnight_utc",
    "month_range",
    "parse_event_start",
    "parse_rfc3339",
    "resolve_time_zone",
    "to_rfc3339_utc",
    "utc_now",
    "week_range",
]
