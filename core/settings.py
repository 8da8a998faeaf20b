"""Centralized application configuration."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional
import os
import sys


def get_default_data_dir(
    app_name: str,
    *,
    platform: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
    home: Optional[Path] = None,
) -> Path:
    """Return an OS-specific user data directory for ``app_name``.

    ``SYNAPSE_DATA_DIR`` in the environment wins over the platform default.
    """

    platform_id = (platform or sys.platform).lower()
    environ = dict(env if env is not None else os.environ)
    override = environ.get("SYNAPSE_DATA_DIR")
    if override:
        return Path(override).expanduser()

    home_dir = Path(home or Path.home())
    sanitized = app_name.strip() or "app"
    sanitized = sanitized.replace("/", "-").replace("\\", "-")

    if platform_id.startswith("win"):
        base = Path(environ.get("APPDATA") or home_dir / "AppData" / "Roaming")
    elif platform_id == "darwin":
        base = Path(environ.get("APPDATA") or home_dir / "Library" / "Application Support")
    else:
        base = Path(environ.get("XDG_DATA_HOME") or home_dir / ".local" / "share")

    return (base.expanduser() / sanitized)


APP_NAME = "Synapse"


DATA_DIR = get_default_data_dir(APP_NAME)
SECRETS_DIR = DATA_DIR / "secrets"
LOG_DIR = DATA_DIR / "logs"

for _dir in (DATA_DIR, SECRETS_DIR, LOG_DIR):
    _dir.mkdir(parents=True, exist_ok=True)


DB_PATH = DATA_DIR / "calendar_sync.db"
TOKEN_PATH = DATA_DIR / "token.json"
CLIENT_SECRET_PATH = SECRETS_DIR / "client_secret.json"
CONFIG_PATH = DATA_DIR / "config.json"
LOG_PATH = LOG_DIR / "sync.log"


@dataclass(frozen=True)
class ReminderOverride:
    method: str
    minutes: int


@dataclass(frozen=True)
class CalendarSyncSettings:
    title_marker: str = "[Synapse] "
    # IANA zone written next to every dateTime; callers pass the user's zone.
    default_time_zone: str = "America/Mexico_City"
    default_event_minutes: int = 60
    duration_from_estimate: bool = False
    reminder_overrides: tuple[ReminderOverride, ...] = (
        ReminderOverride("popup", 15),
        ReminderOverride("email", 30),
    )
    max_results: int = 100
    lookup_window_days: int = 1
    request_timeout_sec: float = 30.0
    untitled_event: str = "Evento sin título"
    untitled_task: str = "Tarea sin título"
    scopes: tuple[str, ...] = (
        "https://www.googleapis.com/auth/calendar",
        "https://www.googleapis.com/auth/calendar.events",
    )


CALENDAR_SYNC = CalendarSyncSettings()


@dataclass(frozen=True)
class LogSettings:
    path: Path = LOG_PATH
    max_bytes: int = 1_000_000
    backup_count: int = 3
    level: str = "INFO"


LOGGING = LogSettings()


__all__ = [
    "APP_NAME",
    "DATA_DIR",
    "SECRETS_DIR",
    "LOG_DIR",
    "DB_PATH",
    "TOKEN_PATH",
    "CLIENT_SECRET_PATH",
    "CONFIG_PATH",
    "LOG_PATH",
    "CALENDAR_SYNC",
    "LOGGING",
    "CalendarSyncSettings",
    "ReminderOverride",
    "get_default_data_dir",
]
