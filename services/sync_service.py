from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from core.logs import ensure_logger
from core.settings import CALENDAR_SYNC, CalendarSyncSettings
from models.calendar_event import CalendarEvent
from models.task import Task
from services.calendar_sync_store import CalendarSyncStore
from services.calendar_translator import (
    decode_event_to_task,
    encode_task_to_event,
    update_event_from_task,
)
from services.errors import (
    CalendarAccessError,
    CalendarSyncError,
    NotAuthenticatedError,
)
from services.event_identity import extract_task_id_from_event, is_synapse_event
from services.google_calendar import GoogleCalendar, TimeBound
from services.sync_rules import can_sync_task, filter_syncable_tasks
from storage.config import SyncConfig, load_config, update_config
from utils.datetime_utils import ensure_utc, to_rfc3339_utc, utc_now


@dataclass
class SyncResult:
    task_id: str
    success: bool
    event: Optional[CalendarEvent] = None
    calendar_id: Optional[str] = None
    created: bool = False
    error: Optional[str] = None


@dataclass
class SyncReport:
    synced_count: int = 0
    errors: List[str] = field(default_factory=list)
    results: List[SyncResult] = field(default_factory=list)


@dataclass
class ImportedEvent:
    """An event read back from the calendar. ``patch`` is never persisted here."""

    event_id: Optional[str]
    task_id: Optional[str]
    owned: bool
    patch: Dict[str, Any]


class CalendarSyncService:
    """Pushes tasks to Google Calendar and reads events back as task patches.

    Syncing the same task from two places at once is not guarded here; the
    caller keeps at most one sync per task in flight.
    """

    def __init__(
        self,
        gcal: GoogleCalendar,
        auth=None,
        store: Optional[CalendarSyncStore] = None,
        config_path: Optional[Path] = None,
        settings: CalendarSyncSettings = CALENDAR_SYNC,
    ) -> None:
        self.gcal = gcal
        self.auth = auth if auth is not None else gcal.auth
        self.store = store or CalendarSyncStore()
        self.config_path = config_path
        self.settings = settings
        self.logger = ensure_logger("synapse.sync")

    # ------------------------------------------------------------------
    # Configuration
    def get_settings(self) -> SyncConfig:
        return load_config(self.config_path)

    def update_settings(self, **changes: Any) -> SyncConfig:
        self._require_auth()
        self.logger.info("Updating sync settings: %s", sorted(changes))
        return update_config(self.config_path, **changes)

    def resolve_calendar_id(self, calendar_id: Optional[str] = None) -> str:
        if calendar_id:
            return calendar_id
        configured = self.get_settings().default_calendar_id
        if configured:
            return configured
        primary = self.gcal.get_primary_calendar()
        if not primary or not primary.get("id"):
            raise CalendarSyncError("No calendar available for sync")
        return primary["id"]

    # ------------------------------------------------------------------
    # Public API
    def sync_task(self, task: Task, calendar_id: Optional[str] = None) -> SyncResult:
        eligibility = can_sync_task(task)
        if not eligibility.can_sync:
            self.logger.debug("Task %s skipped: %s", task.id, eligibility.reason)
            return SyncResult(task.id, False, error=eligibility.reason)
        self._require_auth()
        target = self._checked_calendar(calendar_id)
        return self._push(task, target)

    def sync_all(self, tasks: Iterable[Task], calendar_id: Optional[str] = None) -> SyncReport:
        self._require_auth()
        config = self.get_settings()
        candidates = filter_syncable_tasks(tasks)
        if not config.sync_completed_tasks:
            candidates = [task for task in candidates if task.status != "completed"]

        report = SyncReport()
        if candidates:
            target = self._checked_calendar(calendar_id)
            for task in candidates:
                try:
                    result = self._push(task, target)
                except NotAuthenticatedError:
                    raise
                except CalendarSyncError as exc:
                    self.logger.warning("Sync of task %s failed: %s", task.id, exc)
                    result = SyncResult(task.id, False, error=exc.user_message)
                report.results.append(result)
                if result.success:
                    report.synced_count += 1
                else:
                    report.errors.append(f"{task.title}: {result.error}")

        update_config(self.config_path, last_sync_at=to_rfc3339_utc(utc_now()))
        self.logger.info(
            "Synced %s of %s tasks (%s errors)",
            report.synced_count,
            len(candidates),
            len(report.errors),
        )
        return report

    def unsync_task(self, task_id: str) -> bool:
        """Delete the linked event and forget the mapping. False when nothing is linked."""
        self._require_auth()
        mapping = self.store.get_mapping(task_id)
        if mapping is None:
            return False
        self.gcal.delete_event(mapping.calendar_id, mapping.google_event_id)
        self.store.delete_mapping(task_id)
        self.logger.info("Task %s unsynced from %s", task_id, mapping.calendar_id)
        return True

    def import_events(
        self,
        calendar_id: Optional[str] = None,
        time_min: TimeBound = None,
        time_max: TimeBound = None,
    ) -> List[ImportedEvent]:
        self._require_auth()
        target = self.resolve_calendar_id(calendar_id)
        events = self.gcal.list_events(target, time_min, time_max, self.settings.max_results)
        imported: List[ImportedEvent] = []
        for event in events:
            owned = is_synapse_event(event, marker=self.settings.title_marker)
            task_id = extract_task_id_from_event(event, marker=self.settings.title_marker)
            if owned and task_id is None:
                self.logger.warning("Event %s is marked as Synapse but carries no task id", event.get("id"))
            imported.append(
                ImportedEvent(
                    event_id=event.get("id"),
                    task_id=task_id,
                    owned=owned,
                    patch=decode_event_to_task(event, settings=self.settings),
                )
            )
        return imported

    def status(self) -> dict:
        config = self.get_settings()
        return {
            "calendarId": config.default_calendar_id,
            "autoSync": config.auto_sync_enabled,
            "syncCompletedTasks": config.sync_completed_tasks,
            "lastSyncAt": config.last_sync_at,
            "mappings": self.store.count(),
        }

    # ------------------------------------------------------------------
    # Helpers
    def _require_auth(self) -> None:
        if not self.auth or not self.auth.get_access_token():
            raise NotAuthenticatedError("No Google access token available")
        if not self.auth.has_calendar_permissions():
            raise NotAuthenticatedError("Google Calendar permissions were not granted")

    def _checked_calendar(self, calendar_id: Optional[str]) -> str:
        target = self.resolve_calendar_id(calendar_id)
        if not self.gcal.has_calendar_access(target):
            raise CalendarAccessError(target)
        return target

    def _time_zone(self) -> str:
        return self.get_settings().time_zone or self.settings.default_time_zone

    def _push(self, task: Task, target: str) -> SyncResult:
        time_zone = self._time_zone()
        existing, existing_calendar = self._find_linked_event(task, target)
        if existing is not None and existing_calendar:
            payload = update_event_from_task(existing, task, time_zone=time_zone, settings=self.settings)
            event = self.gcal.update_event(existing_calendar, existing["id"], payload)
            calendar_id, created = existing_calendar, False
        else:
            payload = encode_task_to_event(task, time_zone=time_zone, settings=self.settings)
            event = self.gcal.create_event(target, payload)
            calendar_id, created = target, True

        if event.get("id"):
            self.store.upsert_mapping(task.id, calendar_id=calendar_id, google_event_id=event["id"])
        self.logger.info(
            "Task %s %s event %s in %s",
            task.id,
            "created" if created else "updated",
            event.get("id"),
            calendar_id,
        )
        return SyncResult(task.id, True, event=event, calendar_id=calendar_id, created=created)

    def _find_linked_event(
        self, task: Task, target: str
    ) -> Tuple[Optional[CalendarEvent], Optional[str]]:
        mapping = self.store.get_mapping(task.id)
        if mapping is not None:
            event = self.gcal.get_event(mapping.calendar_id, mapping.google_event_id)
            if event is not None and self._belongs_to(event, task.id):
                return event, mapping.calendar_id
            self.logger.info(
                "Linked event %s for task %s is gone or no longer owned",
                mapping.google_event_id,
                task.id,
            )
        event = self._recover_event(task, target)
        if event is not None:
            self.logger.info("Recovered event %s for task %s from its description", event.get("id"), task.id)
            return event, target
        return None, None

    def _belongs_to(self, event: CalendarEvent, task_id: str) -> bool:
        if not is_synapse_event(event, marker=self.settings.title_marker):
            return False
        found = extract_task_id_from_event(event, marker=self.settings.title_marker)
        # a marked event with the id line edited away still belongs to its mapping
        return found is None or found == task_id

    def _recover_event(self, task: Task, calendar_id: str) -> Optional[CalendarEvent]:
        due = ensure_utc(task.due_date)
        if due is None:
            return None
        window = timedelta(days=self.settings.lookup_window_days)
        events = self.gcal.list_events(calendar_id, due - window, due + window, self.settings.max_results)
        for event in events:
            if event.get("id") and extract_task_id_from_event(event, marker=self.settings.title_marker) == task.id:
                return event
        return None


__all__ = ["CalendarSyncService", "ImportedEvent", "SyncReport", "SyncResult"]
