from datetime import datetime, timezone

from services.calendar_sync_store import CalendarSyncStore


def test_upsert_creates_then_updates(session_factory):
    store = CalendarSyncStore(session_factory=session_factory)
    first_sync = datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc)

    created = store.upsert_mapping("t1", calendar_id="cal-a", google_event_id="e1", synced_at=first_sync)
    assert created.id is not None

    updated = store.upsert_mapping("t1", calendar_id="cal-b", google_event_id="e2")
    assert updated.id == created.id
    assert store.count() == 1

    mapping = store.get_mapping("t1")
    assert mapping.calendar_id == "cal-b"
    assert mapping.google_event_id == "e2"


def test_lookup_by_event(session_factory):
    store = CalendarSyncStore(session_factory=session_factory)
    store.upsert_mapping("t1", calendar_id="cal", google_event_id="e1")
    store.upsert_mapping("t2", calendar_id="cal", google_event_id="e2")

    assert store.get_mapping_by_event("e2").task_id == "t2"
    assert store.get_mapping_by_event("missing") is None
    assert store.get_mapping_by_event("") is None
    assert sorted(m.task_id for m in store.list_mappings()) == ["t1", "t2"]


def test_delete_mapping(session_factory):
    store = CalendarSyncStore(session_factory=session_factory)
    store.upsert_mapping("t1", calendar_id="cal", google_event_id="e1")

    assert store.delete_mapping("t1") is True
    assert store.delete_mapping("t1") is False
    assert store.get_mapping("t1") is None
    assert store.count() == 0
