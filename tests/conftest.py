import copy
import os
import sys
import tempfile
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Keep token/config/log files of the test run out of the real user data dir.
os.environ.setdefault("SYNAPSE_DATA_DIR", tempfile.mkdtemp(prefix="synapse-tests-"))

import httplib2
import pytest
from googleapiclient.errors import HttpError
from sqlmodel import Session, SQLModel, create_engine

import models.task_calendar_event  # noqa: F401,E402


def http_error(status: int, message: str = "boom") -> HttpError:
    content = ('{"error": {"code": %d, "message": "%s"}}' % (status, message)).encode("utf-8")
    return HttpError(httplib2.Response({"status": status}), content)


class _Request:
    def __init__(self, service, op, fn):
        self.service = service
        self.op = op
        self.fn = fn

    def execute(self, num_retries=0):
        error = self.service.fail_on.get(self.op) or self.service.fail_on.get("*")
        if error is not None:
            raise error
        return self.fn()


class _CalendarListResource:
    def __init__(self, service):
        self.service = service

    def list(self, pageToken=None):
        self.service.calls.append(("calendarList.list", {"pageToken": pageToken}))
        return _Request(self.service, "calendarList.list", lambda: self.service._page(self.service.calendars, pageToken))


class _EventsResource:
    def __init__(self, service):
        self.service = service

    def list(self, **params):
        self.service.calls.append(("events.list", dict(params)))
        items = list(self.service.events_by_calendar.get(params["calendarId"], {}).values())
        return _Request(self.service, "events.list", lambda: self.service._page(items, params.get("pageToken")))

    def get(self, calendarId, eventId):
        self.service.calls.append(("events.get", {"calendarId": calendarId, "eventId": eventId}))

        def run():
            event = self.service.events_by_calendar.get(calendarId, {}).get(eventId)
            if event is None:
                raise http_error(404, "Not Found")
            return copy.deepcopy(event)

        return _Request(self.service, "events.get", run)

    def insert(self, calendarId, body):
        self.service.calls.append(("events.insert", {"calendarId": calendarId, "body": copy.deepcopy(body)}))

        def run():
            self.service.counter += 1
            event = copy.deepcopy(body)
            event["id"] = f"evt{self.service.counter}"
            self.service.events_by_calendar.setdefault(calendarId, {})[event["id"]] = event
            return copy.deepcopy(event)

        return _Request(self.service, "events.insert", run)

    def update(self, calendarId, eventId, body):
        self.service.calls.append(
            ("events.update", {"calendarId": calendarId, "eventId": eventId, "body": copy.deepcopy(body)})
        )

        def run():
            events = self.service.events_by_calendar.get(calendarId, {})
            if eventId not in events:
                raise http_error(404, "Not Found")
            event = copy.deepcopy(body)
            event["id"] = eventId
            events[eventId] = event
            return copy.deepcopy(event)

        return _Request(self.service, "events.update", run)

    def delete(self, calendarId, eventId):
        self.service.calls.append(("events.delete", {"calendarId": calendarId, "eventId": eventId}))

        def run():
            events = self.service.events_by_calendar.get(calendarId, {})
            if eventId not in events:
                raise http_error(404, "Not Found")
            del events[eventId]
            return ""

        return _Request(self.service, "events.delete", run)


class FakeCalendarService:
    """In-memory stand-in for the object returned by ``build("calendar", "v3")``."""

    def __init__(self, calendars=None, page_size=None):
        if calendars is None:
            calendars = [
                {"id": "work@example.com", "summary": "Work", "accessRole": "writer"},
                {"id": "me@example.com", "summary": "Me", "primary": True, "accessRole": "owner"},
            ]
        self.calendars = calendars
        self.events_by_calendar = {}
        self.calls = []
        self.fail_on = {}
        self.page_size = page_size
        self.counter = 0

    def calendarList(self):
        return _CalendarListResource(self)

    def events(self):
        return _EventsResource(self)

    def add_event(self, calendar_id, event):
        self.events_by_calendar.setdefault(calendar_id, {})[event["id"]] = copy.deepcopy(event)

    def calls_of(self, name):
        return [params for call, params in self.calls if call == name]

    def _page(self, items, page_token):
        if not self.page_size:
            return {"items": copy.deepcopy(items)}
        offset = int(page_token or 0)
        page = {"items": copy.deepcopy(items[offset:offset + self.page_size])}
        if offset + self.page_size < len(items):
            page["nextPageToken"] = str(offset + self.page_size)
        return page


@pytest.fixture()
def fake_service():
    return FakeCalendarService()


@pytest.fixture()
def session_factory():
    engine = create_engine("sqlite:///:memory:")
    SQLModel.metadata.create_all(engine)

    def factory():
        return Session(engine)

    return factory
