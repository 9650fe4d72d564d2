"""Shared fixtures: an in-memory calendar server behind httpx.MockTransport."""

import json
import re
from datetime import datetime

import httpx
import pytest

from uoa_calendar import AsyncCalendarClient, CalendarClient, overlaps

TOKEN = "test-token"
BASE_URL = "http://calendar.test/api"

_CALENDARS = re.compile(r"/calendars/")
_CALENDAR = re.compile(r"/calendars/(\d+)/")
_EVENTS = re.compile(r"/calendars/(\d+)/events/")
_EVENT = re.compile(r"/calendars/(\d+)/events/(\d+)/")


def _when(value: str) -> datetime:
    return datetime.fromisoformat(value)


class FakeCalendarServer:
    """Minimal calendar REST API with bearer auth and overlap queries."""

    def __init__(self, token: str = TOKEN, base_path: str = "/api"):
        self.token = token
        self.base_path = base_path
        self.calendars: dict[int, dict] = {}
        self.events: dict[int, dict] = {}
        self.requests: list[httpx.Request] = []
        self._next_calendar_id = 1
        self._next_event_id = 1

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.headers.get("Authorization") != f"Bearer {self.token}":
            return httpx.Response(401, json={"detail": "Invalid token."})

        path = request.url.path.removeprefix(self.base_path)
        method = request.method

        if _CALENDARS.fullmatch(path):
            if method == "POST":
                return self._create_calendar(request)
            return httpx.Response(200, json=list(self.calendars.values()))

        if match := _CALENDAR.fullmatch(path):
            calendar_id = int(match.group(1))
            if calendar_id not in self.calendars:
                return httpx.Response(404, json={"detail": "Not found."})
            if method == "DELETE":
                del self.calendars[calendar_id]
                self.events = {
                    k: v for k, v in self.events.items() if v["calendar"] != calendar_id
                }
                return httpx.Response(204)
            return httpx.Response(200, json=self.calendars[calendar_id])

        if match := _EVENTS.fullmatch(path):
            calendar_id = int(match.group(1))
            if calendar_id not in self.calendars:
                return httpx.Response(404, json={"detail": "Not found."})
            if method == "POST":
                return self._create_event(calendar_id, request)
            return self._find_events(calendar_id, request)

        if match := _EVENT.fullmatch(path):
            calendar_id, event_id = int(match.group(1)), int(match.group(2))
            event = self.events.get(event_id)
            if event is None or event["calendar"] != calendar_id:
                return httpx.Response(404, json={"detail": "Not found."})
            if method == "DELETE":
                del self.events[event_id]
                return httpx.Response(204)
            if method == "PATCH":
                changes = json.loads(request.content)
                updated = {**event, **changes}
                if _when(updated["start"]) > _when(updated["end"]):
                    return httpx.Response(400, json={"non_field_errors": ["start after end"]})
                self.events[event_id] = updated
                return httpx.Response(200, json=updated)
            return httpx.Response(200, json=event)

        return httpx.Response(404, json={"detail": "Not found."})

    def _create_calendar(self, request: httpx.Request) -> httpx.Response:
        name = json.loads(request.content).get("name")
        if not name:
            return httpx.Response(400, json={"name": ["This field is required."]})
        calendar = {"id": self._next_calendar_id, "name": name}
        self.calendars[calendar["id"]] = calendar
        self._next_calendar_id += 1
        return httpx.Response(201, json=calendar)

    def _create_event(self, calendar_id: int, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        missing = [key for key in ("title", "start", "end") if key not in body]
        if missing:
            return httpx.Response(400, json={key: ["This field is required."] for key in missing})
        try:
            backwards = _when(body["start"]) > _when(body["end"])
        except ValueError:
            return httpx.Response(400, json={"start": ["Invalid datetime format."]})
        if backwards:
            return httpx.Response(400, json={"non_field_errors": ["start after end"]})

        event = {
            "id": self._next_event_id,
            "calendar": calendar_id,
            "title": body["title"],
            "start": body["start"],
            "end": body["end"],
        }
        self.events[event["id"]] = event
        self._next_event_id += 1
        return httpx.Response(201, json=event)

    def _find_events(self, calendar_id: int, request: httpx.Request) -> httpx.Response:
        events = [e for e in self.events.values() if e["calendar"] == calendar_id]
        start = request.url.params.get("start")
        end = request.url.params.get("end")
        if start is not None and end is not None:
            events = [e for e in events if overlaps(e["start"], e["end"], start, end)]
        return httpx.Response(200, json=events)


class Continuations:
    """Records every success/failure continuation call."""

    def __init__(self):
        self.successes: list[tuple] = []
        self.failures: list[tuple] = []

    def on_success(self, response, data):
        self.successes.append((response, data))

    def on_failure(self, response, error):
        self.failures.append((response, error))


@pytest.fixture
def server():
    """Fresh in-memory calendar server."""
    return FakeCalendarServer()


@pytest.fixture
def make_client():
    """Build CalendarClients routed to a request handler; closed on teardown."""
    made = []

    def factory(handler, token=TOKEN):
        client = CalendarClient(
            api_token=token, base_url=BASE_URL, transport=httpx.MockTransport(handler)
        )
        made.append(client)
        return client

    yield factory
    for client in made:
        client.close()


@pytest.fixture
def make_async_client():
    """Build AsyncCalendarClients routed to a request handler."""

    def factory(handler, token=TOKEN):
        return AsyncCalendarClient(
            api_token=token, base_url=BASE_URL, transport=httpx.MockTransport(handler)
        )

    return factory


@pytest.fixture
def client(server, make_client):
    """CalendarClient wired to the fake server."""
    return make_client(server)


@pytest.fixture
def calls():
    return Continuations()
