"""Calendar and event models with wire serialization."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Union

Instant = Union[datetime, date, str]

EVENT_FIELDS = ("title", "start", "end")


def serialize_instant(value: Instant) -> str:
    """Format an instant for the wire.

    Dates become ``YYYY-MM-DD``, datetimes use ``isoformat()`` and strings are
    forwarded unmodified.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Unsupported instant type: {type(value).__name__}")


def parse_instant(value: Instant) -> datetime:
    """Parse an ISO-8601 instant as returned by the server."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if not isinstance(value, str):
        raise TypeError(f"Unsupported instant type: {type(value).__name__}")
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def align_instants(*values: Instant) -> list[datetime]:
    """Parse instants onto one timeline.

    When some values carry a UTC offset and others do not, the naive ones take the
    tzinfo of the first aware value.
    """
    parsed = [parse_instant(value) for value in values]
    tz = next((p.tzinfo for p in parsed if p.tzinfo is not None), None)
    if tz is None:
        return parsed
    return [p if p.tzinfo is not None else p.replace(tzinfo=tz) for p in parsed]


def overlaps(start: Instant, end: Instant, range_start: Instant, range_end: Instant) -> bool:
    """Check whether ``[start, end]`` shares at least one instant with the range.

    Both intervals are closed, so an event ending exactly at ``range_start`` or
    starting exactly at ``range_end`` overlaps. Naive values (and dates) are read
    in the offset of the aware ones.
    """
    start, end, range_start, range_end = align_instants(start, end, range_start, range_end)
    return start <= range_end and end >= range_start


def _object(data: Any) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise TypeError(f"expected a JSON object, got {type(data).__name__}")
    return data


def _server_id(value: Any) -> int:
    """Server-assigned ids are positive integers."""
    if isinstance(value, bool):
        raise TypeError("id must be an integer")
    parsed = int(value)
    if parsed <= 0:
        raise ValueError(f"id must be positive, got {parsed}")
    return parsed


@dataclass
class Calendar:
    """A named container of events."""

    id: int
    name: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Calendar:
        """Parse calendar from API response."""
        data = _object(data)
        return cls(id=_server_id(data["id"]), name=data["name"])


@dataclass
class Event:
    """A titled time interval belonging to one calendar."""

    title: str
    start: Instant
    end: Instant
    id: int | None = None
    calendar_id: int | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], calendar_id: int | None = None) -> Event:
        """Parse event from API response.

        Args:
            data: Event JSON object.
            calendar_id: Calendar the event was requested from, used when the
                server omits the ``calendar`` field.
        """
        data = _object(data)
        owner = data.get("calendar", calendar_id)
        return cls(
            id=_server_id(data["id"]),
            title=data["title"],
            start=parse_instant(data["start"]),
            end=parse_instant(data["end"]),
            calendar_id=int(owner) if owner is not None else None,
        )

    def to_payload(self) -> dict[str, str]:
        """Build the request body for creating this event."""
        return {
            "title": self.title,
            "start": serialize_instant(self.start),
            "end": serialize_instant(self.end),
        }

    def overlaps(self, range_start: Instant, range_end: Instant) -> bool:
        """Check whether this event falls (even partly) inside the range."""
        return overlaps(self.start, self.end, range_start, range_end)


def event_payload(event: Event | Mapping[str, Any]) -> dict[str, Any]:
    """Build a create-event body from an Event or a ``{title, start, end}`` mapping.

    Missing mapping keys are left out so the server can report them.
    """
    if isinstance(event, Event):
        return event.to_payload()

    payload: dict[str, Any] = {}
    for key in EVENT_FIELDS:
        if key not in event:
            continue
        value = event[key]
        payload[key] = serialize_instant(value) if key != "title" else value
    return payload


def filter_overlapping(
    events: Iterable[Event], range_start: Instant, range_end: Instant
) -> list[Event]:
    """Return the events overlapping the range, keeping their input order."""
    return [event for event in events if event.overlaps(range_start, range_end)]
