"""Client library for the UoA calendar REST API.

Manage calendars and their events, authenticating with a bearer token.

Usage:
    from datetime import date
    from uoa_calendar import CalendarClient, Event

    client = CalendarClient(api_token="...", base_url="https://calendar.example/api")

    calendar = client.add_calendar("test").unwrap()
    client.add_event(calendar.id, Event("Lecture", date(2015, 12, 2), date(2015, 12, 2)))

    # Events overlapping 2 Dec 2015
    result = client.find_events(calendar.id, date(2015, 12, 2), date(2015, 12, 2))
    if result.ok:
        for event in result.data:
            print(event.id, event.title)

Configuration:
    UOA_CALENDAR_API_TOKEN and UOA_CALENDAR_BASE_URL are read from the
    environment (or a .env file) when not passed explicitly.
"""

from uoa_calendar.async_client import AsyncCalendarClient
from uoa_calendar.client import CalendarClient
from uoa_calendar.exceptions import (
    CalendarAPIError,
    CalendarAuthError,
    CalendarError,
    CalendarNotFoundError,
    CalendarResponseError,
    CalendarTransportError,
    CalendarValidationError,
)
from uoa_calendar.models import Calendar, Event, filter_overlapping, overlaps
from uoa_calendar.result import Failure, Result, Success

__all__ = [
    "CalendarClient",
    "AsyncCalendarClient",
    "Calendar",
    "Event",
    "overlaps",
    "filter_overlapping",
    "Result",
    "Success",
    "Failure",
    "CalendarError",
    "CalendarAuthError",
    "CalendarValidationError",
    "CalendarNotFoundError",
    "CalendarAPIError",
    "CalendarTransportError",
    "CalendarResponseError",
]
