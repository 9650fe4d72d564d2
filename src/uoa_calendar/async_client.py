"""Async calendar API client.

Same operations and dispatch contract as ``CalendarClient``, built on
``httpx.AsyncClient`` so several requests can be in flight at once. Continuations
may be plain functions or coroutine functions.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Mapping
from typing import Any

import httpx

from uoa_calendar.client import BaseCalendarClient, FailureCallback, SuccessCallback, _Call
from uoa_calendar.models import Calendar, Event, Instant
from uoa_calendar.result import Failure, Result, Success

logger = logging.getLogger(__name__)


async def _invoke(callback, *args) -> None:
    outcome = callback(*args)
    if inspect.isawaitable(outcome):
        await outcome


class AsyncCalendarClient(BaseCalendarClient):
    """Async calendar API client.

    Example:
        >>> async with AsyncCalendarClient(api_token="your-token") as client:
        ...     calendar = (await client.add_calendar("test")).unwrap()
        ...     results = await asyncio.gather(
        ...         *(client.add_event(calendar.id, event) for event in events)
        ...     )
    """

    def __init__(
        self,
        api_token: str | None = None,
        base_url: str | None = None,
        auth_scheme: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(api_token, base_url, auth_scheme, timeout)
        self._client = httpx.AsyncClient(timeout=self.timeout, transport=transport)

    async def _send(self, call: _Call) -> Result:
        url = self._url(call)
        logger.debug(f"{call.method} {url} params={call.params}")
        try:
            response = await self._client.request(
                call.method, url, headers=self._get_headers(), params=call.params, json=call.json
            )
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeEncodeError) as e:
            return self._transport_failure(call, e)
        return self._to_result(call, response)

    async def _execute(
        self,
        call: _Call | Failure,
        on_success: SuccessCallback | None,
        on_failure: FailureCallback | None,
    ) -> Result:
        result = call if isinstance(call, Failure) else await self._send(call)

        if isinstance(result, Success):
            if on_success is not None:
                await _invoke(on_success, result.response, result.data)
        elif on_failure is not None:
            await _invoke(on_failure, result.response, result.error)
        return result

    # =========================================================================
    # Calendars
    # =========================================================================

    async def add_calendar(
        self,
        name: str,
        on_success: SuccessCallback | None = None,
        on_failure: FailureCallback | None = None,
    ) -> Result[Calendar]:
        """Create a calendar. See ``CalendarClient.add_calendar``."""
        return await self._execute(self._add_calendar_call(name), on_success, on_failure)

    async def list_calendars(
        self,
        on_success: SuccessCallback | None = None,
        on_failure: FailureCallback | None = None,
    ) -> Result[list[Calendar]]:
        return await self._execute(self._list_calendars_call(), on_success, on_failure)

    async def get_calendar(
        self,
        calendar_id: int,
        on_success: SuccessCallback | None = None,
        on_failure: FailureCallback | None = None,
    ) -> Result[Calendar]:
        return await self._execute(self._get_calendar_call(calendar_id), on_success, on_failure)

    async def delete_calendar(
        self,
        calendar_id: int,
        on_success: SuccessCallback | None = None,
        on_failure: FailureCallback | None = None,
    ) -> Result[None]:
        return await self._execute(
            self._delete_calendar_call(calendar_id), on_success, on_failure
        )

    # =========================================================================
    # Events
    # =========================================================================

    async def add_event(
        self,
        calendar_id: int,
        event: Event | Mapping[str, Any],
        on_success: SuccessCallback | None = None,
        on_failure: FailureCallback | None = None,
    ) -> Result[Event]:
        """Create an event. See ``CalendarClient.add_event``."""
        return await self._execute(
            self._add_event_call(calendar_id, event), on_success, on_failure
        )

    async def find_events(
        self,
        calendar_id: int,
        range_start: Instant,
        range_end: Instant,
        on_success: SuccessCallback | None = None,
        on_failure: FailureCallback | None = None,
    ) -> Result[list[Event]]:
        """Find events overlapping an inclusive range. See ``CalendarClient.find_events``."""
        call = self._find_events_call(calendar_id, range_start, range_end)
        return await self._execute(call, on_success, on_failure)

    async def get_event(
        self,
        calendar_id: int,
        event_id: int,
        on_success: SuccessCallback | None = None,
        on_failure: FailureCallback | None = None,
    ) -> Result[Event]:
        return await self._execute(
            self._get_event_call(calendar_id, event_id), on_success, on_failure
        )

    async def update_event(
        self,
        calendar_id: int,
        event_id: int,
        title: str | None = None,
        start: Instant | None = None,
        end: Instant | None = None,
        on_success: SuccessCallback | None = None,
        on_failure: FailureCallback | None = None,
    ) -> Result[Event]:
        call = self._update_event_call(calendar_id, event_id, title, start, end)
        return await self._execute(call, on_success, on_failure)

    async def delete_event(
        self,
        calendar_id: int,
        event_id: int,
        on_success: SuccessCallback | None = None,
        on_failure: FailureCallback | None = None,
    ) -> Result[None]:
        return await self._execute(
            self._delete_event_call(calendar_id, event_id), on_success, on_failure
        )

    async def aclose(self):
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.aclose()
