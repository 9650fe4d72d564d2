"""Calendar REST API client with bearer token authentication.

Each operation sends one request and returns a ``Result``. Optional ``on_success`` /
``on_failure`` continuations are invoked with the raw ``httpx.Response`` and the
parsed data (or the ``CalendarError``); exactly one of them fires per call.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from uoa_calendar.config import load_settings
from uoa_calendar.exceptions import (
    CalendarAPIError,
    CalendarAuthError,
    CalendarError,
    CalendarNotFoundError,
    CalendarResponseError,
    CalendarTransportError,
    CalendarValidationError,
)
from uoa_calendar.models import (
    Calendar,
    Event,
    Instant,
    align_instants,
    event_payload,
    serialize_instant,
)
from uoa_calendar.result import Failure, Result, Success

logger = logging.getLogger(__name__)

SuccessCallback = Callable[[httpx.Response, Any], Any]
FailureCallback = Callable[[httpx.Response | None, CalendarError], Any]

CONFIG_KEYS = ("api_token", "base_url", "auth_scheme", "timeout")

_VALIDATION_STATUSES = {400, 409, 422}
_AUTH_STATUSES = {401, 403}


@dataclass(frozen=True)
class _Call:
    """A prepared request plus the parser for its successful body."""

    method: str
    path: str
    parse: Callable[[Any], Any] | None
    params: dict[str, str] | None = None
    json: dict[str, Any] | None = None


def _invalid(message: str) -> Failure:
    """Reject a call locally without sending anything."""
    return Failure(None, CalendarValidationError(message))


def _is_id(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _out_of_order(start: Instant | None, end: Instant | None) -> bool:
    """Check ``start > end`` when both values can be compared locally."""
    if start is None or end is None:
        return False
    try:
        start, end = align_instants(start, end)
    except (TypeError, ValueError):
        # non-ISO strings: leave the decision to the server
        return False
    return start > end


def _items(body: Any) -> list[Any]:
    """Unwrap a list body, accepting the paginated ``{"results": [...]}`` shape."""
    if isinstance(body, Mapping) and "results" in body:
        body = body["results"]
    if not isinstance(body, list):
        raise TypeError(f"expected a list, got {type(body).__name__}")
    return body


def _error_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _describe(body: Any) -> str:
    if isinstance(body, Mapping) and "detail" in body:
        return str(body["detail"])
    text = body if isinstance(body, str) else str(body)
    return text[:200] or "<empty body>"


def _error_class(status_code: int) -> type[CalendarError]:
    if status_code in _AUTH_STATUSES:
        return CalendarAuthError
    if status_code == 404:
        return CalendarNotFoundError
    if status_code in _VALIDATION_STATUSES:
        return CalendarValidationError
    return CalendarAPIError


class BaseCalendarClient:
    """Shared configuration, request construction and response handling.

    Subclasses supply the transport (blocking or async) and the public operations.
    """

    def __init__(
        self,
        api_token: str | None = None,
        base_url: str | None = None,
        auth_scheme: str | None = None,
        timeout: float | None = None,
    ):
        """Initialize client settings.

        Args:
            api_token: Bearer token. If None, reads from UOA_CALENDAR_API_TOKEN.
            base_url: API root. If None, reads from UOA_CALENDAR_BASE_URL.
            auth_scheme: Authorization scheme. If None, reads from
                UOA_CALENDAR_AUTH_SCHEME (default: "Bearer").
            timeout: Request timeout in seconds. If None, reads from UOA_CALENDAR_TIMEOUT.
        """
        settings = load_settings()
        self._api_token = api_token if api_token is not None else settings.api_token
        self.base_url = (base_url or settings.base_url).rstrip("/")
        self.auth_scheme = auth_scheme or settings.auth_scheme
        self.timeout = timeout if timeout is not None else settings.timeout

    @classmethod
    def from_config(cls, config: Mapping[str, Any], **kwargs):
        """Build a client from a configuration mapping.

        Recognized keys are ``api_token``, ``base_url``, ``auth_scheme`` and
        ``timeout``; anything else is ignored with a warning.
        """
        unknown = sorted(set(config) - set(CONFIG_KEYS))
        if unknown:
            logger.warning(f"Ignoring unknown calendar client options: {', '.join(unknown)}")
        options = {key: config[key] for key in CONFIG_KEYS if key in config}
        return cls(**options, **kwargs)

    @property
    def api_token(self) -> str | None:
        """The token attached to every request. Build a new client to rotate it."""
        return self._api_token

    def _get_headers(self) -> dict[str, str]:
        """Get headers for API requests."""
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if self._api_token:
            headers["Authorization"] = f"{self.auth_scheme} {self._api_token}"
        return headers

    # =========================================================================
    # Request construction
    # =========================================================================

    def _add_calendar_call(self, name: str) -> _Call | Failure:
        if not isinstance(name, str) or not name.strip():
            return _invalid("Calendar name must be a non-empty string")
        return _Call("POST", "/calendars/", Calendar.from_dict, json={"name": name})

    def _list_calendars_call(self) -> _Call:
        return _Call(
            "GET", "/calendars/", lambda body: [Calendar.from_dict(c) for c in _items(body)]
        )

    def _get_calendar_call(self, calendar_id: int) -> _Call | Failure:
        if not _is_id(calendar_id):
            return _invalid(f"Invalid calendar id: {calendar_id!r}")
        return _Call("GET", f"/calendars/{calendar_id}/", Calendar.from_dict)

    def _delete_calendar_call(self, calendar_id: int) -> _Call | Failure:
        if not _is_id(calendar_id):
            return _invalid(f"Invalid calendar id: {calendar_id!r}")
        return _Call("DELETE", f"/calendars/{calendar_id}/", None)

    def _add_event_call(
        self, calendar_id: int, event: Event | Mapping[str, Any]
    ) -> _Call | Failure:
        if not _is_id(calendar_id):
            return _invalid(f"Invalid calendar id: {calendar_id!r}")
        try:
            payload = event_payload(event)
        except TypeError as e:
            return _invalid(f"Invalid event: {e}")
        if _out_of_order(payload.get("start"), payload.get("end")):
            return _invalid("Event start must not be after its end")

        return _Call(
            "POST",
            f"/calendars/{calendar_id}/events/",
            lambda body: Event.from_dict(body, calendar_id),
            json=payload,
        )

    def _find_events_call(
        self, calendar_id: int, range_start: Instant, range_end: Instant
    ) -> _Call | Failure:
        if not _is_id(calendar_id):
            return _invalid(f"Invalid calendar id: {calendar_id!r}")
        try:
            params = {
                "start": serialize_instant(range_start),
                "end": serialize_instant(range_end),
            }
        except TypeError as e:
            return _invalid(f"Invalid query range: {e}")
        if _out_of_order(range_start, range_end):
            return _invalid("Query range start must not be after its end")

        return _Call(
            "GET",
            f"/calendars/{calendar_id}/events/",
            lambda body: [Event.from_dict(item, calendar_id) for item in _items(body)],
            params=params,
        )

    def _get_event_call(self, calendar_id: int, event_id: int) -> _Call | Failure:
        if not _is_id(calendar_id) or not _is_id(event_id):
            return _invalid(f"Invalid calendar/event id: {calendar_id!r}/{event_id!r}")
        return _Call(
            "GET",
            f"/calendars/{calendar_id}/events/{event_id}/",
            lambda body: Event.from_dict(body, calendar_id),
        )

    def _update_event_call(
        self,
        calendar_id: int,
        event_id: int,
        title: str | None,
        start: Instant | None,
        end: Instant | None,
    ) -> _Call | Failure:
        if not _is_id(calendar_id) or not _is_id(event_id):
            return _invalid(f"Invalid calendar/event id: {calendar_id!r}/{event_id!r}")

        changes: dict[str, Any] = {}
        try:
            if title is not None:
                changes["title"] = title
            if start is not None:
                changes["start"] = serialize_instant(start)
            if end is not None:
                changes["end"] = serialize_instant(end)
        except TypeError as e:
            return _invalid(f"Invalid event update: {e}")

        if not changes:
            return _invalid("Nothing to update")
        if _out_of_order(start, end):
            return _invalid("Event start must not be after its end")

        return _Call(
            "PATCH",
            f"/calendars/{calendar_id}/events/{event_id}/",
            lambda body: Event.from_dict(body, calendar_id),
            json=changes,
        )

    def _delete_event_call(self, calendar_id: int, event_id: int) -> _Call | Failure:
        if not _is_id(calendar_id) or not _is_id(event_id):
            return _invalid(f"Invalid calendar/event id: {calendar_id!r}/{event_id!r}")
        return _Call("DELETE", f"/calendars/{calendar_id}/events/{event_id}/", None)

    # =========================================================================
    # Response handling
    # =========================================================================

    def _url(self, call: _Call) -> str:
        return f"{self.base_url}{call.path}"

    def _to_result(self, call: _Call, response: httpx.Response) -> Result:
        """Turn a server response into Success or Failure."""
        if response.is_success:
            if call.parse is None:
                logger.debug(f"{call.method} {call.path} -> {response.status_code}")
                return Success(response, None)
            try:
                data = call.parse(response.json())
            except (ValueError, KeyError, TypeError) as e:
                error = CalendarResponseError(
                    f"Unparseable response to {call.method} {call.path}: {e}",
                    status_code=response.status_code,
                    body=response.text,
                )
                logger.warning(str(error))
                return Failure(response, error)
            logger.debug(f"{call.method} {call.path} -> {response.status_code}")
            return Success(response, data)

        body = _error_body(response)
        error_cls = _error_class(response.status_code)
        error = error_cls(
            f"{call.method} {call.path} failed ({response.status_code}): {_describe(body)}",
            status_code=response.status_code,
            body=body,
        )
        logger.debug(str(error))
        return Failure(response, error)

    def _transport_failure(self, call: _Call, exc: Exception) -> Failure:
        error = CalendarTransportError(f"Request failed: {call.method} {call.path}: {exc}")
        logger.warning(str(error))
        return Failure(None, error)


class CalendarClient(BaseCalendarClient):
    """Blocking calendar API client.

    Example:
        >>> client = CalendarClient(api_token="your-token", base_url="https://host/api")
        >>> calendar = client.add_calendar("test").unwrap()
        >>> client.add_event(calendar.id, Event("Meeting", date(2015, 12, 2), date(2015, 12, 2)))
        >>> client.find_events(
        ...     calendar.id,
        ...     date(2015, 12, 2),
        ...     date(2015, 12, 2),
        ...     on_success=lambda res, events: print(len(events)),
        ...     on_failure=lambda res, error: print(error),
        ... )
    """

    def __init__(
        self,
        api_token: str | None = None,
        base_url: str | None = None,
        auth_scheme: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        super().__init__(api_token, base_url, auth_scheme, timeout)
        self._client = httpx.Client(timeout=self.timeout, transport=transport)

    def _send(self, call: _Call) -> Result:
        url = self._url(call)
        logger.debug(f"{call.method} {url} params={call.params}")
        try:
            response = self._client.request(
                call.method, url, headers=self._get_headers(), params=call.params, json=call.json
            )
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeEncodeError) as e:
            return self._transport_failure(call, e)
        return self._to_result(call, response)

    def _execute(
        self,
        call: _Call | Failure,
        on_success: SuccessCallback | None,
        on_failure: FailureCallback | None,
    ) -> Result:
        result = call if isinstance(call, Failure) else self._send(call)

        if isinstance(result, Success):
            if on_success is not None:
                on_success(result.response, result.data)
        elif on_failure is not None:
            on_failure(result.response, result.error)
        return result

    # =========================================================================
    # Calendars
    # =========================================================================

    def add_calendar(
        self,
        name: str,
        on_success: SuccessCallback | None = None,
        on_failure: FailureCallback | None = None,
    ) -> Result[Calendar]:
        """Create a calendar.

        Not idempotent: calling twice with the same name may create two calendars.

        Args:
            name: Calendar name (non-empty).
            on_success: Called with (response, Calendar).
            on_failure: Called with (response or None, CalendarError).

        Returns:
            Success carrying the created Calendar, or Failure.
        """
        return self._execute(self._add_calendar_call(name), on_success, on_failure)

    def list_calendars(
        self,
        on_success: SuccessCallback | None = None,
        on_failure: FailureCallback | None = None,
    ) -> Result[list[Calendar]]:
        """List calendars visible to the token."""
        return self._execute(self._list_calendars_call(), on_success, on_failure)

    def get_calendar(
        self,
        calendar_id: int,
        on_success: SuccessCallback | None = None,
        on_failure: FailureCallback | None = None,
    ) -> Result[Calendar]:
        return self._execute(self._get_calendar_call(calendar_id), on_success, on_failure)

    def delete_calendar(
        self,
        calendar_id: int,
        on_success: SuccessCallback | None = None,
        on_failure: FailureCallback | None = None,
    ) -> Result[None]:
        return self._execute(self._delete_calendar_call(calendar_id), on_success, on_failure)

    # =========================================================================
    # Events
    # =========================================================================

    def add_event(
        self,
        calendar_id: int,
        event: Event | Mapping[str, Any],
        on_success: SuccessCallback | None = None,
        on_failure: FailureCallback | None = None,
    ) -> Result[Event]:
        """Create an event in a calendar.

        The caller's event is not modified; the returned Event carries the
        server-assigned id.

        Args:
            calendar_id: Id of an existing calendar.
            event: Event, or a mapping with title, start and end.
            on_success: Called with (response, Event).
            on_failure: Called with (response or None, CalendarError).

        Returns:
            Success carrying the created Event, or Failure.
        """
        return self._execute(self._add_event_call(calendar_id, event), on_success, on_failure)

    def find_events(
        self,
        calendar_id: int,
        range_start: Instant,
        range_end: Instant,
        on_success: SuccessCallback | None = None,
        on_failure: FailureCallback | None = None,
    ) -> Result[list[Event]]:
        """Find events overlapping an inclusive date range.

        An event matches when ``event.start <= range_end`` and
        ``event.end >= range_start``. Results keep the server's order.

        Args:
            calendar_id: Calendar to search.
            range_start: Start of the window.
            range_end: End of the window.
            on_success: Called with (response, list of Event).
            on_failure: Called with (response or None, CalendarError).

        Returns:
            Success carrying the matching events, or Failure.
        """
        call = self._find_events_call(calendar_id, range_start, range_end)
        return self._execute(call, on_success, on_failure)

    def get_event(
        self,
        calendar_id: int,
        event_id: int,
        on_success: SuccessCallback | None = None,
        on_failure: FailureCallback | None = None,
    ) -> Result[Event]:
        return self._execute(self._get_event_call(calendar_id, event_id), on_success, on_failure)

    def update_event(
        self,
        calendar_id: int,
        event_id: int,
        title: str | None = None,
        start: Instant | None = None,
        end: Instant | None = None,
        on_success: SuccessCallback | None = None,
        on_failure: FailureCallback | None = None,
    ) -> Result[Event]:
        """Update the given fields of an event.

        Returns:
            Success carrying the updated Event, or Failure.
        """
        call = self._update_event_call(calendar_id, event_id, title, start, end)
        return self._execute(call, on_success, on_failure)

    def delete_event(
        self,
        calendar_id: int,
        event_id: int,
        on_success: SuccessCallback | None = None,
        on_failure: FailureCallback | None = None,
    ) -> Result[None]:
        return self._execute(self._delete_event_call(calendar_id, event_id), on_success, on_failure)

    def close(self):
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
