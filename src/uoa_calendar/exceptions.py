"""Calendar client exceptions."""

from typing import Any


class CalendarError(Exception):
    """Base exception for calendar client errors."""

    def __init__(self, message: str, status_code: int | None = None, body: Any = None):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class CalendarAuthError(CalendarError):
    """Raised when the server rejects the API token."""

    pass


class CalendarValidationError(CalendarError):
    """Raised when a request is rejected as malformed."""

    pass


class CalendarNotFoundError(CalendarValidationError):
    """Raised when a calendar or event does not exist."""

    pass


class CalendarAPIError(CalendarError):
    """Raised when the server returns any other error status."""

    pass


class CalendarTransportError(CalendarError):
    """Raised when no usable response came back from the server."""

    pass


class CalendarResponseError(CalendarTransportError):
    """Raised when a successful response body cannot be parsed."""

    pass
