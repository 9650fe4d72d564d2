"""Outcome of a calendar operation.

Every client operation returns either a ``Success`` carrying the parsed data or a
``Failure`` carrying the error. Nothing is raised for server or transport errors.

Example:
    >>> result = client.add_calendar("test")
    >>> if result.ok:
    ...     print(result.data.id)
    ... else:
    ...     print(result.error.status_code, result.body)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Generic, TypeVar, Union

import httpx

from uoa_calendar.exceptions import CalendarError

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Operation completed; ``data`` is the parsed server payload."""

    response: httpx.Response
    data: T

    ok: ClassVar[bool] = True

    def unwrap(self) -> T:
        return self.data


@dataclass(frozen=True)
class Failure:
    """Operation failed; ``response`` is None when nothing came back."""

    response: httpx.Response | None
    error: CalendarError

    ok: ClassVar[bool] = False

    @property
    def status_code(self) -> int | None:
        return self.error.status_code

    @property
    def body(self) -> Any:
        """Parsed error body, or raw text when it isn't JSON."""
        return self.error.body

    def unwrap(self) -> Any:
        """Raise the captured error."""
        raise self.error


Result = Union[Success[T], Failure]
