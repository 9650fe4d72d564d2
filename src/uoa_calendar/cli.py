"""CLI for uoa-calendar - calendar and event management.

Usage:
    uoa-calendar status                                   # Show configuration status
    uoa-calendar test                                     # Check token and server
    uoa-calendar calendars list                           # List calendars
    uoa-calendar calendars add <name>                     # Create a calendar
    uoa-calendar calendars delete <id>                    # Delete a calendar
    uoa-calendar events add <cal> --title T --start S --end E
    uoa-calendar events find <cal> --start S --end E      # Events overlapping a range
    uoa-calendar events delete <cal> <event>              # Delete an event

Dates and times are ISO-8601 (2015-12-02 or 2015-12-02T09:00:00+13:00).
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date, datetime


def _instant(value: str) -> date | datetime:
    """argparse type for ISO-8601 dates and datetimes."""
    try:
        if len(value) == 10:
            return date.fromisoformat(value)
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"not an ISO-8601 date/time: {value!r}") from e


def _print_event(event) -> None:
    print(f"  {event.id:>6}  {event.start.isoformat()} -> {event.end.isoformat()}  {event.title}")


def _report_failure(failure) -> int:
    print(f"  [✗] {failure.error}")
    return 1


def cmd_status() -> int:
    """Show configuration status."""
    from uoa_calendar.config import get_config_status

    status = get_config_status()

    print("=" * 60)
    print("UOA-CALENDAR CONFIGURATION")
    print("=" * 60)
    print()
    print(f"  .env file:   {status['env_file']} {'[x]' if status['env_file_exists'] else '[ ]'}")
    print(f"  API token:   {'[x]' if status['api_token'] else '[ ]'}")
    default = "" if status["base_url_configured"] else " (default)"
    print(f"  Base URL:    {status['base_url']}{default}")
    print(f"  Auth scheme: {status['auth_scheme']}")
    print(f"  Timeout:     {status['timeout']}s")
    print()
    return 0


def cmd_test() -> int:
    """Verify the configured token against the server."""
    from uoa_calendar.client import CalendarClient

    with CalendarClient() as client:
        if not client.api_token:
            print("  [ ] API token not configured")
            return 1

        result = client.list_calendars()
        if not result.ok:
            return _report_failure(result)

        print(f"  [✓] connected to {client.base_url} - {len(result.data)} calendars")
        return 0


def calendars_list() -> int:
    from uoa_calendar.client import CalendarClient

    with CalendarClient() as client:
        result = client.list_calendars()
    if not result.ok:
        return _report_failure(result)

    for calendar in result.data:
        print(f"  {calendar.id:>6}  {calendar.name}")
    return 0


def calendars_add(name: str) -> int:
    from uoa_calendar.client import CalendarClient

    with CalendarClient() as client:
        result = client.add_calendar(name)
    if not result.ok:
        return _report_failure(result)

    print(f"  [✓] created calendar {result.data.id} '{result.data.name}'")
    return 0


def calendars_delete(calendar_id: int) -> int:
    from uoa_calendar.client import CalendarClient

    with CalendarClient() as client:
        result = client.delete_calendar(calendar_id)
    if not result.ok:
        return _report_failure(result)

    print(f"  [✓] deleted calendar {calendar_id}")
    return 0


def events_add(calendar_id: int, title: str, start, end) -> int:
    from uoa_calendar.client import CalendarClient
    from uoa_calendar.models import Event

    with CalendarClient() as client:
        result = client.add_event(calendar_id, Event(title=title, start=start, end=end))
    if not result.ok:
        return _report_failure(result)

    print(f"  [✓] created event {result.data.id} in calendar {calendar_id}")
    return 0


def events_find(calendar_id: int, start, end) -> int:
    from uoa_calendar.client import CalendarClient

    with CalendarClient() as client:
        result = client.find_events(calendar_id, start, end)
    if not result.ok:
        return _report_failure(result)

    print(f"{len(result.data)} events overlapping {start.isoformat()} .. {end.isoformat()}")
    for event in result.data:
        _print_event(event)
    return 0


def events_delete(calendar_id: int, event_id: int) -> int:
    from uoa_calendar.client import CalendarClient

    with CalendarClient() as client:
        result = client.delete_event(calendar_id, event_id)
    if not result.ok:
        return _report_failure(result)

    print(f"  [✓] deleted event {event_id}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="uoa-calendar",
        description="Manage calendars and events on a UoA calendar server",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log HTTP requests")
    subparsers = parser.add_subparsers(dest="command", help="Command")

    subparsers.add_parser("status", help="Show configuration status")
    subparsers.add_parser("test", help="Check token and server connectivity")

    # calendars
    calendars_parser = subparsers.add_parser("calendars", help="Calendar management")
    calendars_sub = calendars_parser.add_subparsers(dest="calendars_command", help="Command")
    calendars_sub.add_parser("list", help="List calendars")
    add_cal = calendars_sub.add_parser("add", help="Create a calendar")
    add_cal.add_argument("name", help="Calendar name")
    del_cal = calendars_sub.add_parser("delete", help="Delete a calendar")
    del_cal.add_argument("calendar_id", type=int, help="Calendar id")

    # events
    events_parser = subparsers.add_parser("events", help="Event management")
    events_sub = events_parser.add_subparsers(dest="events_command", help="Command")

    add_ev = events_sub.add_parser("add", help="Create an event")
    add_ev.add_argument("calendar_id", type=int, help="Calendar id")
    add_ev.add_argument("--title", required=True, help="Event title")
    add_ev.add_argument("--start", type=_instant, required=True, help="Event start")
    add_ev.add_argument("--end", type=_instant, required=True, help="Event end")

    find_ev = events_sub.add_parser("find", help="Find events overlapping a range")
    find_ev.add_argument("calendar_id", type=int, help="Calendar id")
    find_ev.add_argument("--start", type=_instant, required=True, help="Range start")
    find_ev.add_argument("--end", type=_instant, required=True, help="Range end")

    del_ev = events_sub.add_parser("delete", help="Delete an event")
    del_ev.add_argument("calendar_id", type=int, help="Calendar id")
    del_ev.add_argument("event_id", type=int, help="Event id")

    args = parser.parse_args(argv if argv is not None else sys.argv[1:])

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "status":
        return cmd_status()

    if args.command == "test":
        return cmd_test()

    if args.command == "calendars":
        if args.calendars_command == "list":
            return calendars_list()
        elif args.calendars_command == "add":
            return calendars_add(args.name)
        elif args.calendars_command == "delete":
            return calendars_delete(args.calendar_id)
        else:
            calendars_parser.print_help()
            return 0

    if args.command == "events":
        if args.events_command == "add":
            return events_add(args.calendar_id, args.title, args.start, args.end)
        elif args.events_command == "find":
            return events_find(args.calendar_id, args.start, args.end)
        elif args.events_command == "delete":
            return events_delete(args.calendar_id, args.event_id)
        else:
            events_parser.print_help()
            return 0

    return 0


if __name__ == "__main__":
    sys.exit(main())
