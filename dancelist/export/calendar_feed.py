"""iCalendar feed export.

Callers pass events already filtered and sorted by start time (see
``dancelist.events.sort_by_start``); entries are emitted in the order given.
"""

from collections.abc import Iterable
from datetime import UTC, datetime, timedelta

import icalendar
import structlog

from ..exceptions import SerializationError
from ..models import DateOnly, Event
from ..utils.date_and_time import to_utc
from ..utils.fingerprint import Fingerprinter

logger = structlog.get_logger(__name__)

PRODID = "-//dancelist//Folk dance events//EN"
DEFAULT_CALENDAR_NAME = "Folk dance events"
CANCELLED_SUFFIX = " (cancelled)"


def event_summary(event: Event) -> str:
    if event.cancelled:
        return f"{event.name}{CANCELLED_SUFFIX}"
    return event.name


def event_description(event: Event) -> str:
    """Details followed by the event's links, one per line."""
    parts = []
    if event.details:
        parts.append(event.details)
    if event.links:
        parts.append("\n".join(event.links))
    return "\n\n".join(parts)


def event_to_vevent(event: Event, now: datetime) -> icalendar.Event:
    vevent = icalendar.Event()
    vevent.add("uid", Fingerprinter.calendar_uid(event))
    vevent.add("dtstamp", now)
    vevent.add("summary", event_summary(event))

    if isinstance(event.time, DateOnly):
        # All-day events: DTEND is exclusive.
        vevent.add("dtstart", event.time.start_date)
        vevent.add("dtend", event.time.end_date + timedelta(days=1))
    else:
        vevent.add("dtstart", to_utc(event.time.start))
        vevent.add("dtend", to_utc(event.time.end))

    vevent.add("location", f"{event.city}, {event.country}")
    description = event_description(event)
    if description:
        vevent.add("description", description)
    main_link = event.main_link()
    if main_link:
        vevent.add("url", main_link)
    if event.cancelled:
        vevent.add("status", "CANCELLED")
    return vevent


def events_to_calendar(
    events: Iterable[Event],
    now: datetime | None = None,
    name: str = DEFAULT_CALENDAR_NAME,
) -> icalendar.Calendar:
    """Builds a calendar with one entry per event, in the order given."""
    now = to_utc(now) if now else datetime.now(UTC)

    calendar = icalendar.Calendar()
    calendar.add("prodid", PRODID)
    calendar.add("version", "2.0")
    calendar.add("x-wr-calname", name)
    count = 0
    for event in events:
        calendar.add_component(event_to_vevent(event, now))
        count += 1
    logger.debug("calendar_built", name=name, count=count)
    return calendar


def encode_calendar(
    events: Iterable[Event],
    now: datetime | None = None,
    name: str = DEFAULT_CALENDAR_NAME,
) -> str:
    """Encodes time-sorted events as iCalendar text.

    Raises:
        SerializationError: If the calendar can't be generated.
    """
    calendar = events_to_calendar(events, now, name)
    try:
        return calendar.to_ical().decode("utf-8")
    except (TypeError, ValueError) as e:
        raise SerializationError(
            f"Failed to encode calendar: {e}", format="ics"
        ) from e
