from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime

from .models import Event


@dataclass
class Month:
    """The events starting in one calendar month."""

    start: date  # the first day of the month
    events: list[Event] = field(default_factory=list)

    def name(self) -> str:
        return self.start.strftime("%B %Y")


def sort_and_group_by_month(events: Iterable[Event]) -> list[Month]:
    """Sorts events in ascending order of start time, then groups them by
    starting month.

    Months are those of each event's local start date. Events are sorted on
    that month first, so each month appears once even when timezones differ.

    Args:
        events: Events in arbitrary order.

    Returns:
        Non-empty months in chronological order. Events within a month keep
        their start order; ties keep their input order.
    """
    months: list[Month] = []
    month = Month(start=date.min)
    for event in sorted(events, key=_month_sort_key):
        if (event.start_year(), event.start_month()) == (
            month.start.year,
            month.start.month,
        ) and month.events:
            month.events.append(event)
        else:
            if month.events:
                months.append(month)
            month = Month(
                start=date(event.start_year(), event.start_month(), 1),
                events=[event],
            )
    if month.events:
        months.append(month)

    return months


def _month_sort_key(event: Event) -> tuple[int, int, datetime]:
    return event.start_year(), event.start_month(), event.start_time_sort_key()
