from collections.abc import Iterable, Iterator, Sequence
from datetime import UTC, datetime

import structlog

from .filters import Filters
from .models import Country, DanceStyle, Event

logger = structlog.get_logger(__name__)


def sort_by_start(events: Iterable[Event]) -> list[Event]:
    """Sorts events in ascending order of start time.

    The sort is stable, so events starting at the same instant keep their
    relative order.
    """
    return sorted(events, key=lambda event: event.start_time_sort_key())


class Events:
    """An ordered, read-only collection of dance events.

    Every query returns a newly allocated list and never modifies the
    collection, so one instance can be shared between any number of readers.
    """

    def __init__(self, events: Iterable[Event] = ()) -> None:
        self._events: tuple[Event, ...] = tuple(events)

    @classmethod
    def cloned(cls, events: Iterable[Event]) -> "Events":
        """Wraps a (filtered) sequence of events as a new collection."""
        return cls(events)

    @property
    def events(self) -> Sequence[Event]:
        return self._events

    def __iter__(self) -> Iterator[Event]:
        return iter(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Events):
            return NotImplemented
        return self._events == other._events

    def __repr__(self) -> str:
        return f"Events({list(self._events)!r})"

    def matching(self, filters: Filters, now: datetime | None = None) -> list[Event]:
        """Gets all events matching the given filters, in collection order.

        Args:
            filters: The criteria to match.
            now: Reference instant for the date filter (default: current UTC).

        Returns:
            The matching events themselves, not copies.
        """
        now = now or datetime.now(UTC)
        matched = [event for event in self._events if filters.matches(event, now)]
        logger.debug(
            "events_matched", total=len(self._events), matched=len(matched)
        )
        return matched

    def bands(self) -> list[str]:
        """Gets all bands who play for at least one event, in alphabetical order."""
        return sorted({band for event in self._events for band in event.bands})

    def callers(self) -> list[str]:
        """Gets all callers who call for at least one event, in alphabetical order."""
        return sorted({caller for event in self._events for caller in event.callers})

    def organisations(self) -> list[str]:
        """Gets all dance organisations, in alphabetical order."""
        return sorted(
            {
                event.organisation
                for event in self._events
                if event.organisation is not None
            }
        )

    def countries(self, filters: Filters, now: datetime | None = None) -> list[Country]:
        """Gets all cities which have events matching the given filters,
        grouped by country, in alphabetical order.
        """
        cities_by_country: dict[str, set[str]] = {}
        for event in self.matching(filters, now):
            cities_by_country.setdefault(event.country, set()).add(event.city)

        return sorted(
            Country(name=country, cities=sorted(cities))
            for country, cities in cities_by_country.items()
        )

    def cities(self, filters: Filters, now: datetime | None = None) -> list[str]:
        """Gets all cities which have events matching the given filters, in
        alphabetical order.
        """
        return sorted({event.city for event in self.matching(filters, now)})

    def styles(self, filters: Filters, now: datetime | None = None) -> list[DanceStyle]:
        """Gets all dance styles which have events matching the given filters,
        in style order.
        """
        styles = {style for event in self.matching(filters, now) for style in event.styles}
        return sorted(styles, key=lambda style: style.order)
