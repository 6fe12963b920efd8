"""Filter criteria for selecting dance events.

Provides:
- ``DateFilter``: which events to show relative to now.
- ``Filters``: an immutable set of match criteria. Every criterion is
  optional; configured criteria are ANDed together.

Facet lists (countries, cities, styles) are computed from the events matching
all filters *except* the one being listed, so ``Filters`` has ``with_*``
methods returning a copy with one field overridden::

    countries = events.countries(filters.with_country(None))
"""

from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from datetime import datetime
from enum import Enum

from .exceptions import FilterError, TimeConversionError
from .models import DanceStyle, Event


class DateFilter(Enum):
    """Which events to include based on when they end."""

    FUTURE = "future"  # ends now or later, so events ending today still show
    PAST = "past"
    ALL = "all"


@dataclass(frozen=True)
class Filters:
    """Criteria for which events to include."""

    date: DateFilter = DateFilter.FUTURE
    text: str | None = None
    country: str | None = None
    city: str | None = None
    style: DanceStyle | None = None
    organisation: str | None = None
    band: str | None = None
    caller: str | None = None

    @classmethod
    def all(cls) -> "Filters":
        """Filters which match every event, past and future."""
        return cls(date=DateFilter.ALL)

    @classmethod
    def from_query(cls, query: Mapping[str, str | None]) -> "Filters":
        """Builds filters from string parameters, e.g. CLI options.

        Empty or missing values leave the criterion unset.

        Raises:
            FilterError: If the date or style value isn't recognised.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(k for k in query if k not in known)
        if unknown:
            raise FilterError(
                f"Unknown filter parameter '{unknown[0]}'",
                parameter=unknown[0],
                expected=", ".join(sorted(known)),
            )

        values: dict[str, object] = {
            k: v for k, v in query.items() if v not in (None, "")
        }

        if "date" in values:
            try:
                values["date"] = DateFilter(str(values["date"]).lower())
            except ValueError:
                raise FilterError(
                    f"Invalid date filter {values['date']!r}",
                    parameter="date",
                    received=values["date"],
                    expected=", ".join(d.value for d in DateFilter),
                ) from None

        if "style" in values:
            try:
                values["style"] = DanceStyle.from_tag(str(values["style"]))
            except ValueError:
                raise FilterError(
                    f"Invalid dance style {values['style']!r}",
                    parameter="style",
                    received=values["style"],
                    expected=", ".join(s.tag for s in DanceStyle),
                ) from None

        return cls(**values)  # type: ignore[arg-type]

    def has_some(self) -> bool:
        """Whether any criterion differs from the defaults."""
        return self != Filters()

    def with_date(self, date: DateFilter) -> "Filters":
        return replace(self, date=date)

    def with_country(self, country: str | None) -> "Filters":
        return replace(self, country=country)

    def with_city(self, city: str | None) -> "Filters":
        return replace(self, city=city)

    def with_style(self, style: DanceStyle | None) -> "Filters":
        return replace(self, style=style)

    def with_organisation(self, organisation: str | None) -> "Filters":
        return replace(self, organisation=organisation)

    def matches(self, event: Event, now: datetime) -> bool:
        """Checks whether the given event matches all the criteria.

        Args:
            event: The event to check.
            now: The reference instant for the date filter; must be
                offset-aware.

        Returns:
            True if every configured criterion passes.

        Raises:
            TimeConversionError: If ``now`` is naive or the event's end can't
                be converted to an instant.
        """
        if now.tzinfo is None or now.utcoffset() is None:
            raise TimeConversionError(
                f"Reference time {now.isoformat()} has no UTC offset", value=now
            )

        if self.text and not _text_matches(event, self.text):
            return False
        if self.country is not None and event.country != self.country:
            return False
        if self.city is not None and event.city != self.city:
            return False
        if self.style is not None and self.style not in event.styles:
            return False
        if self.organisation is not None and event.organisation != self.organisation:
            return False
        if self.band is not None and self.band not in event.bands:
            return False
        if self.caller is not None and self.caller not in event.callers:
            return False

        if self.date == DateFilter.FUTURE:
            return event.end_time_sort_key() >= now
        if self.date == DateFilter.PAST:
            return event.end_time_sort_key() < now
        return True


def _text_matches(event: Event, needle: str) -> bool:
    """Case-insensitive substring search over the event's descriptive fields."""
    needle = needle.lower()
    haystacks = [event.name, event.details or "", event.city]
    haystacks.extend(event.bands)
    haystacks.extend(event.callers)
    return any(needle in h.lower() for h in haystacks)
