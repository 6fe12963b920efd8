from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, NotRequired, TypedDict

from .exceptions import SerializationError
from .utils.date_and_time import (
    end_of_day,
    parse_iso_date,
    parse_iso_datetime,
    start_of_day,
    to_utc,
)

# The prefix which Facebook event URLs start with.
FACEBOOK_EVENT_PREFIX = "https://www.facebook.com/events/"


class DanceStyle(Enum):
    """A style of folk dance.

    Declaration order is the order styles are listed in, not alphabetical.
    The value is the tag used in event files.
    """

    BALFOLK = "balfolk"
    CONTRA = "contra"
    ENGLISH_CEILIDH = "e-ceilidh"
    PLAYFORD = "playford"
    REELING = "reeling"
    SCOTTISH_CEILIDH = "s-ceilidh"
    SCOTTISH_COUNTRY_DANCE = "scd"

    @property
    def tag(self) -> str:
        return self.value

    @property
    def display_name(self) -> str:
        return _STYLE_NAMES[self]

    @property
    def order(self) -> int:
        """Position of the style in declaration order, for sorting."""
        return _STYLE_ORDER[self]

    @classmethod
    def from_tag(cls, tag: str) -> "DanceStyle":
        try:
            return cls(tag)
        except ValueError:
            raise ValueError(
                f"Unknown dance style {tag!r}, expected one of "
                f"{', '.join(s.tag for s in cls)}"
            ) from None

    def __str__(self) -> str:
        return self.display_name


_STYLE_NAMES = {
    DanceStyle.BALFOLK: "Balfolk",
    DanceStyle.CONTRA: "Contra",
    DanceStyle.ENGLISH_CEILIDH: "English Ceilidh",
    DanceStyle.PLAYFORD: "Playford",
    DanceStyle.REELING: "Reeling",
    DanceStyle.SCOTTISH_CEILIDH: "Scottish Ceilidh",
    DanceStyle.SCOTTISH_COUNTRY_DANCE: "Scottish Country Dance",
}
_STYLE_ORDER = {style: i for i, style in enumerate(DanceStyle)}


@dataclass(frozen=True)
class DateOnly:
    """Event time known only to the day, in the local timezone.

    Events which finish some hours after midnight should be considered to
    finish the day before.
    """

    start_date: date
    end_date: date


@dataclass(frozen=True)
class DateTime:
    """Event time with precise, offset-aware start and end instants.

    Instants are kept with a fixed UTC offset, so a time given in a named
    zone compares equal to the same time read back from a file.
    """

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        for name in ("start", "end"):
            value = getattr(self, name)
            offset = value.utcoffset()
            if offset is not None:
                object.__setattr__(self, name, value.astimezone(timezone(offset)))


EventTime = DateOnly | DateTime


def to_instants(time: EventTime, country: str) -> tuple[datetime, datetime]:
    """Converts an event time to its (start, end) instants in UTC.

    This is the only place where the two time variants are turned into
    comparable instants. Date-only events start at local midnight and end at
    the last second of their last local day.

    Raises:
        TimeConversionError: If a local time can't be mapped to one instant.
    """
    if isinstance(time, DateOnly):
        return start_of_day(time.start_date, country), end_of_day(
            time.end_date, country
        )
    return to_utc(time.start), to_utc(time.end)


class EventDict(TypedDict):
    """Dictionary representation of an event in the event file format."""

    name: str
    details: NotRequired[str]
    links: list[str]
    start_date: NotRequired[str]
    end_date: NotRequired[str]
    start: NotRequired[str]
    end: NotRequired[str]
    country: str
    city: str
    styles: list[str]
    workshop: bool
    social: bool
    bands: NotRequired[list[str]]
    callers: NotRequired[list[str]]
    price: NotRequired[str]
    organisation: NotRequired[str]
    cancelled: NotRequired[bool]


class EventsDict(TypedDict):
    """Top level of an events file."""

    events: list[EventDict]


EVENT_KEYS = frozenset(EventDict.__annotations__)


@dataclass
class Event:
    """Represents a single dance event."""

    name: str
    time: EventTime
    country: str
    city: str
    styles: list[DanceStyle]
    workshop: bool = False  # includes one or more workshops or lessons
    social: bool = False  # includes one or more social dances
    details: str | None = None
    # URLs with more information, including the Facebook event page if any.
    links: list[str] = field(default_factory=list)
    bands: list[str] = field(default_factory=list)
    callers: list[str] = field(default_factory=list)
    price: str | None = None  # price or price range, free text
    organisation: str | None = None
    cancelled: bool = False

    def validate(self) -> list[str]:
        """Checks that the event information is valid.

        Returns:
            An empty list if it is, or a list of problems if not.
        """
        problems = []

        if not self.workshop and not self.social:
            problems.append("Must have at least a workshop or a social.")

        if isinstance(self.time, DateOnly):
            if self.time.start_date > self.time.end_date:
                problems.append("Start date must be before or equal to end date.")
        else:
            if (
                self.time.start.tzinfo is None
                or self.time.end.tzinfo is None
            ):
                problems.append("Start and end times must include a UTC offset.")
            elif self.time.start > self.time.end:
                problems.append("Start time must be before or equal to end time.")

        if not self.styles:
            problems.append("Must include at least one style of dance.")

        return problems

    def facebook_event(self) -> str | None:
        """Gets the URL of the event's Facebook event, if any."""
        return next(
            (link for link in self.links if link.startswith(FACEBOOK_EVENT_PREFIX)),
            None,
        )

    def main_link(self) -> str | None:
        """Gets the event's first non-Facebook link."""
        return next(
            (
                link
                for link in self.links
                if not link.startswith(FACEBOOK_EVENT_PREFIX)
            ),
            None,
        )

    def multiday(self) -> bool:
        """Checks whether the event lasts more than one day."""
        if isinstance(self.time, DateOnly):
            return self.time.start_date != self.time.end_date
        return self.time.start.date() != self.time.end.date()

    def start_date(self) -> date:
        """The local date the event starts on."""
        if isinstance(self.time, DateOnly):
            return self.time.start_date
        return self.time.start.date()

    def start_year(self) -> int:
        return self.start_date().year

    def start_month(self) -> int:
        return self.start_date().month

    def start_time_sort_key(self) -> datetime:
        """The instant the event starts, for ordering events on one timeline."""
        return to_instants(self.time, self.country)[0]

    def end_time_sort_key(self) -> datetime:
        """The instant the event ends, used by the date filters."""
        return to_instants(self.time, self.country)[1]

    def to_dict(self) -> EventDict:
        result: dict[str, Any] = {"name": self.name}
        if self.details is not None:
            result["details"] = self.details
        result["links"] = list(self.links)
        if isinstance(self.time, DateOnly):
            result["start_date"] = self.time.start_date.isoformat()
            result["end_date"] = self.time.end_date.isoformat()
        else:
            result["start"] = self.time.start.isoformat()
            result["end"] = self.time.end.isoformat()
        result["country"] = self.country
        result["city"] = self.city
        result["styles"] = [style.tag for style in self.styles]
        result["workshop"] = self.workshop
        result["social"] = self.social
        if self.bands:
            result["bands"] = list(self.bands)
        if self.callers:
            result["callers"] = list(self.callers)
        if self.price is not None:
            result["price"] = self.price
        if self.organisation is not None:
            result["organisation"] = self.organisation
        if self.cancelled:
            result["cancelled"] = True
        return result  # type: ignore[return-value]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Event":
        """Builds an Event from its event file representation.

        Raises:
            SerializationError: If a field is missing, unknown or malformed.
                The error carries the offending field name.
        """
        unknown = sorted(set(data) - EVENT_KEYS)
        if unknown:
            raise SerializationError(
                f"Unknown field(s) in event: {', '.join(unknown)}", field=unknown[0]
            )

        for key in ("name", "country", "city"):
            if not isinstance(data.get(key), str):
                raise SerializationError(
                    f"Event field '{key}' is required and must be a string",
                    field=key,
                )

        return cls(
            name=data["name"],
            details=_optional_str(data, "details"),
            links=_str_list(data, "links"),
            time=_parse_time(data),
            country=data["country"],
            city=data["city"],
            styles=_parse_styles(data.get("styles", [])),
            workshop=_bool(data, "workshop"),
            social=_bool(data, "social"),
            bands=_str_list(data, "bands"),
            callers=_str_list(data, "callers"),
            price=_optional_str(data, "price"),
            organisation=_optional_str(data, "organisation"),
            cancelled=_bool(data, "cancelled"),
        )


@dataclass(frozen=True, order=True)
class Country:
    """A country along with the cities in it which have matching events."""

    name: str
    cities: list[str]


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise SerializationError(f"Event field '{key}' must be a string", field=key)
    return value


def _str_list(data: dict[str, Any], key: str) -> list[str]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise SerializationError(
            f"Event field '{key}' must be a list of strings", field=key
        )
    return list(value)


def _bool(data: dict[str, Any], key: str) -> bool:
    value = data.get(key, False)
    if not isinstance(value, bool):
        raise SerializationError(f"Event field '{key}' must be a boolean", field=key)
    return value


def _parse_styles(value: Any) -> list[DanceStyle]:
    if not isinstance(value, list):
        raise SerializationError("Event field 'styles' must be a list", field="styles")
    try:
        return [DanceStyle.from_tag(tag) for tag in value]
    except ValueError as e:
        raise SerializationError(str(e), field="styles") from e


def _parse_time(data: dict[str, Any]) -> EventTime:
    has_dates = "start_date" in data or "end_date" in data
    has_times = "start" in data or "end" in data
    if has_dates == has_times:
        raise SerializationError(
            "Event must have either start_date and end_date, or start and end",
            field="start_date" if has_dates else "start",
        )

    keys = ("start_date", "end_date") if has_dates else ("start", "end")
    parse = parse_iso_date if has_dates else parse_iso_datetime
    values = []
    for key in keys:
        if key not in data:
            raise SerializationError(f"Event field '{key}' is required", field=key)
        try:
            values.append(parse(data[key]))
        except ValueError as e:
            raise SerializationError(str(e), field=key) from e

    if has_dates:
        return DateOnly(start_date=values[0], end_date=values[1])
    return DateTime(start=values[0], end=values[1])
