import re
import zoneinfo
from datetime import UTC, date, datetime, time

from ..exceptions import TimeConversionError
from .country import get_iso_country_code

END_OF_DAY = time(23, 59, 59)


def get_timezone_for_country(country_info: str) -> str:
    """Determines the timezone name for the countries events are listed in.

    Args:
        country_info: The country name or code as written on the event.

    Returns:
        The timezone name (e.g., 'Europe/Brussels') or 'UTC' if unknown or the
        country spans several zones.
    """
    if not country_info:
        return "UTC"

    ci = get_iso_country_code(country_info)

    mapping = {
        "GBR": "Europe/London",
        "IRL": "Europe/Dublin",
        "BEL": "Europe/Brussels",
        "NLD": "Europe/Amsterdam",
        "LUX": "Europe/Luxembourg",
        "FRA": "Europe/Paris",
        "DEU": "Europe/Berlin",
        "AUT": "Europe/Vienna",
        "CHE": "Europe/Zurich",
        "ITA": "Europe/Rome",
        "ESP": "Europe/Madrid",
        "PRT": "Europe/Lisbon",
        "DNK": "Europe/Copenhagen",
        "SWE": "Europe/Stockholm",
        "NOR": "Europe/Oslo",
        "FIN": "Europe/Helsinki",
        "POL": "Europe/Warsaw",
        "CZE": "Europe/Prague",
        "HUN": "Europe/Budapest",
        "NZL": "Pacific/Auckland",
    }

    return mapping.get(ci or "", "UTC")


def local_to_instant(local: datetime, tz_name: str) -> datetime:
    """Converts a naive wall-clock time in the given zone to a UTC instant.

    Args:
        local: Naive datetime in the local time of the zone.
        tz_name: IANA timezone name.

    Returns:
        The corresponding offset-aware datetime in UTC.

    Raises:
        TimeConversionError: If the wall-clock time is skipped or repeated by
            a DST transition in that zone.
    """
    tz = zoneinfo.ZoneInfo(tz_name)
    earlier = local.replace(tzinfo=tz, fold=0)
    later = local.replace(tzinfo=tz, fold=1)
    if earlier.utcoffset() != later.utcoffset():
        raise TimeConversionError(
            f"Local time {local.isoformat()} is ambiguous or does not exist in {tz_name}",
            value=local,
            timezone=tz_name,
        )
    return earlier.astimezone(UTC)


def start_of_day(day: date, country: str) -> datetime:
    """Returns the instant of local midnight at the start of the given day."""
    return local_to_instant(
        datetime.combine(day, time.min), get_timezone_for_country(country)
    )


def end_of_day(day: date, country: str) -> datetime:
    """Returns the instant of the last second of the given local day."""
    return local_to_instant(
        datetime.combine(day, END_OF_DAY), get_timezone_for_country(country)
    )


def to_utc(instant: datetime) -> datetime:
    """Normalises an offset-aware datetime to UTC.

    Raises:
        TimeConversionError: If the datetime has no offset.
    """
    if instant.tzinfo is None or instant.utcoffset() is None:
        raise TimeConversionError(
            f"Datetime {instant.isoformat()} has no UTC offset", value=instant
        )
    return instant.astimezone(UTC)


def parse_iso_date(value: date | str) -> date:
    """Parses an ISO date (YYYY-MM-DD).

    YAML loaders already turn unquoted dates into ``date`` objects, so those
    are passed through.

    Raises:
        ValueError: If the value is not a date.
    """
    if isinstance(value, datetime):
        raise ValueError(f"Expected a date, got a datetime: {value.isoformat()}")
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not re.match(r"^\d{4}-\d{2}-\d{2}$", value):
        raise ValueError(f"Expected a date in YYYY-MM-DD format, got {value!r}")
    return date.fromisoformat(value)


def parse_iso_datetime(value: datetime | str) -> datetime:
    """Parses an ISO 8601 datetime which must carry a UTC offset.

    Raises:
        ValueError: If the value is not a datetime or has no offset.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        dt = datetime.fromisoformat(value)
    else:
        raise ValueError(f"Expected an ISO 8601 datetime, got {value!r}")

    if dt.tzinfo is None or dt.utcoffset() is None:
        raise ValueError(f"Datetime {value!r} must include a UTC offset")
    return dt
