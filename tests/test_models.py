from datetime import UTC, date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from dancelist.exceptions import SerializationError
from dancelist.models import (
    Country,
    DanceStyle,
    DateOnly,
    DateTime,
    Event,
    to_instants,
)

CET = timezone(timedelta(hours=1))


def _make_event(**kwargs: object) -> Event:
    """Create a minimal valid Event for testing."""
    defaults: dict[str, object] = {
        "name": "Name",
        "time": DateOnly(start_date=date(2022, 1, 1), end_date=date(2022, 1, 1)),
        "country": "Test",
        "city": "Test",
        "styles": [DanceStyle.PLAYFORD],
        "workshop": True,
    }
    defaults.update(kwargs)
    return Event(**defaults)  # type: ignore[arg-type]


# --- validate ---


def test_valid_event_has_no_problems() -> None:
    assert _make_event().validate() == []


def test_neither_workshop_nor_social() -> None:
    event = _make_event(workshop=False, social=False)
    assert event.validate() == ["Must have at least a workshop or a social."]


def test_start_after_end() -> None:
    event = _make_event(
        time=DateOnly(start_date=date(2022, 1, 2), end_date=date(2022, 1, 1))
    )
    assert event.validate() == ["Start date must be before or equal to end date."]


def test_datetime_start_after_end() -> None:
    event = _make_event(
        time=DateTime(
            start=datetime(2022, 1, 1, 20, 0, tzinfo=CET),
            end=datetime(2022, 1, 1, 19, 0, tzinfo=CET),
        )
    )
    assert event.validate() == ["Start time must be before or equal to end time."]


def test_no_styles() -> None:
    event = _make_event(styles=[])
    assert event.validate() == ["Must include at least one style of dance."]


def test_all_problems_reported() -> None:
    event = _make_event(
        workshop=False,
        social=False,
        styles=[],
        time=DateOnly(start_date=date(2022, 1, 2), end_date=date(2022, 1, 1)),
    )
    assert len(event.validate()) == 3


# --- links ---


def test_facebook_and_main_link() -> None:
    event = _make_event(
        links=[
            "https://www.facebook.com/events/123/",
            "https://example.com/",
            "https://www.facebook.com/events/456/",
            "https://other.example.com/",
        ]
    )
    assert event.facebook_event() == "https://www.facebook.com/events/123/"
    assert event.main_link() == "https://example.com/"


def test_no_links() -> None:
    event = _make_event()
    assert event.facebook_event() is None
    assert event.main_link() is None


# --- time ---


def test_multiday() -> None:
    assert not _make_event().multiday()
    assert _make_event(
        time=DateOnly(start_date=date(2022, 1, 1), end_date=date(2022, 1, 3))
    ).multiday()


def test_date_only_instants_use_country_timezone() -> None:
    # Belgium is UTC+1 in January.
    start, end = to_instants(
        DateOnly(start_date=date(2022, 1, 5), end_date=date(2022, 1, 6)), "Belgium"
    )
    assert start == datetime(2022, 1, 4, 23, 0, tzinfo=UTC)
    assert end == datetime(2022, 1, 6, 22, 59, 59, tzinfo=UTC)


def test_date_only_instants_unknown_country_is_utc() -> None:
    start, end = to_instants(
        DateOnly(start_date=date(2022, 1, 5), end_date=date(2022, 1, 5)), "Test"
    )
    assert start == datetime(2022, 1, 5, tzinfo=UTC)
    assert end == datetime(2022, 1, 5, 23, 59, 59, tzinfo=UTC)


def test_datetime_instants_are_literal() -> None:
    event = _make_event(
        time=DateTime(
            start=datetime(2022, 1, 5, 20, 0, tzinfo=CET),
            end=datetime(2022, 1, 5, 23, 0, tzinfo=CET),
        )
    )
    assert event.start_time_sort_key() == datetime(2022, 1, 5, 19, 0, tzinfo=UTC)
    assert event.end_time_sort_key() == datetime(2022, 1, 5, 22, 0, tzinfo=UTC)
    assert event.start_year() == 2022
    assert event.start_month() == 1


def test_datetime_start_month_is_local() -> None:
    # 00:30 on 1 February in UTC+1 is still January in UTC.
    event = _make_event(
        time=DateTime(
            start=datetime(2022, 2, 1, 0, 30, tzinfo=CET),
            end=datetime(2022, 2, 1, 2, 0, tzinfo=CET),
        )
    )
    assert event.start_month() == 2


def test_datetime_keeps_fixed_offset() -> None:
    brussels = ZoneInfo("Europe/Brussels")
    start = datetime(2022, 10, 30, 2, 30, tzinfo=brussels, fold=1)
    time = DateTime(start=start, end=start + timedelta(hours=1))

    assert time.start.tzinfo == timezone(timedelta(hours=1))
    assert time.start.utcoffset() == start.utcoffset()
    assert time.start.isoformat() == "2022-10-30T02:30:00+01:00"
    assert time.end.isoformat() == "2022-10-30T03:30:00+01:00"


# --- styles ---


def test_style_tags_and_names() -> None:
    assert DanceStyle.from_tag("e-ceilidh") == DanceStyle.ENGLISH_CEILIDH
    assert DanceStyle.ENGLISH_CEILIDH.display_name == "English Ceilidh"
    assert str(DanceStyle.SCOTTISH_COUNTRY_DANCE) == "Scottish Country Dance"


def test_unknown_style_tag() -> None:
    with pytest.raises(ValueError, match="Unknown dance style"):
        DanceStyle.from_tag("tango")


def test_style_order_is_declaration_order() -> None:
    assert [s.order for s in DanceStyle] == list(range(len(DanceStyle)))
    assert DanceStyle.ENGLISH_CEILIDH.order < DanceStyle.PLAYFORD.order
    assert DanceStyle.SCOTTISH_COUNTRY_DANCE.order == len(DanceStyle) - 1


# --- to_dict / from_dict ---


def test_event_roundtrip_full() -> None:
    original = _make_event(
        name="Full Event",
        details="Details here",
        links=["https://example.com/", "https://www.facebook.com/events/1/"],
        time=DateTime(
            start=datetime(2022, 6, 1, 19, 30, tzinfo=CET),
            end=datetime(2022, 6, 1, 23, 0, tzinfo=CET),
        ),
        country="Belgium",
        city="Gent",
        styles=[DanceStyle.BALFOLK, DanceStyle.CONTRA],
        workshop=True,
        social=True,
        bands=["Band A", "Band B"],
        callers=["Caller"],
        price="€10-€15",
        organisation="Org",
        cancelled=True,
    )

    as_dict = original.to_dict()
    reconstructed = Event.from_dict(dict(as_dict))

    assert reconstructed == original
    assert as_dict["start"] == "2022-06-01T19:30:00+01:00"
    assert as_dict["styles"] == ["balfolk", "contra"]
    assert as_dict["cancelled"] is True


def test_event_roundtrip_minimal() -> None:
    original = _make_event()
    as_dict = original.to_dict()

    assert as_dict == {
        "name": "Name",
        "links": [],
        "start_date": "2022-01-01",
        "end_date": "2022-01-01",
        "country": "Test",
        "city": "Test",
        "styles": ["playford"],
        "workshop": True,
        "social": False,
    }
    assert Event.from_dict(dict(as_dict)) == original


def test_from_dict_accepts_yaml_dates() -> None:
    event = Event.from_dict(
        {
            "name": "Name",
            "start_date": date(2022, 1, 1),
            "end_date": date(2022, 1, 2),
            "country": "UK",
            "city": "London",
            "styles": ["playford"],
            "social": True,
        }
    )
    assert event.time == DateOnly(start_date=date(2022, 1, 1), end_date=date(2022, 1, 2))
    assert event.links == []


def test_from_dict_unknown_field() -> None:
    data = dict(_make_event().to_dict())
    data["venue"] = "Hall"
    with pytest.raises(SerializationError) as exc_info:
        Event.from_dict(data)
    assert exc_info.value.field == "venue"


def test_from_dict_both_time_kinds() -> None:
    data = dict(_make_event().to_dict())
    data["start"] = "2022-01-01T19:00:00+01:00"
    data["end"] = "2022-01-01T22:00:00+01:00"
    with pytest.raises(SerializationError):
        Event.from_dict(data)


def test_from_dict_naive_datetime() -> None:
    data = dict(_make_event().to_dict())
    del data["start_date"]
    del data["end_date"]
    data["start"] = "2022-01-01T19:00:00"
    data["end"] = "2022-01-01T22:00:00"
    with pytest.raises(SerializationError) as exc_info:
        Event.from_dict(data)
    assert exc_info.value.field == "start"


def test_from_dict_bad_style() -> None:
    data = dict(_make_event().to_dict())
    data["styles"] = ["tango"]
    with pytest.raises(SerializationError) as exc_info:
        Event.from_dict(data)
    assert exc_info.value.field == "styles"


def test_country_ordering() -> None:
    countries = [Country("UK", ["London"]), Country("Netherlands", ["Amsterdam"])]
    assert sorted(countries)[0].name == "Netherlands"
