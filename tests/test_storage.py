from pathlib import Path

import pytest
import yaml

from dancelist.events import Events
from dancelist.exceptions import ConfigurationError, SerializationError, ValidationError
from dancelist.storage import EventStore, Storage


def test_load_directory(events_dir: Path) -> None:
    events = Storage(events_dir).load()

    # Files are read in sorted path order: be/ before uk/.
    assert [e.name for e in events] == [
        "Bal in Gent",
        "Oxford Playford Ball",
        "London Ceilidh",
    ]


def test_load_file(events_dir: Path) -> None:
    events = Storage.load_file(events_dir / "uk" / "events.yaml")
    assert len(events) == 2


def test_invalid_event_fails_whole_load(events_dir: Path) -> None:
    bad = {
        "events": [
            {
                "name": "No social or workshop",
                "start_date": "3000-01-01",
                "end_date": "3000-01-01",
                "country": "UK",
                "city": "York",
                "styles": ["playford"],
            }
        ]
    }
    bad_file = events_dir / "uk" / "bad.yaml"
    with open(bad_file, "w", encoding="utf-8") as f:
        yaml.safe_dump(bad, f)

    with pytest.raises(ValidationError) as exc_info:
        Storage(events_dir).load()

    error = exc_info.value
    assert error.event_name == "No social or workshop"
    assert error.source == str(bad_file)
    assert error.problems == ["Must have at least a workshop or a social."]
    assert "No social or workshop" in str(error)


def test_unparseable_file(events_dir: Path) -> None:
    (events_dir / "broken.yaml").write_text("events: [", encoding="utf-8")
    with pytest.raises(SerializationError) as exc_info:
        Storage(events_dir).load()
    assert "broken.yaml" in exc_info.value.message


def test_unreadable_file(events_dir: Path) -> None:
    (events_dir / "gone.yaml").symlink_to(events_dir / "missing.yaml")
    with pytest.raises(ConfigurationError) as exc_info:
        Storage(events_dir).load()
    assert exc_info.value.path == str(events_dir / "gone.yaml")


def test_file_not_utf8(tmp_path: Path) -> None:
    path = tmp_path / "latin1.yaml"
    path.write_bytes("events:\n  - name: Caf\u00e9\n".encode("latin-1"))
    with pytest.raises(SerializationError) as exc_info:
        Storage.load_file(path)
    assert exc_info.value.format == "yaml"
    assert "latin1.yaml" in exc_info.value.message


def test_missing_directory(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        Storage(tmp_path / "missing").load()


def test_event_store_reload_swaps(events_dir: Path) -> None:
    store = EventStore()
    assert len(store.get()) == 0

    before = store.get()
    loaded = store.reload(Storage(events_dir))

    assert store.get() is loaded
    assert len(loaded) == 3
    # Readers holding the old collection are unaffected.
    assert len(before) == 0


def test_event_store_failed_reload_keeps_current(events_dir: Path, tmp_path: Path) -> None:
    current = Events()
    store = EventStore(current)
    with pytest.raises(ConfigurationError):
        store.reload(Storage(tmp_path / "missing"))
    assert store.get() is current
