"""Shared pytest fixtures for dancelist tests."""

from pathlib import Path

import pytest
import yaml


@pytest.fixture
def events_dir(tmp_path: Path) -> Path:
    """Provides a directory tree of valid event files."""
    root = tmp_path / "events"
    (root / "uk").mkdir(parents=True)
    (root / "be").mkdir(parents=True)

    uk = {
        "events": [
            {
                "name": "Oxford Playford Ball",
                "links": ["https://example.com/ball"],
                "start_date": "3000-03-04",
                "end_date": "3000-03-04",
                "country": "UK",
                "city": "Oxford",
                "styles": ["playford"],
                "workshop": False,
                "social": True,
                "bands": ["Orchestra"],
                "callers": ["Caller A"],
            },
            {
                "name": "London Ceilidh",
                "links": [],
                "start_date": "3000-01-10",
                "end_date": "3000-01-10",
                "country": "UK",
                "city": "London",
                "styles": ["e-ceilidh"],
                "social": True,
                "bands": ["Band B"],
            },
        ]
    }
    be = {
        "events": [
            {
                "name": "Bal in Gent",
                "links": ["https://www.facebook.com/events/123/"],
                "start": "3000-01-20T20:00:00+01:00",
                "end": "3000-01-20T23:30:00+01:00",
                "country": "Belgium",
                "city": "Gent",
                "styles": ["balfolk"],
                "social": True,
                "organisation": "Folkbal",
            },
        ]
    }
    with open(root / "uk" / "events.yaml", "w", encoding="utf-8") as f:
        yaml.safe_dump(uk, f, sort_keys=False)
    with open(root / "be" / "events.yaml", "w", encoding="utf-8") as f:
        yaml.safe_dump(be, f, sort_keys=False)
    (root / "README.md").write_text("Not an events file.\n", encoding="utf-8")
    return root
