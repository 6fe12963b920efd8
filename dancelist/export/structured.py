"""Structured-data codecs for event collections.

JSON, YAML and TOML all share one document shape, ``{"events": [...]}``,
with each event in the event file format of ``Event.to_dict``. Every
``decode_*`` is the inverse of the matching ``encode_*``.
"""

import json
import tomllib
from collections.abc import Iterable
from typing import Any

import structlog
import tomli_w
import yaml

from ..events import Events
from ..exceptions import SerializationError
from ..models import Event, EventsDict
from ..schema import validate_document

logger = structlog.get_logger(__name__)


def to_document(events: Iterable[Event]) -> EventsDict:
    return {"events": [event.to_dict() for event in events]}


def from_document(data: Any, format: str) -> Events:
    """Builds a collection from a decoded document.

    Raises:
        SerializationError: If the document doesn't match the schema or an
            event can't be built.
    """
    validate_document(data, format)
    events = []
    for i, event_data in enumerate(data["events"]):
        try:
            events.append(Event.from_dict(event_data))
        except SerializationError as e:
            raise SerializationError(
                f"Invalid {format} event #{i}: {e.message}",
                format=format,
                field=f"events/{i}/{e.field}" if e.field else f"events/{i}",
            ) from e
    logger.debug("document_decoded", format=format, count=len(events))
    return Events(events)


def encode_json(events: Iterable[Event]) -> str:
    try:
        return json.dumps(to_document(events), indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Failed to encode JSON: {e}", format="json") from e


def decode_json(text: str) -> Events:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SerializationError(
            f"Failed to parse JSON at line {e.lineno}: {e.msg}", format="json"
        ) from e
    return from_document(data, "json")


def encode_yaml(events: Iterable[Event]) -> str:
    try:
        return yaml.safe_dump(
            to_document(events),
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )
    except yaml.YAMLError as e:
        raise SerializationError(f"Failed to encode YAML: {e}", format="yaml") from e


def decode_yaml(text: str) -> Events:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise SerializationError(f"Failed to parse YAML: {e}", format="yaml") from e
    return from_document(data, "yaml")


def encode_toml(events: Iterable[Event]) -> str:
    try:
        return tomli_w.dumps(to_document(events))  # type: ignore[arg-type]
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Failed to encode TOML: {e}", format="toml") from e


def decode_toml(text: str) -> Events:
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise SerializationError(f"Failed to parse TOML: {e}", format="toml") from e
    # Hand-written documents may leave out an empty events array.
    data.setdefault("events", [])
    return from_document(data, "toml")


ENCODERS = {
    "json": encode_json,
    "yaml": encode_yaml,
    "toml": encode_toml,
}

DECODERS = {
    "json": decode_json,
    "yaml": decode_yaml,
    "toml": decode_toml,
}
