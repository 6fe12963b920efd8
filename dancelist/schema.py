"""JSON schema for event files and exported documents.

The same schema describes the YAML event files the loader reads and the
JSON/YAML/TOML documents the exporters produce; decoders validate against it
before building events so problems are reported with a field path.
"""

from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import best_match

from .exceptions import SerializationError
from .models import DanceStyle

_STRING_LIST = {"type": "array", "items": {"type": "string"}}


def event_schema() -> dict[str, Any]:
    """Returns the JSON schema for an events document."""
    event = {
        "type": "object",
        "additionalProperties": False,
        "required": ["name", "country", "city"],
        "properties": {
            "name": {"type": "string", "description": "The name of the event."},
            "details": {
                "type": "string",
                "description": "More details describing the event.",
            },
            "links": {
                **_STRING_LIST,
                "description": "URLs with more information about the event, "
                "including the Facebook event page if any.",
            },
            "start_date": {
                "type": "string",
                "format": "date",
                "description": "The first day of the event, in the local timezone.",
            },
            "end_date": {
                "type": "string",
                "format": "date",
                "description": "The last day of the event, in the local timezone.",
            },
            "start": {
                "type": "string",
                "format": "date-time",
                "description": "The start time of the event, with UTC offset.",
            },
            "end": {
                "type": "string",
                "format": "date-time",
                "description": "The end time of the event, with UTC offset.",
            },
            "country": {"type": "string"},
            "city": {"type": "string"},
            "styles": {
                "type": "array",
                "items": {"enum": [style.tag for style in DanceStyle]},
                "description": "The dance styles included in the event.",
            },
            "workshop": {
                "type": "boolean",
                "description": "The event includes one or more workshops or lessons.",
            },
            "social": {
                "type": "boolean",
                "description": "The event includes one or more social dances.",
            },
            "bands": {**_STRING_LIST, "description": "The bands playing."},
            "callers": {**_STRING_LIST, "description": "The callers calling."},
            "price": {
                "type": "string",
                "description": "The price or price range of the event, if available.",
            },
            "organisation": {
                "type": "string",
                "description": "The organisation who run the event.",
            },
            "cancelled": {
                "type": "boolean",
                "description": "The event has been cancelled.",
            },
        },
        "oneOf": [
            {"required": ["start_date", "end_date"]},
            {"required": ["start", "end"]},
        ],
    }
    return {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "title": "Events",
        "type": "object",
        "additionalProperties": False,
        "required": ["events"],
        "properties": {"events": {"type": "array", "items": event}},
    }


def validate_document(data: Any, format: str) -> None:
    """Validates a decoded document against the events schema.

    YAML decodes unquoted dates and timestamps to Python objects, which the
    schema's string types would reject, so those are validated by the model
    instead and only the document structure is checked here.

    Raises:
        SerializationError: With the JSON path of the first failing field.
    """
    validator = Draft202012Validator(_structural_schema())
    error = best_match(validator.iter_errors(data))
    if error is not None:
        path = "/".join(str(p) for p in error.absolute_path) or "$"
        raise SerializationError(
            f"Invalid {format} events document at '{path}': {error.message}",
            format=format,
            field=path,
        )


def _structural_schema() -> dict[str, Any]:
    schema = event_schema()
    properties = schema["properties"]["events"]["items"]["properties"]
    for key in ("start_date", "end_date", "start", "end"):
        properties[key] = {"description": properties[key]["description"]}
    return schema
