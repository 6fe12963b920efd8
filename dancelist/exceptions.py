"""Custom exception hierarchy for dancelist.

Provides structured exceptions with error context and correction hints so
that callers (the CLI, tests, anything embedding the engine) can report
failures precisely instead of guessing from a bare message.
"""

from typing import Any


class DancelistError(Exception):
    """Base exception for all dancelist errors.

    Attributes:
        message: Human-readable error message.
        error_data: Structured error information.
        suggestion: Hint for how to resolve the error.
    """

    def __init__(
        self,
        message: str,
        error_data: dict[str, Any] | None = None,
        suggestion: str | None = None,
    ):
        """Initialize the error.

        Args:
            message: Human-readable error message.
            error_data: Structured context (event names, files, fields, etc.).
            suggestion: Actionable correction hint.
        """
        super().__init__(message)
        self.message = message
        self.error_data = error_data or {}
        self.suggestion = suggestion

    def __str__(self) -> str:
        """Return formatted error message with suggestion if available."""
        base = self.message
        if self.suggestion:
            return f"{base}\nSuggestion: {self.suggestion}"
        return base

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to structured dictionary for logging.

        Returns:
            Dictionary with error type, message, data, and suggestion.
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_data": self.error_data,
            "suggestion": self.suggestion,
        }


class ValidationError(DancelistError):
    """An event record failed validation while loading.

    Examples:
        - Neither workshop nor social
        - Start after end
        - No dance styles
    """

    def __init__(
        self,
        message: str,
        event_name: str | None = None,
        source: str | None = None,
        problems: list[str] | None = None,
        error_data: dict[str, Any] | None = None,
        suggestion: str | None = None,
    ):
        """Initialize validation error.

        Args:
            message: Human-readable error message.
            event_name: Name of the offending event.
            source: File (or other source) the event was read from.
            problems: The individual validation problems found.
            error_data: Additional context.
            suggestion: How to resolve the error.
        """
        data = error_data or {}
        data.update(
            {
                "event_name": event_name,
                "source": source,
                "problems": problems or [],
            }
        )

        default_suggestion = suggestion or (
            f"Fix the event '{event_name}' in {source} and reload."
            if event_name and source
            else "Check the event data against the schema (`dancelist schema`)."
        )

        super().__init__(message, data, default_suggestion)
        self.event_name = event_name
        self.source = source
        self.problems = problems or []


class SerializationError(DancelistError):
    """Encoding or decoding one of the structured formats failed.

    Examples:
        - Malformed YAML/JSON/TOML text
        - A document that does not match the event schema
        - An unknown dance style tag
    """

    def __init__(
        self,
        message: str,
        format: str | None = None,
        field: str | None = None,
        error_data: dict[str, Any] | None = None,
        suggestion: str | None = None,
    ):
        """Initialize serialization error.

        Args:
            message: Human-readable error message.
            format: The format being encoded or decoded (json, yaml, toml, ics).
            field: Path of the offending field, where known.
            error_data: Additional context.
            suggestion: How to resolve the error.
        """
        data = error_data or {}
        data.update({"format": format, "field": field})

        default_suggestion = suggestion or (
            f"Check the value of '{field}' in the {format} document."
            if field
            else f"Check that the input is a valid {format} events document."
        )

        super().__init__(message, data, default_suggestion)
        self.format = format
        self.field = field


class TimeConversionError(DancelistError):
    """A local date or time cannot be mapped to a single instant.

    Examples:
        - Wall-clock time skipped by a DST transition
        - Wall-clock time repeated by a DST transition
        - A naive reference instant passed to a filter
    """

    def __init__(
        self,
        message: str,
        value: Any = None,
        timezone: str | None = None,
        error_data: dict[str, Any] | None = None,
        suggestion: str | None = None,
    ):
        """Initialize time conversion error.

        Args:
            message: Human-readable error message.
            value: The date or time that failed to convert.
            timezone: Name of the timezone used for the conversion.
            error_data: Additional context.
            suggestion: How to resolve the error.
        """
        data = error_data or {}
        data.update(
            {"value": str(value) if value is not None else None, "timezone": timezone}
        )

        default_suggestion = suggestion or (
            "Give the event explicit start and end times with a UTC offset."
        )

        super().__init__(message, data, default_suggestion)
        self.value = value
        self.timezone = timezone


class FilterError(DancelistError):
    """A filter parameter could not be understood."""

    def __init__(
        self,
        message: str,
        parameter: str | None = None,
        received: Any = None,
        expected: str | None = None,
        error_data: dict[str, Any] | None = None,
        suggestion: str | None = None,
    ):
        """Initialize filter error.

        Args:
            message: Human-readable error message.
            parameter: Name of the filter parameter.
            received: The value that was given.
            expected: Description of acceptable values.
            error_data: Additional context.
            suggestion: How to resolve the error.
        """
        data = error_data or {}
        data.update(
            {
                "parameter": parameter,
                "received": str(received)[:200] if received else None,
                "expected": expected,
            }
        )

        default_suggestion = suggestion or (
            f"Parameter '{parameter}' must be one of: {expected}."
            if parameter and expected
            else "Check the filter parameters."
        )

        super().__init__(message, data, default_suggestion)
        self.parameter = parameter
        self.received = received
        self.expected = expected


class ConfigurationError(DancelistError):
    """Invalid configuration or CLI arguments.

    Examples:
        - Missing config file
        - Missing required setting
        - Events directory does not exist
    """

    def __init__(
        self,
        message: str,
        parameter: str | None = None,
        path: str | None = None,
        error_data: dict[str, Any] | None = None,
        suggestion: str | None = None,
    ):
        """Initialize configuration error.

        Args:
            message: Human-readable error message.
            parameter: Setting name that's invalid or missing.
            path: Config file or directory involved.
            error_data: Additional context.
            suggestion: How to resolve the error.
        """
        data = error_data or {}
        data.update({"parameter": parameter, "path": path})

        default_suggestion = suggestion or (
            f"Set '{parameter}' in {path}."
            if parameter and path
            else "Check the config file and command-line arguments."
        )

        super().__init__(message, data, default_suggestion)
        self.parameter = parameter
        self.path = path
