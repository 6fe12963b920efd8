import threading
from pathlib import Path

import structlog

from .events import Events
from .exceptions import ConfigurationError, SerializationError, ValidationError
from .export.structured import decode_yaml

logger = structlog.get_logger(__name__)


class Storage:
    """Loads events from a directory tree of YAML files.

    Each file is an events document (``{"events": [...]}``). Every event is
    validated; a single invalid event fails the whole load.
    """

    def __init__(self, events_dir: str | Path):
        """Initializes the Storage instance.

        Args:
            events_dir: Directory to scan (recursively) for ``*.yaml`` files.
        """
        self.events_dir = Path(events_dir)

    def load(self) -> Events:
        """Loads events from all YAML files under the events directory.

        Files are read in sorted path order so the collection order is stable.

        Returns:
            The combined collection.

        Raises:
            ConfigurationError: If the directory doesn't exist.
            SerializationError: If a file can't be parsed.
            ValidationError: If any event is invalid.
        """
        if not self.events_dir.is_dir():
            raise ConfigurationError(
                f"Events directory not found: {self.events_dir}",
                parameter="events_dir",
                path=str(self.events_dir),
            )

        events = []
        for path in sorted(self.events_dir.rglob("*")):
            if path.is_dir():
                continue
            if path.suffix != ".yaml":
                logger.debug("file_skipped", path=str(path))
                continue
            events.extend(self.load_file(path))

        logger.info("events_loaded", path=str(self.events_dir), count=len(events))
        return Events(events)

    @staticmethod
    def load_file(path: str | Path) -> Events:
        """Loads and validates events from a single YAML file.

        Raises:
            ConfigurationError: If the file can't be read.
            SerializationError: If the file can't be parsed.
            ValidationError: If any event is invalid.
        """
        path = Path(path)
        logger.debug("file_reading", path=str(path))
        try:
            with open(path, encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            logger.error("file_read_failed", path=str(path), error=str(e))
            raise ConfigurationError(
                f"Can't read events file {path}: {e.strerror or e}",
                path=str(path),
                suggestion="Check that the file exists and is readable.",
            ) from e
        except UnicodeDecodeError as e:
            raise SerializationError(
                f"Reading {path}: not valid UTF-8 ({e.reason})",
                format="yaml",
                error_data={"path": str(path)},
            ) from e

        try:
            events = decode_yaml(text)
        except SerializationError as e:
            logger.error("file_parse_failed", path=str(path), error=e.message)
            raise SerializationError(
                f"Reading {path}: {e.message}",
                format=e.format,
                field=e.field,
                error_data={"path": str(path)},
            ) from e

        for event in events:
            problems = event.validate()
            if problems:
                logger.error(
                    "event_invalid", event=event.name, path=str(path), problems=problems
                )
                raise ValidationError(
                    f"Problems with event '{event.name}' in {path}: {problems}",
                    event_name=event.name,
                    source=str(path),
                    problems=problems,
                )

        return events


class EventStore:
    """Holds the process-wide event collection.

    Readers get the current collection with ``get()`` and may use it for as
    long as they like; it is never modified. ``reload()`` loads a complete new
    collection first and only then swaps it in, so readers never see a
    partially loaded one.
    """

    def __init__(self, events: Events | None = None) -> None:
        self._events = events if events is not None else Events()
        self._lock = threading.Lock()

    def get(self) -> Events:
        return self._events

    def reload(self, storage: Storage) -> Events:
        """Replaces the collection with a freshly loaded one.

        If loading fails the current collection stays in place and the error
        propagates.
        """
        events = storage.load()
        with self._lock:
            previous = self._events
            self._events = events
        logger.info("collection_swapped", previous=len(previous), current=len(events))
        return events
