import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigurationError

CONFIG_ENV_VAR = "DANCELIST_CONFIG"
DEFAULT_CONFIG_FILE = "dancelist.yaml"


@dataclass(frozen=True)
class Config:
    """Settings read from the config file.

    Example ``dancelist.yaml``::

        events_dir: events
        calendar_name: Folk dance events
        log_level: INFO
    """

    events_dir: Path
    calendar_name: str = "Folk dance events"
    log_level: str = "INFO"

    @classmethod
    def from_file(cls, path: str | Path | None = None) -> "Config":
        """Loads the config file.

        Args:
            path: Config file to read. Defaults to ``$DANCELIST_CONFIG``, then
                ``dancelist.yaml`` in the working directory.

        Raises:
            ConfigurationError: If the file is missing, unparseable or lacks
                ``events_dir``.
        """
        path = Path(path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_FILE)
        if not path.exists():
            raise ConfigurationError(
                f"Config file not found: {path}",
                path=str(path),
                suggestion=f"Create {path} or pass --config / set {CONFIG_ENV_VAR}.",
            )

        try:
            with open(path, encoding="utf-8") as f:
                data: Any = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid config file {path}: {e}", path=str(path)) from e

        if not isinstance(data, dict) or not data.get("events_dir"):
            raise ConfigurationError(
                f"Config file {path} has no events_dir",
                parameter="events_dir",
                path=str(path),
            )

        # Relative paths are relative to the config file.
        events_dir = Path(data["events_dir"])
        if not events_dir.is_absolute():
            events_dir = path.parent / events_dir

        return cls(
            events_dir=events_dir,
            calendar_name=str(data.get("calendar_name", cls.calendar_name)),
            log_level=str(data.get("log_level", cls.log_level)).upper(),
        )
