"""Dancelist - folk dance event listings.

This package loads dance events from YAML files, filters and groups them,
and exports them as JSON, YAML, TOML or an iCalendar feed.
"""

__version__ = "0.1.0"
