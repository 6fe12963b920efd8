import functools
import json
import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click
import structlog

from .config import Config
from .events import Events, sort_by_start
from .exceptions import DancelistError
from .export import ENCODERS, encode_calendar
from .export.calendar_feed import DEFAULT_CALENDAR_NAME
from .filters import DateFilter, Filters
from .grouping import sort_and_group_by_month
from .models import DanceStyle
from .schema import event_schema
from .storage import Storage

logger = structlog.get_logger(__name__)

FORMATS = [*ENCODERS, "ics"]


def setup_logging(level: str = "INFO") -> None:
    """Sends stdlib and structlog output to stderr, leaving stdout for results."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
        force=True,
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.KeyValueRenderer(key_order=["event"]),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def handle_errors(f: Callable[..., Any]) -> Callable[..., Any]:
    """Turns dancelist errors into a clean CLI failure."""

    @functools.wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return f(*args, **kwargs)
        except DancelistError as e:
            logger.error("command_failed", **e.to_dict())
            raise click.ClickException(str(e)) from e

    return wrapper


def filter_options(f: Callable[..., Any]) -> Callable[..., Any]:
    """Adds the event filter options to a command."""
    options = [
        click.option("--text", help="Case-insensitive text to search for."),
        click.option("--country", help="Only events in this country."),
        click.option("--city", help="Only events in this city."),
        click.option(
            "--style",
            type=click.Choice([s.tag for s in DanceStyle]),
            help="Only events including this dance style.",
        ),
        click.option("--organisation", help="Only events run by this organisation."),
        click.option("--band", help="Only events with this band playing."),
        click.option("--caller", help="Only events with this caller calling."),
        click.option(
            "--date",
            type=click.Choice([d.value for d in DateFilter]),
            default=DateFilter.FUTURE.value,
            show_default=True,
            help="Which events to include relative to now.",
        ),
    ]
    for option in reversed(options):
        f = option(f)
    return f


def load_events(
    path: Path | None, config_path: Path | None, verbose: bool = False
) -> Events:
    """Loads events from the given file or directory, or from the directory in
    the config file if no path is provided.
    """
    if path is not None:
        if path.is_dir():
            return Storage(path).load()
        return Storage.load_file(path)
    config = Config.from_file(config_path)
    if not verbose:
        logging.getLogger().setLevel(config.log_level)
    return Storage(config.events_dir).load()


def _calendar_name(config_path: Path | None, path: Path | None) -> str:
    if path is not None and config_path is None:
        return DEFAULT_CALENDAR_NAME
    return Config.from_file(config_path).calendar_name


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    help="Config file (default: $DANCELIST_CONFIG or dancelist.yaml).",
)
@click.option(
    "--events",
    "events_path",
    type=click.Path(path_type=Path, exists=True),
    help="Events file or directory, instead of the configured one.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(
    ctx: click.Context, config_path: Path | None, events_path: Path | None, verbose: bool
) -> None:
    """Folk dance event listings."""
    setup_logging("DEBUG" if verbose else "INFO")
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["events_path"] = events_path
    ctx.obj["verbose"] = verbose


def _events(ctx: click.Context, path: Path | None = None) -> Events:
    return load_events(
        path or ctx.obj["events_path"], ctx.obj["config_path"], ctx.obj["verbose"]
    )


@main.command()
@click.argument("path", required=False, type=click.Path(path_type=Path, exists=True))
@click.pass_context
@handle_errors
def validate(ctx: click.Context, path: Path | None) -> None:
    """Validate event files."""
    events = _events(ctx, path)
    click.echo(f"Successfully validated {len(events)} events.")


@main.command()
@click.argument("path", required=False, type=click.Path(path_type=Path, exists=True))
@click.pass_context
@handle_errors
def cat(ctx: click.Context, path: Path | None) -> None:
    """Print all events as a single YAML document."""
    events = _events(ctx, path)
    click.echo(ENCODERS["yaml"](events), nl=False)


@main.command()
def schema() -> None:
    """Print the JSON schema for event files."""
    click.echo(json.dumps(event_schema(), indent=2))


@main.command()
@click.option(
    "--format",
    "fmt",
    type=click.Choice(FORMATS),
    default="json",
    show_default=True,
    help="Output format.",
)
@filter_options
@click.pass_context
@handle_errors
def export(ctx: click.Context, fmt: str, **query: str | None) -> None:
    """Export matching events, sorted by start time."""
    filters = Filters.from_query(query)
    events = _events(ctx)
    matched = sort_by_start(events.matching(filters))
    logger.info("export", format=fmt, matched=len(matched), total=len(events))

    if fmt == "ics":
        name = _calendar_name(ctx.obj["config_path"], ctx.obj["events_path"])
        click.echo(encode_calendar(matched, name=name), nl=False)
    else:
        click.echo(ENCODERS[fmt](Events.cloned(matched)), nl=False)


@main.command()
@filter_options
@click.pass_context
@handle_errors
def months(ctx: click.Context, **query: str | None) -> None:
    """List matching events grouped by month."""
    filters = Filters.from_query(query)
    events = _events(ctx)
    for month in sort_and_group_by_month(events.matching(filters)):
        click.echo(month.name())
        for event in month.events:
            line = f"  {event.start_date().isoformat()}  {event.name} - {event.city}, {event.country}"
            if event.cancelled:
                line += " (cancelled)"
            click.echo(line)


@main.command()
@filter_options
@click.pass_context
@handle_errors
def countries(ctx: click.Context, **query: str | None) -> None:
    """List countries and their cities with matching events."""
    filters = Filters.from_query(query)
    events = _events(ctx)
    for country in events.countries(filters.with_country(None)):
        click.echo(f"{country.name}: {', '.join(country.cities)}")


@main.command()
@filter_options
@click.pass_context
@handle_errors
def cities(ctx: click.Context, **query: str | None) -> None:
    """List cities with matching events."""
    filters = Filters.from_query(query)
    events = _events(ctx)
    for city in events.cities(filters.with_city(None)):
        click.echo(city)


@main.command()
@filter_options
@click.pass_context
@handle_errors
def styles(ctx: click.Context, **query: str | None) -> None:
    """List dance styles with matching events."""
    filters = Filters.from_query(query)
    events = _events(ctx)
    for style in events.styles(filters.with_style(None)):
        click.echo(f"{style.tag}\t{style.display_name}")


@main.command()
@click.pass_context
@handle_errors
def bands(ctx: click.Context) -> None:
    """List all bands."""
    for band in _events(ctx).bands():
        click.echo(band)


@main.command()
@click.pass_context
@handle_errors
def callers(ctx: click.Context) -> None:
    """List all callers."""
    for caller in _events(ctx).callers():
        click.echo(caller)


@main.command()
@click.pass_context
@handle_errors
def organisations(ctx: click.Context) -> None:
    """List all organisations."""
    for organisation in _events(ctx).organisations():
        click.echo(organisation)


if __name__ == "__main__":
    main()
