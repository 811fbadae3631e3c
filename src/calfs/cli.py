"""calfs CLI - browse or mount a calendar as a year/month/day tree."""

import logging
import os
import sys

import click

from .adapters.cache import CachedCalendarSource
from .adapters.google_calendar import GoogleCalendarAdapter
from .adapters.ical_file import IcsCalendarAdapter
from .config import Config, load_config
from .errors import NotFoundError
from .namespace import DayNode, NamespaceEngine, NodeKind
from .ports.calendar_source import CalendarSource, SourceUnavailableError


def open_source(config: Config, ics: str | None = None, gcal: str | None = None) -> CalendarSource:
    """Pick a calendar provider: --ics, then --gcal, then the config file."""
    ics = ics or (None if gcal else config.ics)
    gcal = gcal or config.gcal_config_folder

    if ics:
        return IcsCalendarAdapter(ics)
    if gcal:
        return GoogleCalendarAdapter(
            config_folder=gcal,
            calendar_id=config.gcal_calendar_id,
            client_secret_file=config.google_client_secret_file,
        )
    raise click.UsageError("No calendar configured - pass --ics or --gcal")


def build_engine(
    config: Config,
    ics: str | None = None,
    gcal: str | None = None,
    ttl: float | None = None,
) -> NamespaceEngine:
    try:
        source = open_source(config, ics=ics, gcal=gcal)
    except SourceUnavailableError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    ttl = config.cache_ttl if ttl is None else ttl
    return NamespaceEngine(CachedCalendarSource(source, ttl=ttl))


@click.group()
@click.version_option()
def main():
    """calfs - a calendar as a read-only filesystem."""
    pass


@main.command()
@click.option("--ics", help="ICS calendar file or URL")
@click.option("--gcal", help="Google Calendar config folder (holds token.json)")
@click.option("--mountpoint", help="Directory to mount the calendar on")
@click.option("--ttl", type=float, help="Cache lifetime in seconds")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def mount(ics, gcal, mountpoint, ttl, debug):
    """Mount the calendar."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if debug else logging.INFO,
    )

    config = load_config()
    engine = build_engine(config, ics=ics, gcal=gcal, ttl=ttl)
    mountpoint = os.path.expanduser(mountpoint or config.mountpoint)

    from .adapters.fuse_host import mount as fuse_mount

    click.echo(f"Mounted on {mountpoint}")
    click.echo(f"Unmount by calling 'fusermount -u {mountpoint}'")
    fuse_mount(engine, mountpoint, debug=debug)


@main.command()
@click.option("--gcal", help="Google Calendar config folder to store token.json in")
def auth(gcal):
    """Authenticate with Google Calendar."""
    config = load_config()
    folder = gcal or config.gcal_config_folder
    if not folder:
        click.echo("Error: no Google Calendar config folder - pass --gcal", err=True)
        sys.exit(1)

    adapter = GoogleCalendarAdapter(
        config_folder=folder,
        client_secret_file=config.google_client_secret_file,
    )
    if not adapter.authenticate():
        click.echo("Error: authentication failed", err=True)
        sys.exit(1)
    click.echo(f"Saved token to {folder}")


@main.command("ls")
@click.option("--ics", help="ICS calendar file or URL")
@click.option("--gcal", help="Google Calendar config folder (holds token.json)")
@click.argument("path", default="/")
def ls(ics, gcal, path):
    """List a directory of the calendar tree, e.g. /2024/March."""
    engine = build_engine(load_config(), ics=ics, gcal=gcal)
    try:
        entries = engine.list(path)
    except (NotFoundError, SourceUnavailableError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    for entry in entries:
        suffix = "/" if entry.kind is NodeKind.DIRECTORY else ""
        click.echo(f"{entry.name}{suffix}")


@main.command("cat")
@click.option("--ics", help="ICS calendar file or URL")
@click.option("--gcal", help="Google Calendar config folder (holds token.json)")
@click.argument("path")
def cat(ics, gcal, path):
    """Print a day file, e.g. /2024/March/05."""
    engine = build_engine(load_config(), ics=ics, gcal=gcal)
    try:
        node = engine.lookup(path)
        if not isinstance(node, DayNode):
            raise NotFoundError(f"{path}: is a directory")
        content = node.content()
    except (NotFoundError, SourceUnavailableError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(content.decode("utf-8"), nl=False)
