"""timeblock CLI - schedule tasks into free calendar time."""

import json
import logging
import sys
from datetime import timedelta
from pathlib import Path

import click

from .config import load_config
from .core.errors import SchedulingError
from .service import build_service

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@click.group()
@click.version_option()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """timeblock - automatic task scheduling."""
    logging.basicConfig(format=LOG_FORMAT, level=logging.DEBUG if debug else logging.INFO)


def _read_payload(path: str) -> dict:
    try:
        return json.loads(Path(path).read_text())
    except (OSError, json.JSONDecodeError) as e:
        click.echo(f"Error: cannot read payload {path}: {e}", err=True)
        sys.exit(1)


def _load_config():
    try:
        return load_config()
    except ValueError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)


def _service(events_file: str | None, dry_run: bool):
    config = _load_config()
    try:
        return build_service(config, events_file=events_file, dry_run=dry_run)
    except ValueError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.argument("payload_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--events", "events_file", default=None, type=click.Path(exists=True, dir_okay=False),
              help="Read busy time from a JSON file instead of Google Calendar")
@click.option("--dry-run", is_flag=True, help="Don't write the result back to Notion")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def schedule(payload_file: str, events_file: str | None, dry_run: bool, as_json: bool):
    """Schedule the task described in PAYLOAD_FILE."""
    service = _service(events_file, dry_run)
    outcome = service.schedule_payload(_read_payload(payload_file))

    if as_json:
        click.echo(json.dumps(outcome.to_dict(), indent=2))
    else:
        click.echo(f"{outcome.status.label}: {outcome.message}")
        if outcome.alternatives:
            click.echo("\nAlternatives:")
            for slot in outcome.alternatives:
                click.echo(f"  {slot.format()}")

    if not outcome.success:
        sys.exit(1)


@main.command()
@click.argument("payload_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--events", "events_file", default=None, type=click.Path(exists=True, dir_okay=False),
              help="Read busy time from a JSON file instead of Google Calendar")
@click.option("--limit", "-n", default=10, show_default=True, help="Number of slots to show")
def slots(payload_file: str, events_file: str | None, limit: int):
    """Show ranked candidate slots without scheduling."""
    service = _service(events_file, dry_run=True)
    try:
        candidates = service.preview_slots(_read_payload(payload_file), limit=limit)
    except SchedulingError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)

    if not candidates:
        click.echo("No available slots.")
        return

    for slot in candidates:
        click.echo(f"[{slot.quality.label:10}] {slot.format()}")


@main.command()
@click.option("--days", "-d", default=1, show_default=True, help="Number of days to show")
@click.option("--events", "events_file", default=None, type=click.Path(exists=True, dir_okay=False),
              help="Read busy time from a JSON file instead of Google Calendar")
def calendar(days: int, events_file: str | None):
    """Show busy time for the coming days."""
    service = _service(events_file, dry_run=True)
    now = service.now()
    try:
        busy = service.calendar.list_busy_intervals(now, now + timedelta(days=days))
    except SchedulingError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)

    if not busy:
        click.echo("No events.")
        return

    tz = service.settings.tz
    current_date = None
    for interval in busy:
        event_date = interval.start.astimezone(tz).date()
        if event_date != current_date:
            if current_date is not None:
                click.echo()
            click.echo(f"### {event_date.strftime('%A, %B %d')}")
            current_date = event_date
        click.echo(f"  {interval.format_time():8} {interval.summary or '(busy)'}")


@main.command("check-store")
def check_store():
    """Check the Notion database has the properties timeblock writes."""
    from .adapters import NotionAdapter

    config = _load_config()
    if not config.notion_api_key:
        click.echo("Configuration error: NOTION_API_KEY is not configured", err=True)
        sys.exit(1)

    try:
        missing = NotionAdapter(config.notion_api_key, config.notion_database_id).validate_database()
    except SchedulingError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)

    if missing:
        click.echo(f"Missing properties: {', '.join(missing)}")
        sys.exit(1)
    click.echo("Notion database OK")


@main.command()
@click.option("--host", default="0.0.0.0", show_default=True, help="Interface to bind")
@click.option("--port", default=None, type=int, help="Port to listen on (default: PORT setting)")
def serve(host: str, port: int | None):
    """Run the webhook server."""
    import uvicorn

    config = _load_config()
    missing = config.missing_credentials()
    if missing:
        click.echo(f"Warning: missing {', '.join(missing)}; scheduling routes will return 503", err=True)

    click.echo("Starting timeblock webhook server...")
    click.echo("Press Ctrl+C to stop")
    uvicorn.run("timeblock.api:create_app", factory=True, host=host, port=port or config.port)


if __name__ == "__main__":
    main()
