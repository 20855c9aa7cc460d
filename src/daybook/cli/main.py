"""Main CLI application."""

import logging
import sys
import time
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.live import Live
from rich.panel import Panel

from daybook import __version__
from daybook.analysis.reports import ReportGenerator
from daybook.automation.notifier import Notifier
from daybook.cli.config_commands import config, load_config
from daybook.core.aggregation import format_duration
from daybook.core.app import DaybookApp
from daybook.core.exceptions import DaybookError, ExportError, SaveError
from daybook.core.storage import StorageManager

console = Console()
error_console = Console(stderr=True)

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Send log records to stderr at the given level."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def get_app(ctx: click.Context) -> DaybookApp:
    """Build the controller from CLI options and configuration, and load data."""
    cfg = load_config(ctx)
    configure_logging("DEBUG" if ctx.obj.get("verbose") else cfg.get("advanced.log_level", "WARNING"))

    data_dir = ctx.obj.get("data_dir")
    storage = StorageManager(Path(data_dir) if data_dir else cfg.data_dir)

    if cfg.get("advanced.backup_on_start"):
        backup_path = storage.backup()
        logger.debug("Backed up data to %s", backup_path)

    notifier = Notifier(
        enabled=bool(cfg.get("notifications.enabled")),
        backend=cfg.get("notifications.backend", "auto"),
        types=cfg.get("notifications.types"),
    )
    app = DaybookApp(
        storage,
        notifier=notifier,
        export_dir=cfg.export_dir,
        date_format=cfg.get("export.date_format", "%x"),
    )

    error = app.load()
    if error:
        error_console.print(f"[yellow]Warning:[/yellow] {error}. Starting with empty data.")
    return app


def report_save_errors(app: DaybookApp) -> None:
    """Tell the user about a failed write. The next change retries it."""
    if isinstance(app.last_error, SaveError):
        error_console.print(f"[yellow]Warning:[/yellow] {app.last_error}")


def fail(error: Exception) -> None:
    error_console.print(f"[red]Error:[/red] {error}")
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option("--data-dir", help="Custom data directory", type=click.Path())
@click.option("--config", "config_path", help="Path to config file", type=click.Path())
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(
    ctx: click.Context,
    data_dir: Optional[str],
    config_path: Optional[str],
    no_color: bool,
    verbose: bool,
) -> None:
    """Daybook - Simple, beautiful time tracking.

    Register clients, create billable projects, time your work and export
    it as CSV.
    """
    ctx.ensure_object(dict)
    ctx.obj["data_dir"] = data_dir
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose

    if no_color:
        console.no_color = True
        error_console.no_color = True


# Clients


@cli.group()
def client() -> None:
    """Manage clients."""
    pass


@client.command("add")
@click.argument("name")
@click.pass_context
def client_add(ctx: click.Context, name: str) -> None:
    """Register a new client.

    Example:
        daybook client add "Acme"
    """
    app = get_app(ctx)

    try:
        new_client = app.add_client(name)
    except DaybookError as e:
        fail(e)
        return

    console.print(f"[green]✓[/green] Added client: {new_client.name}")
    console.print(f"  ID: {new_client.id}")
    report_save_errors(app)


@client.command("list")
@click.pass_context
def client_list(ctx: click.Context) -> None:
    """List all clients."""
    app = get_app(ctx)
    ReportGenerator(console).clients_table(app.store)


# Projects


@cli.group()
def project() -> None:
    """Manage projects."""
    pass


@project.command("add")
@click.argument("name")
@click.option("-c", "--client", "client_id", type=int, help="Client ID")
@click.option("-r", "--rate", default="", help="Hourly rate (0-10000)")
@click.pass_context
def project_add(ctx: click.Context, name: str, client_id: Optional[int], rate: str) -> None:
    """Create a project for a client.

    Example:
        daybook project add "Website" --client 1700000000000 --rate 50
    """
    app = get_app(ctx)

    try:
        new_project = app.add_project(name, client_id, rate)
    except DaybookError as e:
        fail(e)
        return

    _, owner = app.project_with_client(new_project.id)
    console.print(f"[green]✓[/green] Added project: {new_project.name}")
    console.print(f"  ID: {new_project.id}")
    console.print(f"  Client: {owner.name if owner else 'Unknown'}")
    if new_project.has_rate:
        console.print(f"  Rate: ${new_project.rate}/hr")
    report_save_errors(app)


@project.command("list")
@click.pass_context
def project_list(ctx: click.Context) -> None:
    """List projects with total hours and earnings."""
    app = get_app(ctx)
    ReportGenerator(console).projects_table(app.store, app.active_project_id)


# Timer


@cli.command()
@click.argument("project_id", type=int)
@click.pass_context
def start(ctx: click.Context, project_id: int) -> None:
    """Start the timer for a project.

    A timer already running for another project is stopped first.

    Example:
        daybook start 1700000000000
    """
    app = get_app(ctx)

    try:
        finished = app.start_timer(project_id)
    except DaybookError as e:
        fail(e)
        return

    if finished:
        previous, previous_client = app.project_with_client(finished.project_id)
        label = f"{previous_client.name if previous_client else 'Unknown'} • {previous.name if previous else 'Unknown'}"
        console.print(f"[yellow]⏹[/yellow]  Stopped: {label} ({format_duration(finished.duration)})")

    timed, owner = app.project_with_client(project_id)
    console.print(
        f"[green]▶[/green]  Started timer: {owner.name if owner else 'Unknown'} • {timed.name if timed else 'Unknown'}"
    )
    report_save_errors(app)


def _finish(ctx: click.Context, paused: bool) -> None:
    app = get_app(ctx)
    project_id = app.active_project_id

    if project_id is None:
        console.print("[yellow]No timer running[/yellow]")
        return

    entry = app.pause_timer() if paused else app.stop_timer()
    timed, owner = app.project_with_client(project_id)
    label = f"{owner.name if owner else 'Unknown'} • {timed.name if timed else 'Unknown'}"
    verb = "Paused" if paused else "Stopped"

    console.print(f"[green]✓[/green] {verb} timer: {label}")
    if entry:
        console.print(f"  Duration: {format_duration(entry.duration)}")
    else:
        console.print("  No time recorded")
    report_save_errors(app)


@cli.command()
@click.pass_context
def pause(ctx: click.Context) -> None:
    """Pause the running timer and record a paused entry.

    Example:
        daybook pause
    """
    _finish(ctx, paused=True)


@cli.command()
@click.pass_context
def stop(ctx: click.Context) -> None:
    """Stop the running timer and record a completed entry.

    Example:
        daybook stop
    """
    _finish(ctx, paused=False)


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the running timer.

    Example:
        daybook status
    """
    app = get_app(ctx)

    if app.active_project_id is None:
        console.print("[yellow]No timer running[/yellow]")
        console.print("\nStart one with: [cyan]daybook start PROJECT_ID[/cyan]")
        return

    timed, owner = app.project_with_client(app.active_project_id)
    ReportGenerator(console).timer_panel(timed, owner, app.elapsed, app.timer_state)


@cli.command()
@click.option("--duration", type=int, help="Stop watching after this many seconds")
@click.pass_context
def watch(ctx: click.Context, duration: Optional[int]) -> None:
    """Watch the running timer tick. Press Ctrl+C to leave it running.

    Example:
        daybook watch
    """
    app = get_app(ctx)

    if app.active_project_id is None:
        console.print("[yellow]No timer running[/yellow]")
        return

    timed, owner = app.project_with_client(app.active_project_id)
    label = f"{owner.name if owner else 'Unknown'} • {timed.name if timed else 'Unknown'}"

    def render() -> Panel:
        return Panel(
            f"[bold]{format_duration(app.elapsed)}[/bold]\n\n{label}",
            title="Timer Running",
            border_style="green",
        )

    ticks = 0
    try:
        with Live(render(), console=console, refresh_per_second=4) as live:
            while duration is None or ticks < duration:
                time.sleep(1)
                app.tick()
                ticks += 1
                live.update(render())
    except KeyboardInterrupt:
        pass
    finally:
        # Leaving the foreground; the marker keeps the timer running.
        app.app_backgrounded()

    console.print(f"Timer still running at {format_duration(app.elapsed)}")
    report_save_errors(app)


# Entries


@cli.command()
@click.option("-n", "--count", type=int, help="Number of entries to show")
@click.pass_context
def log(ctx: click.Context, count: Optional[int]) -> None:
    """List recent time entries, most recent first.

    Example:
        daybook log
        daybook log -n 20
    """
    app = get_app(ctx)
    limit = count or load_config(ctx).get("display.recent_entries", 10)
    ReportGenerator(console).entries_table(app.store, limit)


@cli.command()
@click.option("-o", "--output-dir", type=click.Path(), help="Directory for the CSV file")
@click.option("--date-format", help="strftime format for the Date column")
@click.pass_context
def export(ctx: click.Context, output_dir: Optional[str], date_format: Optional[str]) -> None:
    """Export all time entries to CSV.

    The file is named daybook-export-YYYY-MM-DD.csv.

    Example:
        daybook export
        daybook export -o ~/Desktop --date-format %Y-%m-%d
    """
    app = get_app(ctx)
    if date_format:
        app.date_format = date_format

    try:
        path = app.export_to_csv(Path(output_dir) if output_dir else None)
    except ExportError as e:
        fail(e)
        return

    if path is None:
        console.print("[yellow]Export cancelled[/yellow]")
        return

    console.print(f"[green]✓[/green] Exported {len(app.store.entries)} entries")
    console.print(f"  File: {path}")


cli.add_command(config)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
