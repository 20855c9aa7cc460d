"""Report rendering for Daybook data."""

from typing import Optional

from rich.console import Console  # type: ignore[import-not-found]
from rich.panel import Panel  # type: ignore[import-not-found]
from rich.table import Table  # type: ignore[import-not-found]
from rich.text import Text  # type: ignore[import-not-found]

from daybook.core.aggregation import (
    entry_earnings,
    entry_hours,
    format_duration,
    format_rate,
    summarize,
)
from daybook.core.models import Client, Project, TimeEntry
from daybook.core.store import DomainStore
from daybook.core.timer import TimerState


class ReportGenerator:
    """Render clients, projects and entries as rich tables."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize report generator.

        Args:
            console: Rich console for output. Creates default if None.
        """
        self.console = console or Console()

    def clients_table(self, store: DomainStore) -> None:
        """Display all clients with their project counts."""
        if not store.clients:
            self.console.print("[yellow]No clients yet[/yellow]")
            return

        table = Table(title="Clients")
        table.add_column("ID", style="dim")
        table.add_column("Name", style="bold")
        table.add_column("Projects", style="magenta", justify="right")
        table.add_column("Created", style="cyan")

        for client in store.clients:
            table.add_row(
                str(client.id),
                client.name,
                str(len(store.projects_for_client(client.id))),
                client.created_at.strftime("%Y-%m-%d"),
            )

        self.console.print(table)

    def projects_table(self, store: DomainStore, active_project_id: Optional[int] = None) -> None:
        """Display every project with its hour and earnings roll-up.

        Args:
            store: Data to display
            active_project_id: Project with a running timer, marked with ▶
        """
        if not store.projects:
            self.console.print("[yellow]No projects yet[/yellow]")
            self.console.print(
                "Add a client and create your first project to start tracking time"
            )
            return

        table = Table(title="Projects")
        table.add_column("ID", style="dim")
        table.add_column("Client", style="blue")
        table.add_column("Project", style="bold")
        table.add_column("Rate", style="green", justify="right")
        table.add_column("Hours", style="magenta", justify="right")
        table.add_column("Earnings", style="green", justify="right")

        for row in summarize(store.entries, store.projects, store.clients):
            name = row.project.name
            if row.project.id == active_project_id:
                name = f"▶ {name}"

            table.add_row(
                str(row.project.id),
                row.client.name if row.client else "Unknown Client",
                name,
                f"${format_rate(row.project.rate)}/hr" if row.project.has_rate else "-",
                f"{row.hours}h",
                f"${row.earnings}" if row.project.has_rate else "-",
            )

        self.console.print(table)

    def entries_table(self, store: DomainStore, limit: Optional[int] = 10) -> None:
        """Display the latest entries, most recent first."""
        entries = store.recent_entries(limit)
        if not entries:
            self.console.print("[yellow]No entries found[/yellow]")
            return

        table = Table(title=f"Recent Time Entries (showing {len(entries)})")
        table.add_column("Date", style="cyan")
        table.add_column("Client • Project", style="bold")
        table.add_column("Duration", style="magenta", justify="right")
        table.add_column("Hours", justify="right")
        table.add_column("Earnings", style="green", justify="right")
        table.add_column("Status")

        for entry in entries:
            project, client = store.project_with_client(entry.project_id)
            table.add_row(
                entry.date.strftime("%Y-%m-%d %H:%M"),
                self._label(project, client),
                format_duration(entry.duration),
                f"{entry_hours(entry)}h",
                f"${entry_earnings(entry, project)}" if project and project.has_rate else "",
                self._status(entry),
            )

        self.console.print(table)

    def timer_panel(
        self,
        project: Optional[Project],
        client: Optional[Client],
        elapsed: int,
        state: TimerState,
    ) -> None:
        """Display the active timer."""
        title = "Timer Running" if state is TimerState.RUNNING else "Timer Suspended"
        content = f"""[bold]{format_duration(elapsed)}[/bold]

{self._label(project, client)}"""
        border = "green" if state is TimerState.RUNNING else "yellow"
        self.console.print(Panel(content, title=title, border_style=border))

    def _label(self, project: Optional[Project], client: Optional[Client]) -> str:
        client_name = client.name if client else "Unknown"
        project_name = project.name if project else "Unknown"
        return f"{client_name} • {project_name}"

    def _status(self, entry: TimeEntry) -> Text:
        style = "green" if entry.status.value == "completed" else "yellow"
        return Text(entry.status.value, style=style)
