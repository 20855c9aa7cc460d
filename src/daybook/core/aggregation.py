"""Hour and earnings roll-ups computed from time entries.

Everything here is recomputed from the entry collection on every call.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from daybook.core.models import Client, Project, TimeEntry

SECONDS_PER_HOUR = Decimal(3600)


def _fixed(value: Decimal, places: int) -> str:
    """Render a decimal with a fixed number of places, rounding half up."""
    exponent = Decimal(1).scaleb(-places)
    return str(value.quantize(exponent, rounding=ROUND_HALF_UP))


def format_rate(rate: Decimal) -> str:
    """Render a rate without trailing zeros (50 -> '50', 12.50 -> '12.5')."""
    if rate == rate.to_integral_value():
        return str(int(rate))
    return format(rate.normalize(), "f")


def format_duration(seconds: int) -> str:
    """Format seconds as HH:MM:SS."""
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def hours_from_seconds(seconds: int) -> Decimal:
    return Decimal(seconds) / SECONDS_PER_HOUR


def total_seconds(entries: Iterable[TimeEntry], project_id: int) -> int:
    """Sum the durations of all entries for a project."""
    return sum(e.duration for e in entries if e.project_id == project_id)


def total_hours(entries: Iterable[TimeEntry], project_id: int) -> str:
    """Total hours for a project, one decimal place."""
    return _fixed(hours_from_seconds(total_seconds(entries, project_id)), 1)


def total_earnings(entries: Iterable[TimeEntry], project: Optional[Project]) -> str:
    """Total earnings for a project, two decimal places.

    Uses unrounded hours. Returns "0.00" when the project is missing or has
    no rate.
    """
    if project is None or not project.has_rate:
        return _fixed(Decimal(0), 2)
    hours = hours_from_seconds(total_seconds(entries, project.id))
    return _fixed(hours * project.rate, 2)


def entry_hours(entry: TimeEntry) -> str:
    """Hours for a single entry, two decimal places."""
    return _fixed(hours_from_seconds(entry.duration), 2)


def entry_earnings(entry: TimeEntry, project: Optional[Project]) -> str:
    """Earnings for a single entry from its rounded hours.

    Rounded hours are multiplied by the rate so that the figure matches the
    hours shown next to it.
    """
    rate = project.rate if project is not None else Decimal(0)
    return _fixed(Decimal(entry_hours(entry)) * rate, 2)


@dataclass
class ProjectTotals:
    """Roll-up row for one project."""

    project: Project
    client: Optional[Client]
    seconds: int
    hours: str
    earnings: str
    entry_count: int


def summarize(
    entries: list[TimeEntry],
    projects: list[Project],
    clients: list[Client],
) -> list[ProjectTotals]:
    """Build one roll-up row per project, in project creation order."""
    clients_by_id = {c.id: c for c in clients}
    rows = []
    for project in projects:
        project_entries = [e for e in entries if e.project_id == project.id]
        rows.append(
            ProjectTotals(
                project=project,
                client=clients_by_id.get(project.client_id),
                seconds=total_seconds(project_entries, project.id),
                hours=total_hours(project_entries, project.id),
                earnings=total_earnings(project_entries, project),
                entry_count=len(project_entries),
            )
        )
    return rows
