"""CSV export functionality."""

import csv
import io
from datetime import date
from typing import Any, Optional

from daybook.core.aggregation import entry_earnings, entry_hours, format_rate
from daybook.core.models import Client, Project, TimeEntry
from daybook.export_import.base import Exporter

HEADER = ["Date", "Client", "Project", "Duration (hours)", "Rate", "Total", "Status"]
UNKNOWN = "Unknown"
MIME_TYPE = "text/csv"
DEFAULT_DATE_FORMAT = "%x"


def export_filename(today: date) -> str:
    """Name of the export artifact for a given day."""
    return f"daybook-export-{today.isoformat()}.csv"


def build_csv(
    entries: list[TimeEntry],
    projects: list[Project],
    clients: list[Client],
    date_format: str = DEFAULT_DATE_FORMAT,
) -> str:
    """Render entries as CSV text.

    Rows keep the order of ``entries`` (chronological). References that do
    not resolve are written as "Unknown".

    Args:
        entries: Entries to export, oldest first
        projects: Projects for name and rate lookup
        clients: Clients for name lookup
        date_format: strftime format for the Date column

    Returns:
        CSV document with a header row
    """
    projects_by_id = {p.id: p for p in projects}
    clients_by_id = {c.id: c for c in clients}

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(HEADER)

    for entry in entries:
        project: Optional[Project] = projects_by_id.get(entry.project_id)
        client = clients_by_id.get(project.client_id) if project else None

        writer.writerow(
            [
                entry.date.strftime(date_format),
                client.name if client else UNKNOWN,
                project.name if project else UNKNOWN,
                entry_hours(entry),
                format_rate(project.rate) if project else "0",
                entry_earnings(entry, project),
                entry.status.value,
            ]
        )

    return buffer.getvalue()


class CSVExporter(Exporter):
    """Export time entries to a CSV file."""

    def get_file_extension(self) -> str:
        """Get CSV file extension.

        Returns:
            '.csv'
        """
        return ".csv"

    def export_entries(self, entries: list[TimeEntry], **kwargs: Any) -> None:
        """Export entries to CSV file.

        Args:
            entries: List of entries to export, oldest first
            **kwargs: Additional options
                - projects (list[Project]): Projects for name lookup
                - clients (list[Client]): Clients for name lookup
                - date_format (str): strftime format for dates (default: '%x')
        """
        self.ensure_output_path()

        content = build_csv(
            entries,
            kwargs.get("projects", []),
            kwargs.get("clients", []),
            kwargs.get("date_format", DEFAULT_DATE_FORMAT),
        )

        with open(self.output_path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
