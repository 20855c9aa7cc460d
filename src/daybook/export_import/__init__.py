"""Export functionality for Daybook."""

from daybook.export_import.base import Exporter
from daybook.export_import.csv_format import CSVExporter, build_csv, export_filename
from daybook.export_import.share import (
    DirectoryShareTarget,
    LocalFileTarget,
    ShareCancelled,
    ShareTarget,
)

__all__ = [
    "Exporter",
    "CSVExporter",
    "build_csv",
    "export_filename",
    "ShareTarget",
    "ShareCancelled",
    "LocalFileTarget",
    "DirectoryShareTarget",
]
