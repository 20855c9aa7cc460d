"""Base class for export functionality."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from daybook.core.models import TimeEntry


class Exporter(ABC):
    """Base class for all exporters."""

    def __init__(self, output_path: Path):
        """Initialize exporter.

        Args:
            output_path: Path where exported data will be written
        """
        self.output_path = Path(output_path)

    @abstractmethod
    def export_entries(self, entries: list[TimeEntry], **kwargs: Any) -> None:
        """Export entries to the output format.

        Args:
            entries: List of entries to export, oldest first
            **kwargs: Format-specific options
        """
        pass

    @abstractmethod
    def get_file_extension(self) -> str:
        """Get the file extension for this format (e.g., '.csv').

        Returns:
            File extension including the dot
        """
        pass

    def ensure_output_path(self) -> None:
        """Ensure the output path's parent directory exists."""
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
