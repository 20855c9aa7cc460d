"""Targets that receive an exported file."""

import logging
import shutil
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)


class ShareCancelled(Exception):
    """The user dismissed the share step. Not an error."""


class ShareTarget(ABC):
    """Receives a finished export artifact."""

    @abstractmethod
    def share(self, path: Path, mime_type: str) -> Path:
        """Hand a file over to the target.

        Args:
            path: File to share
            mime_type: MIME type of the file

        Returns:
            Where the file ended up

        Raises:
            ShareCancelled: If the user cancelled
            OSError: If the file could not be delivered
        """
        pass


class LocalFileTarget(ShareTarget):
    """Leaves the artifact where it was written."""

    def share(self, path: Path, mime_type: str) -> Path:
        if not path.exists():
            raise FileNotFoundError(f"Export file not found: {path}")
        return path


class DirectoryShareTarget(ShareTarget):
    """Copies the artifact into a directory."""

    def __init__(self, directory: Path):
        """Initialize target.

        Args:
            directory: Destination directory, created on demand
        """
        self.directory = Path(directory)

    def share(self, path: Path, mime_type: str) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        destination = self.directory / path.name
        if destination.resolve() != path.resolve():
            shutil.copy2(path, destination)
        logger.info("Saved %s (%s) to %s", path.name, mime_type, destination)
        return destination
