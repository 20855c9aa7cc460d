"""Key-value blob storage with atomic per-key writes."""

import json
import logging
import os
import shutil
import sys
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from daybook.core.exceptions import LoadError, SaveError
from daybook.core.models import ActiveTimerState, Client, Project, TimeEntry

logger = logging.getLogger(__name__)

CLIENTS_KEY = "clients"
PROJECTS_KEY = "projects"
ENTRIES_KEY = "timeEntries"
ACTIVE_TIMER_KEY = "activeTimer"
TIMER_DATA_KEY = "timerData"

ALL_KEYS = [CLIENTS_KEY, PROJECTS_KEY, ENTRIES_KEY, ACTIVE_TIMER_KEY, TIMER_DATA_KEY]


def _lock_file(file_obj: Any, exclusive: bool = True) -> None:
    """Lock a file in a cross-platform way.

    Args:
        file_obj: File object to lock
        exclusive: If True, acquire exclusive lock; if False, acquire shared lock
    """
    if sys.platform == "win32":
        import msvcrt  # type: ignore[import-not-found]

        mode = msvcrt.LK_NBLCK if exclusive else msvcrt.LK_NBRLCK
        msvcrt.locking(file_obj.fileno(), mode, 1)
    else:
        import fcntl  # type: ignore[import-not-found]

        mode = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        fcntl.flock(file_obj.fileno(), mode)


def _unlock_file(file_obj: Any) -> None:
    """Unlock a file in a cross-platform way.

    Args:
        file_obj: File object to unlock
    """
    if sys.platform == "win32":
        import msvcrt  # type: ignore[import-not-found]

        msvcrt.locking(file_obj.fileno(), msvcrt.LK_UNLCK, 1)
    else:
        import fcntl  # type: ignore[import-not-found]

        fcntl.flock(file_obj.fileno(), fcntl.LOCK_UN)


@dataclass
class Snapshot:
    """Everything read back from storage on launch."""

    clients: list[Client] = field(default_factory=list)
    projects: list[Project] = field(default_factory=list)
    entries: list[TimeEntry] = field(default_factory=list)
    active_timer: Optional[ActiveTimerState] = None


class StorageManager:
    """Stores whole collections as JSON blobs, one file per key.

    There is no transaction across keys: each key is written atomically and
    the last write wins.
    """

    def __init__(self, data_dir: Optional[Path] = None):
        """Initialize storage manager.

        Args:
            data_dir: Custom data directory. Defaults to ~/.daybook/data
        """
        if data_dir is None:
            data_dir = Path.home() / ".daybook" / "data"

        self.data_dir = Path(data_dir)
        self.backup_dir = self.data_dir.parent / "backups"

        self.data_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        """Get the file backing a storage key."""
        return self.data_dir / f"{key}.json"

    # Key-value primitives

    def get_item(self, key: str) -> Optional[str]:
        """Read the raw blob stored under a key.

        Args:
            key: Storage key

        Returns:
            Stored text or None if the key has never been written
        """
        file_path = self.path_for(key)
        if not file_path.exists():
            return None

        with open(file_path, encoding="utf-8") as f:
            _lock_file(f, exclusive=False)
            try:
                return f.read()
            finally:
                _unlock_file(f)

    def set_item(self, key: str, value: str) -> None:
        """Write a blob atomically using a temporary file and rename.

        Args:
            key: Storage key
            value: Text to store
        """
        file_path = self.path_for(key)
        temp_file = file_path.with_suffix(".tmp")

        try:
            with open(temp_file, "w", encoding="utf-8") as f:
                _lock_file(f, exclusive=True)

                f.write(value)
                f.flush()
                os.fsync(f.fileno())

                _unlock_file(f)

            temp_file.replace(file_path)

        except Exception:
            if temp_file.exists():
                temp_file.unlink()
            raise

    def remove_item(self, key: str) -> None:
        """Delete the blob stored under a key, if any."""
        self.path_for(key).unlink(missing_ok=True)

    def _read_json(self, key: str) -> Any:
        raw = self.get_item(key)
        if raw is None:
            return None
        return json.loads(raw)

    def _write_json(self, key: str, value: Any) -> None:
        try:
            self.set_item(key, json.dumps(value, ensure_ascii=False))
        except (OSError, TypeError, ValueError) as e:
            raise SaveError(f"Failed to write '{key}': {e}", key=key) from e

    # Collections

    def load(self) -> Snapshot:
        """Load all collections and the active timer marker.

        Returns:
            Snapshot with empty collections for keys never written

        Raises:
            LoadError: If a collection blob cannot be read or parsed. A
                malformed timer marker is dropped with a warning instead.
        """
        snapshot = Snapshot()
        try:
            clients = self._read_json(CLIENTS_KEY)
            projects = self._read_json(PROJECTS_KEY)
            entries = self._read_json(ENTRIES_KEY)

            if clients:
                snapshot.clients = [Client.from_dict(c) for c in clients]
            if projects:
                snapshot.projects = [Project.from_dict(p) for p in projects]
            if entries:
                snapshot.entries = [TimeEntry.from_dict(e) for e in entries]
        except (OSError, ValueError, KeyError, TypeError, OverflowError) as e:
            raise LoadError(f"Error loading data: {e}") from e

        # A bad marker only loses the running timer, never the collections.
        try:
            snapshot.active_timer = self.load_active_timer()
        except LoadError as e:
            logger.warning("Discarding active timer: %s", e)

        logger.debug(
            "Loaded %d clients, %d projects, %d entries",
            len(snapshot.clients),
            len(snapshot.projects),
            len(snapshot.entries),
        )
        return snapshot

    def save(
        self,
        clients: list[Client],
        projects: list[Project],
        entries: list[TimeEntry],
    ) -> None:
        """Write the three collections, each under its own key.

        Args:
            clients: All clients
            projects: All projects
            entries: All time entries, oldest first

        Raises:
            SaveError: If a write fails. Keys written before the failure keep
                their new contents.
        """
        self._write_json(CLIENTS_KEY, [c.to_dict() for c in clients])
        self._write_json(PROJECTS_KEY, [p.to_dict() for p in projects])
        self._write_json(ENTRIES_KEY, [e.to_dict() for e in entries])

    # Active timer marker

    def persist_active_timer(self, marker: Optional[ActiveTimerState]) -> None:
        """Write or clear the active timer marker.

        Args:
            marker: Marker to store, or None to clear both marker keys

        Raises:
            SaveError: If the marker cannot be written or removed
        """
        if marker is None:
            try:
                self.remove_item(ACTIVE_TIMER_KEY)
                self.remove_item(TIMER_DATA_KEY)
            except OSError as e:
                raise SaveError(f"Failed to clear active timer: {e}", key=ACTIVE_TIMER_KEY) from e
            return

        self._write_json(ACTIVE_TIMER_KEY, marker.project_id)
        self._write_json(TIMER_DATA_KEY, marker.to_dict())

    def load_active_timer(self) -> Optional[ActiveTimerState]:
        """Read the active timer marker.

        Returns:
            Marker or None when no timer was running

        Raises:
            LoadError: If the marker is present but malformed
        """
        try:
            project_id = self._read_json(ACTIVE_TIMER_KEY)
            if project_id is None:
                return None

            timer_data = self._read_json(TIMER_DATA_KEY)
            if not timer_data:
                raise LoadError("Active timer marker has no timer data")

            return ActiveTimerState.from_dict(project_id, timer_data)
        except LoadError:
            raise
        except (OSError, ValueError, KeyError, TypeError, OverflowError) as e:
            raise LoadError(f"Error loading active timer: {e}") from e

    def backup(self, label: Optional[str] = None) -> Path:
        """Create backup of all data files.

        Args:
            label: Optional label for backup. Defaults to timestamp

        Returns:
            Path to backup directory
        """
        if label is None:
            label = datetime.now().strftime("%Y%m%d_%H%M%S")

        backup_path = self.backup_dir / label
        backup_path.mkdir(parents=True, exist_ok=True)

        for key in ALL_KEYS:
            file_path = self.path_for(key)
            if file_path.exists():
                shutil.copy2(file_path, backup_path / file_path.name)

        return backup_path
