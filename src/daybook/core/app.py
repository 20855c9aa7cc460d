"""Application controller: the single owner of Daybook state."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from daybook.automation.notifier import Notifier
from daybook.core import aggregation
from daybook.core.exceptions import DaybookError, ExportError, LoadError, SaveError, ValidationError
from daybook.core.models import Client, Project, TimeEntry
from daybook.core.storage import StorageManager
from daybook.core.store import DomainStore
from daybook.core.timer import TimerEngine, TimerState
from daybook.export_import.csv_format import (
    DEFAULT_DATE_FORMAT,
    MIME_TYPE,
    CSVExporter,
    export_filename,
)
from daybook.export_import.share import LocalFileTarget, ShareCancelled, ShareTarget

logger = logging.getLogger(__name__)

ChangeListener = Callable[["DaybookApp"], None]


class DaybookApp:
    """Holds clients, projects, entries and the timer.

    State changes only through the methods below. After every change to a
    collection the registered listeners are called; when a storage manager is
    given, saving is one of them.
    """

    def __init__(
        self,
        storage: Optional[StorageManager] = None,
        clock: Callable[[], datetime] = datetime.now,
        notifier: Optional[Notifier] = None,
        share_target: Optional[ShareTarget] = None,
        export_dir: Optional[Path] = None,
        date_format: str = DEFAULT_DATE_FORMAT,
    ):
        """Initialize the controller.

        Args:
            storage: Storage manager. State is kept in memory only if None.
            clock: Time source
            notifier: Receives timer and export messages
            share_target: Receives exported files. Defaults to leaving them
                in ``export_dir``.
            export_dir: Where CSV files are written. Defaults to an
                ``exports`` directory next to the data directory.
            date_format: strftime format for exported dates
        """
        self.storage = storage
        self.clock = clock
        self.notifier = notifier or Notifier(enabled=False)
        self.share_target = share_target or LocalFileTarget()
        self.date_format = date_format

        if export_dir is None:
            base = storage.data_dir.parent if storage else Path.cwd()
            export_dir = base / "exports"
        self.export_dir = Path(export_dir)

        self.store = DomainStore(clock=clock)
        self.timer = TimerEngine(clock=clock, id_factory=lambda: self.store.next_id())

        self.last_error: Optional[DaybookError] = None
        self.export_in_progress = False
        self._listeners: list[ChangeListener] = []

        if storage is not None:
            self.subscribe(DaybookApp._save)

    # Observers

    def subscribe(self, listener: ChangeListener) -> None:
        """Call ``listener`` after every change to a collection."""
        self._listeners.append(listener)

    def _changed(self) -> None:
        for listener in self._listeners:
            listener(self)

    def _save(self) -> None:
        if self.storage is None:
            return
        try:
            self.storage.save(self.store.clients, self.store.projects, self.store.entries)
        except SaveError as e:
            logger.error("Error saving data: %s", e)
            self.last_error = e

    def _persist_timer(self) -> None:
        if self.storage is None:
            return
        try:
            self.storage.persist_active_timer(self.timer.snapshot())
        except SaveError as e:
            logger.error("Error saving active timer: %s", e)
            self.last_error = e

    # Lifecycle

    def load(self) -> Optional[LoadError]:
        """Load stored data and resume a timer left running.

        Returns:
            The load error, if any. State stays empty in that case.
        """
        if self.storage is None:
            return None

        try:
            snapshot = self.storage.load()
        except LoadError as e:
            logger.warning("Error loading data: %s", e)
            self.last_error = e
            self._backup_unreadable()
            return e

        self.store = DomainStore(
            snapshot.clients, snapshot.projects, snapshot.entries, clock=self.clock
        )

        marker = snapshot.active_timer
        if marker is not None:
            if self.store.get_project(marker.project_id) is None:
                logger.warning("Discarding timer for unknown project %s", marker.project_id)
                self._persist_timer()
            else:
                self.timer.restore(marker)
        return None

    def _backup_unreadable(self) -> None:
        """Copy the stored blobs aside before the next save replaces them."""
        if self.storage is None:
            return
        label = self.clock().strftime("unreadable_%Y%m%d_%H%M%S")
        try:
            backup_path = self.storage.backup(label)
        except OSError as e:
            logger.error("Error backing up unreadable data: %s", e)
            return
        logger.warning("Unreadable data copied to %s", backup_path)

    def app_backgrounded(self) -> None:
        """The host app left the foreground."""
        self.timer.enter_background()
        self._persist_timer()

    def app_foregrounded(self) -> int:
        """The host app returned to the foreground.

        Returns:
            Seconds added for the time spent in the background
        """
        added = self.timer.enter_foreground()
        self._persist_timer()
        return added

    def tick(self) -> bool:
        """Once-per-second signal from the host while in the foreground."""
        return self.timer.tick()

    # Collections

    def add_client(self, name: str) -> Client:
        """Register a client. See ``DomainStore.add_client``."""
        client = self.store.add_client(name)
        logger.info("Added client %s (%s)", client.name, client.id)
        self._changed()
        return client

    def add_project(self, name: str, client_id: Optional[int], rate_text: Optional[str] = "") -> Project:
        """Create a project. See ``DomainStore.add_project``."""
        project = self.store.add_project(name, client_id, rate_text)
        logger.info("Added project %s (%s)", project.name, project.id)
        self._changed()
        return project

    def _record(self, entry: Optional[TimeEntry]) -> None:
        if entry is None:
            return
        self.store.append_entry(entry)
        self._changed()

    # Timer

    @property
    def timer_state(self) -> TimerState:
        return self.timer.state

    @property
    def elapsed(self) -> int:
        return self.timer.elapsed

    @property
    def active_project_id(self) -> Optional[int]:
        return self.timer.active_project_id

    def start_timer(self, project_id: int) -> Optional[TimeEntry]:
        """Start timing a project, stopping any other active timer first.

        Returns:
            Completed entry for the previously active timer, if any

        Raises:
            ValidationError: If the project does not exist
        """
        if self.store.get_project(project_id) is None:
            raise ValidationError(f"Project not found: {project_id}")

        previous = self.timer.active_project_id
        finished = self.timer.start(project_id)
        self._record(finished)
        if previous is not None:
            project, client = self.store.project_with_client(previous)
            self.notifier.notify_timer_stopped(project, client, finished.duration if finished else 0)

        self._persist_timer()
        return finished

    def pause_timer(self) -> Optional[TimeEntry]:
        """Pause the active timer, recording a paused entry.

        Returns:
            Paused entry, or None if nothing was running or no time accrued
        """
        return self._finish_timer(paused=True)

    def stop_timer(self) -> Optional[TimeEntry]:
        """Stop the active timer, recording a completed entry.

        Returns:
            Completed entry, or None if nothing was running or no time accrued
        """
        return self._finish_timer(paused=False)

    def _finish_timer(self, paused: bool) -> Optional[TimeEntry]:
        project_id = self.timer.active_project_id
        if project_id is None:
            return None

        entry = self.timer.pause() if paused else self.timer.stop()
        self._record(entry)

        project, client = self.store.project_with_client(project_id)
        duration = entry.duration if entry else 0
        if paused:
            self.notifier.notify_timer_paused(project, client, duration)
        else:
            self.notifier.notify_timer_stopped(project, client, duration)

        self._persist_timer()
        return entry

    # Queries

    def total_hours(self, project_id: int) -> str:
        return aggregation.total_hours(self.store.entries, project_id)

    def total_earnings(self, project_id: int) -> str:
        return aggregation.total_earnings(self.store.entries, self.store.get_project(project_id))

    def project_with_client(
        self, project_id: Optional[int]
    ) -> tuple[Optional[Project], Optional[Client]]:
        return self.store.project_with_client(project_id)

    def recent_entries(self, limit: Optional[int] = 10) -> list[TimeEntry]:
        return self.store.recent_entries(limit)

    # Export

    @property
    def can_export(self) -> bool:
        """Whether an export may be started right now."""
        return bool(self.store.entries) and not self.export_in_progress

    def export_to_csv(self, output_dir: Optional[Path] = None) -> Optional[Path]:
        """Write all entries to a CSV file and hand it to the share target.

        Args:
            output_dir: Directory for the CSV file. Defaults to ``export_dir``.

        Returns:
            Location reported by the share target, or None if the user
            cancelled sharing

        Raises:
            ExportError: If there is nothing to export, another export is
                running, or the file could not be written or shared
        """
        if self.export_in_progress:
            raise ExportError("An export is already in progress")
        if not self.store.entries:
            raise ExportError("No time entries to export")

        self.export_in_progress = True
        try:
            directory = Path(output_dir) if output_dir else self.export_dir
            path = directory / export_filename(self.clock().date())
            exporter = CSVExporter(path)

            try:
                exporter.export_entries(
                    self.store.entries,
                    projects=self.store.projects,
                    clients=self.store.clients,
                    date_format=self.date_format,
                )
                shared = self.share_target.share(path, MIME_TYPE)
            except ShareCancelled:
                logger.info("Export share cancelled")
                return None
            except (OSError, ValueError) as e:
                logger.error("Export failed: %s", e)
                raise ExportError(f"Failed to export CSV: {e}") from e

            logger.info("Exported %d entries to %s", len(self.store.entries), shared)
            self.notifier.notify_export(str(shared), len(self.store.entries))
            return shared
        finally:
            self.export_in_progress = False
