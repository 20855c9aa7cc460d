"""Timer state machine with wall-clock reconciliation.

While the app is in the foreground, elapsed time advances only through
``tick()``, fired once per second by the host. While it is in the
background ticking is halted, and the whole time spent away is added back in
one lump when the app returns to the foreground. After a process restart the
elapsed time is rebuilt from a persisted ``ActiveTimerState`` marker.

All times come from an injectable ``clock`` so that the engine can be driven
without a real clock.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from daybook.core.models import ActiveTimerState, EntryStatus, TimeEntry

logger = logging.getLogger(__name__)


def whole_seconds_between(start: datetime, end: datetime) -> int:
    """Whole seconds from ``start`` to ``end``, never negative."""
    return max(0, int((end - start).total_seconds()))


class TimerState(Enum):
    """States of the timer engine."""

    IDLE = "idle"
    RUNNING = "running"
    SUSPENDED = "suspended"


class TimerEngine:
    """Tracks at most one active timer and its elapsed seconds."""

    def __init__(
        self,
        clock: Callable[[], datetime] = datetime.now,
        id_factory: Optional[Callable[[], int]] = None,
    ):
        """Initialize timer engine.

        Args:
            clock: Time source
            id_factory: Produces ids for emitted entries. Defaults to the
                clock's epoch milliseconds.
        """
        self.clock = clock
        self.id_factory = id_factory or (lambda: int(self.clock().timestamp() * 1000))

        self._state = TimerState.IDLE
        self._project_id: Optional[int] = None
        self._elapsed = 0
        self._started_at: Optional[datetime] = None
        self._background_entered_at: Optional[datetime] = None

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def active_project_id(self) -> Optional[int]:
        return self._project_id

    @property
    def elapsed(self) -> int:
        return self._elapsed

    @property
    def started_at(self) -> Optional[datetime]:
        return self._started_at

    @property
    def is_active(self) -> bool:
        return self._project_id is not None

    def start(self, project_id: int) -> Optional[TimeEntry]:
        """Start timing a project.

        An already active timer is stopped first.

        Args:
            project_id: Project to time

        Returns:
            Completed entry for the previous timer, if it accrued any time
        """
        finished = self.stop() if self.is_active else None

        self._project_id = project_id
        self._elapsed = 0
        self._started_at = self.clock()
        self._background_entered_at = None
        self._state = TimerState.RUNNING

        logger.info("Timer started for project %s", project_id)
        return finished

    def tick(self) -> bool:
        """Advance elapsed time by one second.

        Returns:
            True if the timer advanced, False when idle or suspended
        """
        if self._state is not TimerState.RUNNING:
            return False
        self._elapsed += 1
        return True

    def enter_background(self) -> None:
        """Halt ticking and remember when the app left the foreground."""
        if self._state is not TimerState.RUNNING:
            return
        self._background_entered_at = self.clock()
        self._state = TimerState.SUSPENDED
        logger.debug("Timer suspended at %s elapsed", self._elapsed)

    def enter_foreground(self) -> int:
        """Add the time spent in the background and resume ticking.

        Returns:
            Seconds added to elapsed time
        """
        if self._state is not TimerState.SUSPENDED or self._background_entered_at is None:
            return 0

        delta = whole_seconds_between(self._background_entered_at, self.clock())
        self._elapsed += delta
        self._background_entered_at = None
        self._state = TimerState.RUNNING

        logger.debug("Timer resumed, added %d background seconds", delta)
        return delta

    def pause(self) -> Optional[TimeEntry]:
        """Finalize the active timer as a paused entry.

        Returns:
            Paused entry, or None if no time was tracked
        """
        return self._finish(EntryStatus.PAUSED)

    def stop(self) -> Optional[TimeEntry]:
        """Finalize the active timer as a completed entry.

        Returns:
            Completed entry, or None if no time was tracked
        """
        return self._finish(EntryStatus.COMPLETED)

    def _finish(self, status: EntryStatus) -> Optional[TimeEntry]:
        # Time spent in the background counts towards the session.
        self.enter_foreground()

        entry = None
        if self._project_id is not None and self._elapsed > 0:
            entry = TimeEntry(
                id=self.id_factory(),
                project_id=self._project_id,
                duration=self._elapsed,
                date=self.clock(),
                status=status,
            )
            logger.info(
                "Timer %s for project %s after %ds",
                status.value,
                self._project_id,
                self._elapsed,
            )

        self._project_id = None
        self._elapsed = 0
        self._started_at = None
        self._background_entered_at = None
        self._state = TimerState.IDLE
        return entry

    def snapshot(self) -> Optional[ActiveTimerState]:
        """Build the restoration marker for the current state.

        Returns:
            Marker, or None when no timer is active
        """
        if self._project_id is None:
            return None

        if self._state is TimerState.SUSPENDED and self._background_entered_at is not None:
            return ActiveTimerState(self._project_id, self._background_entered_at, self._elapsed)
        return ActiveTimerState(self._project_id, self.clock(), self._elapsed)

    def restore(self, marker: ActiveTimerState) -> None:
        """Resume a timer recorded before the process exited.

        Args:
            marker: Marker written by a previous process
        """
        now = self.clock()
        self._project_id = marker.project_id
        self._elapsed = marker.initial_elapsed + whole_seconds_between(marker.started_at, now)
        self._started_at = marker.started_at
        self._background_entered_at = None
        self._state = TimerState.RUNNING

        logger.info(
            "Restored timer for project %s at %ds elapsed",
            marker.project_id,
            self._elapsed,
        )
