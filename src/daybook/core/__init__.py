"""Core functionality for time tracking."""

from daybook.core.models import ActiveTimerState, Client, EntryStatus, Project, TimeEntry
from daybook.core.store import DomainStore
from daybook.core.timer import TimerEngine, TimerState

__all__ = [
    "Client",
    "Project",
    "TimeEntry",
    "EntryStatus",
    "ActiveTimerState",
    "DomainStore",
    "TimerEngine",
    "TimerState",
]
