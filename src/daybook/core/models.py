"""Core data models for time tracking."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Union


def _rate_to_json(rate: Decimal) -> Union[int, float]:
    """Render a rate as a JSON number (int when integral)."""
    if rate == rate.to_integral_value():
        return int(rate)
    return float(rate)


def _rate_from_json(value: Any) -> Decimal:
    if value in (None, ""):
        return Decimal("0")
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Invalid rate: {value!r}") from e


class EntryStatus(Enum):
    """How a timing session was finalized."""

    PAUSED = "paused"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Client:
    """A billing entity that time is tracked against.

    Attributes:
        id: Creation timestamp in epoch milliseconds (unique)
        name: Display name, 1-50 characters
        created_at: Creation time
    """

    id: int
    name: str
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Client":
        """Create Client from dictionary (JSON deserialization)."""
        return cls(
            id=int(data["id"]),
            name=data["name"],
            created_at=datetime.fromisoformat(data["createdAt"]),
        )


@dataclass(frozen=True)
class Project:
    """A billable unit of work owned by a client.

    Attributes:
        id: Creation timestamp in epoch milliseconds (unique)
        name: Display name, 1-50 characters
        client_id: Owning client's id
        rate: Hourly rate, 0 when not billed
        created_at: Creation time
    """

    id: int
    name: str
    client_id: int
    rate: Decimal = Decimal("0")
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def has_rate(self) -> bool:
        return self.rate > 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "clientId": self.client_id,
            "rate": _rate_to_json(self.rate),
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Project":
        """Create Project from dictionary (JSON deserialization)."""
        return cls(
            id=int(data["id"]),
            name=data["name"],
            client_id=int(data["clientId"]),
            rate=_rate_from_json(data.get("rate")),
            created_at=datetime.fromisoformat(data["createdAt"]),
        )


@dataclass(frozen=True)
class TimeEntry:
    """An immutable record of seconds worked on a project.

    Attributes:
        id: Creation timestamp in epoch milliseconds (unique)
        project_id: Project the time was tracked against
        duration: Tracked seconds
        date: When the entry was created
        status: Whether the session was paused or completed
    """

    id: int
    project_id: int
    duration: int
    date: datetime
    status: EntryStatus = EntryStatus.COMPLETED

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "projectId": self.project_id,
            "duration": self.duration,
            "date": self.date.isoformat(),
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TimeEntry":
        """Create TimeEntry from dictionary (JSON deserialization)."""
        return cls(
            id=int(data["id"]),
            project_id=int(data["projectId"]),
            duration=int(data["duration"]),
            date=datetime.fromisoformat(data["date"]),
            status=EntryStatus(data.get("status", EntryStatus.COMPLETED.value)),
        )


@dataclass(frozen=True)
class ActiveTimerState:
    """Restoration marker for a running timer.

    Elapsed time after a restart is ``initial_elapsed`` plus the whole seconds
    since ``started_at``.

    Attributes:
        project_id: Project being timed
        started_at: Wall-clock time the marker was taken
        initial_elapsed: Seconds already accumulated at ``started_at``
    """

    project_id: int
    started_at: datetime
    initial_elapsed: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to the ``timerData`` blob."""
        return {
            "startTime": int(self.started_at.timestamp() * 1000),
            "initialElapsed": self.initial_elapsed,
        }

    @classmethod
    def from_dict(cls, project_id: int, data: dict[str, Any]) -> "ActiveTimerState":
        """Create marker from the ``activeTimer`` id and ``timerData`` blob."""
        return cls(
            project_id=int(project_id),
            started_at=datetime.fromtimestamp(int(data["startTime"]) / 1000),
            initial_elapsed=int(data.get("initialElapsed", 0)),
        )
