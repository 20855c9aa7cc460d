"""In-memory collections of clients, projects and time entries."""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional

from daybook.core.exceptions import DuplicateError, ValidationError
from daybook.core.models import Client, Project, TimeEntry

MAX_NAME_LENGTH = 50
MAX_RATE = Decimal("10000")


def validate_name(name: Optional[str], kind: str = "Name") -> str:
    """Trim a name and check its length.

    Args:
        name: Raw user input
        kind: Label used in the error message

    Returns:
        Trimmed name

    Raises:
        ValidationError: If the trimmed name is empty or too long
    """
    trimmed = (name or "").strip()
    if not trimmed:
        raise ValidationError(f"{kind} is required")
    if len(trimmed) > MAX_NAME_LENGTH:
        raise ValidationError(f"{kind} must be at most {MAX_NAME_LENGTH} characters")
    return trimmed


def parse_rate(rate_text: Optional[str]) -> Decimal:
    """Parse an hourly rate, defaulting to 0 when left blank.

    Raises:
        ValidationError: If the text is not a number in [0, 10000]
    """
    text = (rate_text or "").strip()
    if not text:
        return Decimal("0")

    # Decimal also accepts digit-group underscores such as "1_000".
    if "_" in text:
        raise ValidationError(f"Rate must be a number: {text!r}")

    try:
        rate = Decimal(text)
    except InvalidOperation:
        raise ValidationError(f"Rate must be a number: {text!r}")

    if not rate.is_finite():
        raise ValidationError(f"Rate must be a number: {text!r}")
    if rate < 0 or rate > MAX_RATE:
        raise ValidationError(f"Rate must be between 0 and {MAX_RATE}")
    return rate


class DomainStore:
    """Owns the client, project and entry collections.

    Collections only grow. Every failed operation leaves them untouched.
    """

    def __init__(
        self,
        clients: Optional[list[Client]] = None,
        projects: Optional[list[Project]] = None,
        entries: Optional[list[TimeEntry]] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.clients: list[Client] = list(clients or [])
        self.projects: list[Project] = list(projects or [])
        self.entries: list[TimeEntry] = list(entries or [])
        self.clock = clock

        existing = [x.id for x in (*self.clients, *self.projects, *self.entries)]
        self._last_id = max(existing, default=0)

    def next_id(self) -> int:
        """Return a fresh id based on the current time in milliseconds.

        Ids are strictly increasing even when several are taken within the
        same millisecond.
        """
        candidate = int(self.clock().timestamp() * 1000)
        if candidate <= self._last_id:
            candidate = self._last_id + 1
        self._last_id = candidate
        return candidate

    # Clients

    def add_client(self, name: str) -> Client:
        """Register a new client.

        Args:
            name: Client name, 1-50 characters after trimming

        Returns:
            Created client

        Raises:
            ValidationError: If the name is empty or too long
            DuplicateError: If a client with the same name exists (any case)
        """
        trimmed = validate_name(name, "Client name")

        key = trimmed.casefold()
        if any(c.name.casefold() == key for c in self.clients):
            raise DuplicateError(f"Client already exists: {trimmed}")

        client = Client(id=self.next_id(), name=trimmed, created_at=self.clock())
        self.clients.append(client)
        return client

    def get_client(self, client_id: Optional[int]) -> Optional[Client]:
        for client in self.clients:
            if client.id == client_id:
                return client
        return None

    # Projects

    def add_project(
        self,
        name: str,
        client_id: Optional[int],
        rate_text: Optional[str] = "",
    ) -> Project:
        """Create a project under an existing client.

        Args:
            name: Project name, 1-50 characters after trimming
            client_id: Owning client's id
            rate_text: Hourly rate as typed; blank means 0

        Returns:
            Created project

        Raises:
            ValidationError: If the name, client or rate is invalid
            DuplicateError: If the client already has a project with this name
        """
        trimmed = validate_name(name, "Project name")

        if client_id in (None, ""):
            raise ValidationError("A client must be selected")
        if self.get_client(client_id) is None:
            raise ValidationError(f"Client not found: {client_id}")

        rate = parse_rate(rate_text)

        key = trimmed.casefold()
        for project in self.projects:
            if project.client_id == client_id and project.name.casefold() == key:
                raise DuplicateError(f"Project already exists for this client: {trimmed}")

        project = Project(
            id=self.next_id(),
            name=trimmed,
            client_id=client_id,  # type: ignore[arg-type]
            rate=rate,
            created_at=self.clock(),
        )
        self.projects.append(project)
        return project

    def get_project(self, project_id: Optional[int]) -> Optional[Project]:
        for project in self.projects:
            if project.id == project_id:
                return project
        return None

    def projects_for_client(self, client_id: int) -> list[Project]:
        return [p for p in self.projects if p.client_id == client_id]

    def project_with_client(
        self, project_id: Optional[int]
    ) -> tuple[Optional[Project], Optional[Client]]:
        """Resolve a project and its owning client.

        Either side is None when the reference does not resolve.
        """
        project = self.get_project(project_id)
        client = self.get_client(project.client_id) if project else None
        return project, client

    # Entries

    def append_entry(self, entry: TimeEntry) -> TimeEntry:
        """Append a finalized time entry.

        Raises:
            ValidationError: If the duration is negative
        """
        if entry.duration < 0:
            raise ValidationError("Duration cannot be negative")
        self.entries.append(entry)
        return entry

    def recent_entries(self, limit: Optional[int] = 10) -> list[TimeEntry]:
        """Get the latest entries, most recent first.

        Args:
            limit: Maximum number of entries, or None for all
        """
        entries = self.entries[-limit:] if limit else list(self.entries)
        return list(reversed(entries))
