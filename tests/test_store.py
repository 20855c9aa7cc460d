"""Tests for the domain store."""

from datetime import datetime
from decimal import Decimal

import pytest  # type: ignore[import-not-found]

from daybook.core.exceptions import DuplicateError, ValidationError
from daybook.core.models import TimeEntry
from daybook.core.store import DomainStore, parse_rate, validate_name


@pytest.fixture
def store(clock) -> DomainStore:
    """Create an empty store driven by the fake clock."""
    return DomainStore(clock=clock)


class TestValidation:
    """Test name and rate validation helpers."""

    def test_name_is_trimmed(self) -> None:
        assert validate_name("  Acme  ") == "Acme"

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_blank_name_rejected(self, name) -> None:
        with pytest.raises(ValidationError):
            validate_name(name)

    def test_name_length_limit(self) -> None:
        """Test the 50 character boundary."""
        assert validate_name("x" * 50) == "x" * 50
        with pytest.raises(ValidationError, match="at most 50"):
            validate_name("x" * 51)

    def test_blank_rate_defaults_to_zero(self) -> None:
        assert parse_rate("") == Decimal("0")
        assert parse_rate("  ") == Decimal("0")
        assert parse_rate(None) == Decimal("0")

    @pytest.mark.parametrize("text", ["abc", "-1", "10000.01", "NaN", "Infinity", "5 0", "1_000"])
    def test_invalid_rate_rejected(self, text: str) -> None:
        with pytest.raises(ValidationError):
            parse_rate(text)

    def test_rate_bounds_inclusive(self) -> None:
        assert parse_rate("0") == Decimal("0")
        assert parse_rate("10000") == Decimal("10000")
        assert parse_rate(" 42.5 ") == Decimal("42.5")


class TestClients:
    """Test client registration."""

    def test_add_client(self, store: DomainStore, clock) -> None:
        """Test adding a client."""
        client = store.add_client("  Acme ")

        assert client.name == "Acme"
        assert client.created_at == clock.now
        assert store.clients == [client]

    def test_duplicate_name_differing_in_case(self, store: DomainStore) -> None:
        """Test that client names are unique regardless of case."""
        store.add_client("Acme")

        with pytest.raises(DuplicateError):
            store.add_client("acme")

        assert len(store.clients) == 1

    def test_invalid_name_leaves_store_untouched(self, store: DomainStore) -> None:
        """Test that a failed add does not change state."""
        with pytest.raises(ValidationError):
            store.add_client("x" * 51)

        assert store.clients == []

    def test_ids_unique_within_same_millisecond(self, store: DomainStore) -> None:
        """Test that ids stay unique when the clock does not move."""
        first = store.add_client("Acme")
        second = store.add_client("Globex")

        assert second.id == first.id + 1

    def test_ids_continue_after_loaded_data(self, clock) -> None:
        """Test that new ids never collide with loaded ones."""
        existing = DomainStore(clock=clock).add_client("Acme")
        future_id = existing.id + 10_000
        entry = TimeEntry(id=future_id, project_id=1, duration=5, date=clock.now)

        store = DomainStore(clients=[existing], entries=[entry], clock=clock)

        assert store.add_client("Globex").id == future_id + 1


class TestProjects:
    """Test project creation."""

    def test_add_project(self, store: DomainStore) -> None:
        """Test adding a project with a rate."""
        client = store.add_client("Acme")

        project = store.add_project(" Website ", client.id, "50")

        assert project.name == "Website"
        assert project.client_id == client.id
        assert project.rate == Decimal("50")

    def test_rate_defaults_to_zero(self, store: DomainStore) -> None:
        client = store.add_client("Acme")

        project = store.add_project("Website", client.id)

        assert project.rate == Decimal("0")

    def test_missing_client_rejected(self, store: DomainStore) -> None:
        """Test that a client must be selected."""
        with pytest.raises(ValidationError, match="client must be selected"):
            store.add_project("Website", None, "50")

    def test_unknown_client_rejected(self, store: DomainStore) -> None:
        with pytest.raises(ValidationError, match="Client not found"):
            store.add_project("Website", 12345, "")

    def test_invalid_rate_rejected(self, store: DomainStore) -> None:
        client = store.add_client("Acme")

        with pytest.raises(ValidationError):
            store.add_project("Website", client.id, "lots")

        assert store.projects == []

    def test_duplicate_name_per_client(self, store: DomainStore) -> None:
        """Test that project names are unique within a client only."""
        acme = store.add_client("Acme")
        globex = store.add_client("Globex")
        store.add_project("Website", acme.id)

        with pytest.raises(DuplicateError):
            store.add_project("WEBSITE", acme.id)

        other = store.add_project("Website", globex.id)
        assert other.client_id == globex.id
        assert len(store.projects) == 2

    def test_project_with_client(self, store: DomainStore) -> None:
        client = store.add_client("Acme")
        project = store.add_project("Website", client.id)

        assert store.project_with_client(project.id) == (project, client)
        assert store.project_with_client(999) == (None, None)

    def test_projects_for_client(self, store: DomainStore) -> None:
        acme = store.add_client("Acme")
        globex = store.add_client("Globex")
        website = store.add_project("Website", acme.id)
        store.add_project("App", globex.id)

        assert store.projects_for_client(acme.id) == [website]


class TestEntries:
    """Test entry collection."""

    def test_negative_duration_rejected(self, store: DomainStore) -> None:
        entry = TimeEntry(id=1, project_id=1, duration=-1, date=datetime(2025, 11, 16))

        with pytest.raises(ValidationError):
            store.append_entry(entry)

        assert store.entries == []

    def test_recent_entries_most_recent_first(self, store: DomainStore) -> None:
        """Test display order of recent entries."""
        entries = [
            TimeEntry(id=i, project_id=1, duration=i, date=datetime(2025, 11, 16, 9, i))
            for i in range(1, 13)
        ]
        for entry in entries:
            store.append_entry(entry)

        recent = store.recent_entries(10)

        assert [e.id for e in recent] == list(range(12, 2, -1))
        assert store.entries == entries

    def test_recent_entries_without_limit(self, store: DomainStore) -> None:
        for i in range(1, 4):
            store.append_entry(TimeEntry(id=i, project_id=1, duration=1, date=datetime(2025, 11, 16)))

        assert [e.id for e in store.recent_entries(None)] == [3, 2, 1]
