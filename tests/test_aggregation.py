"""Tests for hour and earnings roll-ups."""

from datetime import datetime
from decimal import Decimal

import pytest  # type: ignore[import-not-found]

from daybook.core.aggregation import (
    entry_earnings,
    entry_hours,
    format_duration,
    format_rate,
    summarize,
    total_earnings,
    total_hours,
    total_seconds,
)
from daybook.core.models import Client, Project, TimeEntry


def make_entry(entry_id: int, project_id: int, duration: int) -> TimeEntry:
    return TimeEntry(
        id=entry_id,
        project_id=project_id,
        duration=duration,
        date=datetime(2025, 11, 16, 9, 0, 0),
    )


@pytest.fixture
def website() -> Project:
    return Project(id=10, name="Website", client_id=1, rate=Decimal("50"))


class TestTotals:
    """Test per-project totals."""

    def test_total_seconds_filters_by_project(self) -> None:
        entries = [make_entry(1, 10, 100), make_entry(2, 11, 50), make_entry(3, 10, 25)]

        assert total_seconds(entries, 10) == 125
        assert total_seconds(entries, 99) == 0

    def test_short_session(self, website: Project) -> None:
        """Test 125 seconds at 50/h."""
        entries = [make_entry(1, 10, 125)]

        assert total_hours(entries, 10) == "0.0"
        assert total_earnings(entries, website) == "1.74"

    def test_total_hours_one_decimal(self) -> None:
        """Test rounding to one decimal place."""
        entries = [make_entry(1, 10, 3600), make_entry(2, 10, 1800)]

        assert total_hours(entries, 10) == "1.5"

    @pytest.mark.parametrize(
        "seconds,expected",
        [(0, "0.0"), (179, "0.0"), (180, "0.1"), (5400, "1.5"), (36000, "10.0")],
    )
    def test_total_hours_matches_sum(self, seconds: int, expected: str) -> None:
        assert total_hours([make_entry(1, 10, seconds)], 10) == expected

    def test_earnings_use_unrounded_hours(self, website: Project) -> None:
        """Test that earnings are not computed from the displayed hours."""
        entries = [make_entry(1, 10, 100), make_entry(2, 10, 100)]

        assert total_earnings(entries, website) == "2.78"

    def test_earnings_zero_without_rate_or_project(self) -> None:
        free = Project(id=10, name="Pro bono", client_id=1)
        entries = [make_entry(1, 10, 7200)]

        assert total_earnings(entries, free) == "0.00"
        assert total_earnings(entries, None) == "0.00"

    def test_totals_recomputed_after_append(self, website: Project) -> None:
        """Test that totals follow the entry collection."""
        entries = [make_entry(1, 10, 3600)]
        assert total_hours(entries, 10) == "1.0"

        entries.append(make_entry(2, 10, 3600))
        assert total_hours(entries, 10) == "2.0"
        assert total_earnings(entries, website) == "100.00"


class TestEntryFigures:
    """Test single-entry display figures."""

    def test_entry_hours_two_decimals(self) -> None:
        assert entry_hours(make_entry(1, 10, 125)) == "0.03"
        assert entry_hours(make_entry(1, 10, 5400)) == "1.50"

    def test_entry_earnings_from_rounded_hours(self, website: Project) -> None:
        assert entry_earnings(make_entry(1, 10, 125), website) == "1.50"
        assert entry_earnings(make_entry(1, 10, 125), None) == "0.00"


class TestFormatting:
    """Test formatting helpers."""

    @pytest.mark.parametrize(
        "seconds,expected",
        [(0, "00:00:00"), (59, "00:00:59"), (125, "00:02:05"), (3661, "01:01:01"), (360000, "100:00:00")],
    )
    def test_format_duration(self, seconds: int, expected: str) -> None:
        assert format_duration(seconds) == expected

    def test_format_rate(self) -> None:
        assert format_rate(Decimal("50")) == "50"
        assert format_rate(Decimal("50.00")) == "50"
        assert format_rate(Decimal("12.50")) == "12.5"
        assert format_rate(Decimal("0")) == "0"


class TestSummarize:
    """Test per-project roll-up rows."""

    def test_summarize_rows(self, website: Project) -> None:
        acme = Client(id=1, name="Acme")
        orphan = Project(id=11, name="Orphan", client_id=99)
        entries = [make_entry(1, 10, 3600), make_entry(2, 11, 1800), make_entry(3, 10, 1800)]

        rows = summarize(entries, [website, orphan], [acme])

        assert [r.project for r in rows] == [website, orphan]
        assert rows[0].client == acme
        assert rows[0].seconds == 5400
        assert rows[0].hours == "1.5"
        assert rows[0].earnings == "75.00"
        assert rows[0].entry_count == 2
        assert rows[1].client is None
        assert rows[1].earnings == "0.00"
