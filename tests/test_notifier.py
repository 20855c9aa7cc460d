"""Tests for notifications."""

from decimal import Decimal
from unittest.mock import MagicMock

from daybook.automation.notifier import NotificationType, Notifier
from daybook.core.models import Client, Project


class TestNotifier:
    """Test Notifier."""

    def test_disabled_notifier_sends_nothing(self) -> None:
        notifier = Notifier(enabled=False)

        notifier.notify("Title", "Message")

        assert notifier.sent == []

    def test_log_backend_records_messages(self) -> None:
        notifier = Notifier(enabled=True, backend="log")

        notifier.notify("Title", "Message")

        assert notifier.sent == [("Title", "Message")]

    def test_timer_messages(self) -> None:
        """Test paused and stopped message text."""
        notifier = Notifier(enabled=True, backend="log")
        client = Client(id=1, name="Acme")
        project = Project(id=2, name="Website", client_id=1, rate=Decimal("50"))

        notifier.notify_timer_paused(project, client, 65)
        notifier.notify_timer_stopped(None, None, 3600)

        assert notifier.sent == [
            ("Timer paused", "Acme • Website (00:01:05)"),
            ("Timer stopped", "Unknown • Unknown (01:00:00)"),
        ]

    def test_backend_failure_is_ignored(self) -> None:
        """Test that a failing desktop backend does not raise."""
        notifier = Notifier(enabled=True, backend="log")
        backend = MagicMock()
        backend.notify.side_effect = RuntimeError("no display")
        notifier._notifier = backend

        notifier.notify_export("/tmp/daybook-export.csv", 3)

        backend.notify.assert_called_once()
        assert notifier.sent[0][0] == "CSV Export"

    def test_disabled_type_is_skipped(self) -> None:
        """Test that per-type switches silence only their own type."""
        notifier = Notifier(enabled=True, backend="log", types={"timer": False, "export": True})

        notifier.notify_timer_stopped(None, None, 5)
        notifier.notify_export("/tmp/daybook-export.csv", 1)

        assert [title for title, _ in notifier.sent] == ["CSV Export"]

    def test_unlisted_type_is_sent(self) -> None:
        notifier = Notifier(enabled=True, backend="log", types={"export": False})

        notifier.notify("Title", "Message", NotificationType.TIMER)

        assert notifier.sent == [("Title", "Message")]
