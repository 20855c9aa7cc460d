"""Desktop notifications for Daybook."""

import logging
from enum import Enum
from typing import Any, Optional

from daybook.core.aggregation import format_duration
from daybook.core.models import Client, Project

logger = logging.getLogger(__name__)


class NotificationType(Enum):
    """Types of notifications."""

    TIMER = "timer"
    EXPORT = "export"


class Notifier:
    """Send desktop notifications."""

    def __init__(
        self,
        enabled: bool = True,
        backend: str = "auto",
        types: Optional[dict[str, bool]] = None,
    ):
        """Initialize notifier.

        Args:
            enabled: Whether notifications are enabled
            backend: Notification backend ('auto', 'plyer', 'log')
            types: Per-type switches keyed by NotificationType value. Types
                not listed are sent.
        """
        self.enabled = enabled
        self.backend = backend
        self.types = dict(types or {})
        self.sent: list[tuple[str, str]] = []
        self._notifier = self._init_notifier()

    def _init_notifier(self) -> Any:
        """Initialize platform-specific notifier.

        Returns:
            Notification handler or None if not available
        """
        if not self.enabled or self.backend == "log":
            return None

        try:
            from plyer import notification  # type: ignore[import-not-found]

            return notification  # type: ignore[no-any-return]
        except ImportError:
            logger.debug("plyer not installed, desktop notifications disabled")
            return None

    def notify(
        self,
        title: str,
        message: str,
        notification_type: NotificationType = NotificationType.TIMER,
        timeout: int = 5,
    ) -> None:
        """Send a desktop notification.

        Args:
            title: Notification title
            message: Notification message
            notification_type: Type of notification
            timeout: Display duration in seconds
        """
        if not self.enabled or not self.types.get(notification_type.value, True):
            return

        logger.info("%s: %s", title, message)
        self.sent.append((title, message))

        if not self._notifier:
            return

        try:
            self._notifier.notify(  # type: ignore[attr-defined]
                title=title,
                message=message,
                app_name="Daybook",
                timeout=timeout,
            )
        except Exception as e:
            # Notifications are informational only
            logger.debug("Notification failed: %s", e)

    def _describe(self, project: Optional[Project], client: Optional[Client]) -> str:
        project_name = project.name if project else "Unknown"
        client_name = client.name if client else "Unknown"
        return f"{client_name} • {project_name}"

    def notify_timer_paused(
        self, project: Optional[Project], client: Optional[Client], duration: int
    ) -> None:
        """Notify that a timer was paused.

        Args:
            project: Timed project
            client: Project's client
            duration: Recorded seconds
        """
        self.notify(
            title="Timer paused",
            message=f"{self._describe(project, client)} ({format_duration(duration)})",
        )

    def notify_timer_stopped(
        self, project: Optional[Project], client: Optional[Client], duration: int
    ) -> None:
        """Notify that a timer was stopped.

        Args:
            project: Timed project
            client: Project's client
            duration: Recorded seconds
        """
        self.notify(
            title="Timer stopped",
            message=f"{self._describe(project, client)} ({format_duration(duration)})",
        )

    def notify_export(self, path: str, entry_count: int) -> None:
        """Notify that an export finished."""
        self.notify(
            title="CSV Export",
            message=f"Exported {entry_count} entries to {path}",
            notification_type=NotificationType.EXPORT,
        )
