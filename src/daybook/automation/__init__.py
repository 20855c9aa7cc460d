"""Notifications fired as side effects of timer and export actions."""

from daybook.automation.notifier import NotificationType, Notifier

__all__ = ["Notifier", "NotificationType"]
