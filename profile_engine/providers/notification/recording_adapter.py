"""Notification sink that keeps notifications in memory.

Used by the HTTP surface (notifications are returned with session state
and then drained) and by tests.
"""

from profile_engine.providers.notification.base import (
    Notification,
    NotificationKind,
    NotificationSink,
)


class RecordingNotificationSink(NotificationSink):
    """Appends every notification to ``notifications``."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def notify(self, kind: NotificationKind, title: str, message: str) -> None:
        self.notifications.append(Notification(kind=kind, title=title, message=message))

    @property
    def titles(self) -> list[str]:
        """Titles in delivery order."""
        return [n.title for n in self.notifications]

    def drain(self) -> list[Notification]:
        """Return and clear all recorded notifications."""
        drained, self.notifications = self.notifications, []
        return drained
