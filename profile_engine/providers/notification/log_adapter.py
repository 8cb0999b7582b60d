"""Notification sink that writes to the structured log."""

import structlog

from profile_engine.providers.notification.base import NotificationKind, NotificationSink

logger = structlog.get_logger()


class LogNotificationSink(NotificationSink):
    """Logs every notification; errors at warning level."""

    def notify(self, kind: NotificationKind, title: str, message: str) -> None:
        if kind == NotificationKind.ERROR:
            logger.warning("User notification", kind=kind.value, title=title, message=message)
        else:
            logger.info("User notification", kind=kind.value, title=title, message=message)
