"""User notification sinks."""

from profile_engine.providers.notification.base import (
    Notification,
    NotificationKind,
    NotificationSink,
)
from profile_engine.providers.notification.log_adapter import LogNotificationSink
from profile_engine.providers.notification.recording_adapter import (
    RecordingNotificationSink,
)

__all__ = [
    # Base
    "Notification",
    "NotificationKind",
    "NotificationSink",
    # Adapters
    "LogNotificationSink",
    "RecordingNotificationSink",
]
