"""Abstract base class for user notification sinks.

The engine reports user-visible outcomes (code sent, draft saved, submit
failed) as short title/message pairs. The sink decides how to show them
(toast, log line, websocket push).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class NotificationKind(str, Enum):
    """Severity of a notification."""

    INFO = "info"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """One user-visible notification.

    Attributes:
        kind: INFO for confirmations, ERROR for failures.
        title: Short heading (e.g., "Draft Saved").
        message: One-sentence description.
    """

    kind: NotificationKind
    title: str
    message: str


class NotificationSink(ABC):
    """Receives notifications from the engine.

    Implementations must not raise; a broken sink cannot block saving or
    verification.
    """

    @abstractmethod
    def notify(self, kind: NotificationKind, title: str, message: str) -> None:
        """Deliver a notification."""
        ...
