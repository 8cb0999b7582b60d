"""In-memory registry of editing sessions for the HTTP surface.

Each session pairs one ProfileCompletionEngine with the notification sink
it reports to. Sessions expire after a period without access.

WHY IN-MEMORY:
- An engine holds live state (pending auto-save, in-flight verification)
  that cannot be serialized mid-flight
- Durable progress lives in the draft store; an expired session is
  recovered by creating a new one with restore_draft
- Can be replaced with sticky routing or a shared store for multi-instance
  deployments later
"""

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from profile_engine.providers.notification.recording_adapter import (
    RecordingNotificationSink,
)
from profile_engine.services.profile_completion_engine import ProfileCompletionEngine

DEFAULT_SESSION_TTL_MINUTES = 120


@dataclass
class ProfileSession:
    """One editing session.

    Attributes:
        session_id: Opaque identifier returned to the client.
        engine: Engine owning the form state.
        notifier: Sink the engine reports to; drained into API responses.
        expires_at: When the session expires unless accessed again.
    """

    session_id: str
    engine: ProfileCompletionEngine
    notifier: RecordingNotificationSink
    expires_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class ProfileSessionRegistry:
    """In-memory store for editing sessions.

    Note: This implementation is safe for async/await usage (single-threaded
    event loop) but not for multi-threaded access.
    """

    def __init__(self, ttl_minutes: int = DEFAULT_SESSION_TTL_MINUTES) -> None:
        """Initialize the registry.

        Args:
            ttl_minutes: Idle lifetime of a session in minutes.
        """
        self._sessions: dict[str, ProfileSession] = {}
        self._ttl = timedelta(minutes=ttl_minutes)

    def __len__(self) -> int:
        return len(self._sessions)

    def create(
        self,
        engine: ProfileCompletionEngine,
        notifier: RecordingNotificationSink,
    ) -> ProfileSession:
        """Register a new session.

        Args:
            engine: Engine for the session.
            notifier: Sink the engine was built with.

        Returns:
            The registered ProfileSession.
        """
        session = ProfileSession(
            session_id=str(uuid.uuid4()),
            engine=engine,
            notifier=notifier,
            expires_at=datetime.now(UTC) + self._ttl,
        )
        self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> ProfileSession | None:
        """Get a live session and extend its lifetime.

        Args:
            session_id: Session identifier.

        Returns:
            The session, or None if not found or expired.
        """
        session = self._sessions.get(session_id)
        if session is None:
            return None

        now = datetime.now(UTC)
        if now > session.expires_at:
            self._evict(session_id)
            return None

        session.expires_at = now + self._ttl
        return session

    def remove(self, session_id: str) -> bool:
        """Close and remove a session.

        Returns:
            True if the session existed.
        """
        return self._evict(session_id)

    def cleanup_expired(self) -> int:
        """Close and remove all expired sessions.

        Returns:
            Number of sessions removed.
        """
        now = datetime.now(UTC)
        expired = [
            session_id
            for session_id, session in self._sessions.items()
            if now > session.expires_at
        ]
        for session_id in expired:
            self._evict(session_id)
        return len(expired)

    def close_all(self) -> int:
        """Close and remove every session (shutdown).

        Returns:
            Number of sessions removed.
        """
        session_ids = list(self._sessions)
        for session_id in session_ids:
            self.remove(session_id)
        return len(session_ids)

    def _evict(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.engine.close()
        return True

    def clear(self) -> None:
        """Drop all sessions (for testing)."""
        self._sessions.clear()
