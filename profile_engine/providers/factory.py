"""Collaborator factory functions.

WHY NO SINGLETONS:
- Every editing session gets its own notifier and scheduler, so one
  session's pending auto-save or toasts can never leak into another
- The draft store and submitter are shared backends; callers create them
  once (create_app) and pass them in
"""

from dataclasses import dataclass

from profile_engine.core.config import Settings, settings
from profile_engine.providers.draft_store.base import DraftStore
from profile_engine.providers.draft_store.memory_adapter import InMemoryDraftStore
from profile_engine.providers.notification.base import NotificationSink
from profile_engine.providers.notification.recording_adapter import (
    RecordingNotificationSink,
)
from profile_engine.providers.submission.base import ProfileSubmitter
from profile_engine.providers.submission.memory_adapter import InMemoryProfileSubmitter
from profile_engine.providers.verification.base import VerificationTransport
from profile_engine.providers.verification.demo_adapter import DemoVerificationTransport
from profile_engine.providers.verification.http_adapter import HttpVerificationTransport
from profile_engine.services.scheduler import AsyncioScheduler, Scheduler


@dataclass
class Collaborators:
    """External collaborators for one editing session."""

    draft_store: DraftStore
    transport: VerificationTransport
    notifier: NotificationSink
    submitter: ProfileSubmitter
    scheduler: Scheduler


def create_draft_store(config: Settings | None = None) -> DraftStore:
    """Create the configured draft store.

    Args:
        config: Settings to read. Defaults to the application settings.

    Returns:
        DraftStore instance.

    Raises:
        ValueError: If the configured store is unknown.
    """
    config = config or settings
    if config.draft_store == "memory":
        return InMemoryDraftStore()
    if config.draft_store == "sql":
        # Deferred: importing the database module creates the engine
        from profile_engine.core.database import async_session_factory
        from profile_engine.providers.draft_store.sql_adapter import SqlDraftStore

        return SqlDraftStore(async_session_factory)
    raise ValueError(f"Unknown draft store: {config.draft_store}")


def create_verification_transport(
    config: Settings | None = None,
) -> VerificationTransport:
    """Create the configured verification transport.

    Args:
        config: Settings to read. Defaults to the application settings.

    Returns:
        VerificationTransport instance.

    Raises:
        ValueError: If the configured transport is unknown.
    """
    config = config or settings
    if config.verification_transport == "demo":
        return DemoVerificationTransport(config.demo_verification_codes)
    if config.verification_transport == "http":
        return HttpVerificationTransport(
            config.verification_service_url,
            api_key=config.verification_service_api_key.get_secret_value(),
            timeout=config.verification_timeout_seconds,
        )
    raise ValueError(f"Unknown verification transport: {config.verification_transport}")


def build_collaborators(
    config: Settings | None = None,
    *,
    draft_store: DraftStore | None = None,
    submitter: ProfileSubmitter | None = None,
    notifier: NotificationSink | None = None,
) -> Collaborators:
    """Build a fresh collaborator set for one session.

    Args:
        config: Settings to read. Defaults to the application settings.
        draft_store: Shared draft store. Created from config if None.
        submitter: Shared submitter. An in-memory one is created if None.
        notifier: Session notifier. A RecordingNotificationSink if None.

    Returns:
        Collaborators with a new scheduler (and notifier unless given).
    """
    config = config or settings
    return Collaborators(
        draft_store=draft_store or create_draft_store(config),
        transport=create_verification_transport(config),
        notifier=notifier or RecordingNotificationSink(),
        submitter=submitter or InMemoryProfileSubmitter(),
        scheduler=AsyncioScheduler(),
    )
