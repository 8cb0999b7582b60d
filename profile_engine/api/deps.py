"""Shared dependencies for API endpoints.

WHY DEPENDENCY INJECTION:
- Endpoints never reach for module-level state; the registry and shared
  collaborators hang off app.state, created once in create_app()
- Testable with a fresh app per test
"""

from typing import Annotated

from fastapi import Depends, Request

from profile_engine.core.config import Settings
from profile_engine.core.errors import NotFoundError
from profile_engine.providers.draft_store.base import DraftStore
from profile_engine.providers.submission.base import ProfileSubmitter
from profile_engine.services.session_registry import (
    ProfileSession,
    ProfileSessionRegistry,
)


def get_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


def get_registry(request: Request) -> ProfileSessionRegistry:
    """Session registry of the application."""
    return request.app.state.session_registry


def get_draft_store(request: Request) -> DraftStore:
    """Draft store shared by all sessions."""
    return request.app.state.draft_store


def get_submitter(request: Request) -> ProfileSubmitter:
    """Profile submitter shared by all sessions."""
    return request.app.state.submitter


def get_profile_session(
    session_id: str,
    registry: Annotated[ProfileSessionRegistry, Depends(get_registry)],
) -> ProfileSession:
    """Resolve the session in the path.

    Raises:
        NotFoundError: If the session does not exist or has expired.
    """
    session = registry.get(session_id)
    if session is None:
        raise NotFoundError("Profile session", session_id)
    return session


AppSettings = Annotated[Settings, Depends(get_settings)]
Registry = Annotated[ProfileSessionRegistry, Depends(get_registry)]
SharedDraftStore = Annotated[DraftStore, Depends(get_draft_store)]
SharedSubmitter = Annotated[ProfileSubmitter, Depends(get_submitter)]
CurrentSession = Annotated[ProfileSession, Depends(get_profile_session)]
