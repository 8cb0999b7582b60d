"""Pytest configuration and fixtures for profile engine tests.

Engine tests run against in-memory collaborators and a virtual-clock
scheduler, so nothing sleeps. SQL draft store tests need PostgreSQL and are
skipped when no server is listening on localhost:5432.
"""

import socket
from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from profile_engine.core.config import Settings
from profile_engine.entities.base import EntityProfile, build_profile
from profile_engine.models import Base
from profile_engine.providers.draft_store.memory_adapter import InMemoryDraftStore
from profile_engine.providers.notification.recording_adapter import (
    RecordingNotificationSink,
)
from profile_engine.providers.submission.memory_adapter import InMemoryProfileSubmitter
from profile_engine.providers.verification.demo_adapter import DemoVerificationTransport
from profile_engine.services.field_validation import email_address
from profile_engine.services.form_types import ContactChannel, FieldSpec, PageSpec
from profile_engine.services.profile_completion_engine import ProfileCompletionEngine
from profile_engine.services.scheduler import ManualScheduler

TEST_START = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)
VALID_CODE = "123456"
WRONG_CODE = "999999"


def _is_postgres_available() -> bool:
    """Check if PostgreSQL is reachable on localhost:5432."""
    try:
        with socket.create_connection(("127.0.0.1", 5432), timeout=1):
            return True
    except OSError:
        return False


def skip_if_no_postgres() -> pytest.MarkDecorator:
    """Skip marker for tests that need a live PostgreSQL."""
    return pytest.mark.skipif(
        not _is_postgres_available(),
        reason="PostgreSQL not available on localhost:5432",
    )


# =============================================================================
# Clock and configuration
# =============================================================================


class FakeClock:
    """Callable UTC clock that only moves when told to."""

    def __init__(self, start: datetime = TEST_START) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        """Move forward by a timedelta (e.g., advance(minutes=5))."""
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    """Controllable UTC clock starting at TEST_START."""
    return FakeClock()


@pytest.fixture
def test_settings() -> Settings:
    """Settings independent of the developer's .env file."""
    return Settings(
        _env_file=None,
        environment="test",
        draft_store="memory",
        verification_transport="demo",
        autosave_delay_seconds=3.0,
        long_form_autosave_delay_seconds=30.0,
        draft_max_age_days=7,
        verification_code_ttl_minutes=10,
        verification_max_attempts=None,
    )


# =============================================================================
# Collaborators
# =============================================================================


@pytest.fixture
def manual_scheduler() -> ManualScheduler:
    """Virtual-clock scheduler; nothing runs until advance()."""
    return ManualScheduler()


@pytest.fixture
def memory_store() -> InMemoryDraftStore:
    """Empty in-memory draft store."""
    return InMemoryDraftStore()


@pytest.fixture
def recorder() -> RecordingNotificationSink:
    """Notification sink that records everything."""
    return RecordingNotificationSink()


@pytest.fixture
def demo_transport() -> DemoVerificationTransport:
    """Fixed-code verification transport accepting 123456."""
    return DemoVerificationTransport()


@pytest.fixture
def submitter() -> InMemoryProfileSubmitter:
    """In-memory profile submitter."""
    return InMemoryProfileSubmitter()


# =============================================================================
# Entity tables and engines
# =============================================================================


@pytest.fixture
def wizard_profile() -> EntityProfile:
    """Three-page wizard: name, verified email, terms consent."""
    return build_profile(
        "member",
        [
            FieldSpec("name", required=True, group="about", label="Name"),
            FieldSpec(
                "email",
                required=True,
                group="contact",
                label="Email",
                validator=email_address(),
                verification=ContactChannel.EMAIL,
            ),
            FieldSpec("nickname", group="about", weight=0),
            FieldSpec("termsAccepted", required=True, group="consents", label="Terms"),
        ],
        [
            PageSpec("about", "About you", {"name", "nickname"}),
            PageSpec("contact", "Contact", {"email"}),
            PageSpec("consents", "Consents", {"termsAccepted"}),
        ],
    )


@pytest.fixture
def make_engine(
    wizard_profile: EntityProfile,
    memory_store: InMemoryDraftStore,
    demo_transport: DemoVerificationTransport,
    recorder: RecordingNotificationSink,
    submitter: InMemoryProfileSubmitter,
    manual_scheduler: ManualScheduler,
    test_settings: Settings,
    clock: FakeClock,
) -> Callable[..., ProfileCompletionEngine]:
    """Factory for engines wired to the shared test collaborators.

    Keyword overrides replace any collaborator, e.g.
    make_engine(SPONSOR_PROFILE, profile_id="p-1").
    """

    def _make(
        profile: EntityProfile | None = None,
        **overrides: Any,
    ) -> ProfileCompletionEngine:
        kwargs: dict[str, Any] = {
            "draft_store": memory_store,
            "transport": demo_transport,
            "notifier": recorder,
            "submitter": submitter,
            "scheduler": manual_scheduler,
            "config": test_settings,
            "clock": clock,
        }
        kwargs.update(overrides)
        return ProfileCompletionEngine(profile or wizard_profile, **kwargs)

    return _make


@pytest.fixture
def engine(
    make_engine: Callable[..., ProfileCompletionEngine],
) -> ProfileCompletionEngine:
    """Engine on the three-page wizard profile."""
    return make_engine()


# =============================================================================
# Database
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def db_session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Session factory on a freshly created profile_drafts table.

    Requires PostgreSQL; use together with skip_if_no_postgres().
    """
    config = Settings(_env_file=None, environment="test")
    engine = create_async_engine(config.database_url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


# =============================================================================
# HTTP client
# =============================================================================


@pytest_asyncio.fixture
async def client(test_settings: Settings) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for a fresh application instance."""
    from profile_engine.main import create_app

    app = create_app(test_settings)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.state.session_registry.close_all()
