"""Tests for draft store adapters.

The SQL store tests need PostgreSQL on localhost:5432 and are skipped
otherwise.
"""

from datetime import UTC, datetime

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from profile_engine.providers.draft_store.base import draft_key
from profile_engine.providers.draft_store.memory_adapter import InMemoryDraftStore
from profile_engine.providers.draft_store.sql_adapter import SqlDraftStore
from profile_engine.providers.errors import DraftStoreError
from profile_engine.services.form_types import DraftEnvelope
from tests.conftest import skip_if_no_postgres

SAVED_AT = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)


def _envelope(version: int = 1, **snapshot: object) -> DraftEnvelope:
    return DraftEnvelope(
        snapshot=dict(snapshot) or {"name": "Ana", "skills": ["cooking"]},
        saved_at=SAVED_AT,
        version=version,
        page_index=1,
    )


class TestDraftKey:
    """Tests for draft_key()."""

    def test_anonymous(self) -> None:
        """New profiles use the anonymous suffix."""
        assert draft_key("agency") == "agencyDraft:anonymous"

    def test_existing_profile(self) -> None:
        """Existing profiles use their id."""
        assert draft_key("maid", "42") == "maidDraft:42"


class TestDraftEnvelope:
    """Tests for DraftEnvelope serialization."""

    def test_dict_round_trip(self) -> None:
        """to_dict() output is JSON-ready and reversible."""
        envelope = _envelope()
        data = envelope.to_dict()
        assert data["saved_at"] == SAVED_AT.isoformat()
        assert DraftEnvelope.from_dict(data) == envelope

    def test_capture_deep_copies(self) -> None:
        """Later edits to the live snapshot do not reach the envelope."""
        live = {"skills": ["cooking"]}
        envelope = DraftEnvelope.capture(live, saved_at=SAVED_AT, version=1)
        live["skills"].append("ironing")
        assert envelope.snapshot == {"skills": ["cooking"]}


class TestInMemoryDraftStore:
    """Tests for InMemoryDraftStore."""

    async def test_put_get_delete(self) -> None:
        """Basic key -> envelope behavior."""
        store = InMemoryDraftStore()
        assert await store.get("k") is None

        await store.put("k", _envelope())
        assert (await store.get("k")).version == 1

        await store.put("k", _envelope(version=2))
        assert (await store.get("k")).version == 2
        assert store.keys() == ["k"]

        await store.delete("k")
        await store.delete("k")
        assert await store.get("k") is None

    async def test_failing_writes(self) -> None:
        """fail_writes simulates an unavailable backend."""
        store = InMemoryDraftStore()
        store.fail_writes = True
        with pytest.raises(DraftStoreError):
            await store.put("k", _envelope())
        assert store.put_calls == []


class _FailingSessionFactory:
    """Session factory whose sessions fail to connect."""

    def __call__(self):  # noqa: ANN204
        raise OperationalError("connect", {}, Exception("connection refused"))


class _RefusingSessionFactory:
    """Session factory failing the way asyncpg does before SQLAlchemy wraps."""

    def __call__(self):  # noqa: ANN204
        raise ConnectionRefusedError("connection refused")


class TestSqlDraftStoreErrors:
    """Database errors become DraftStoreError."""

    async def test_read_failure(self) -> None:
        """get() wraps SQLAlchemy errors."""
        store = SqlDraftStore(_FailingSessionFactory())  # type: ignore[arg-type]
        with pytest.raises(DraftStoreError):
            await store.get("k")

    async def test_write_failure(self) -> None:
        """put() wraps SQLAlchemy errors."""
        store = SqlDraftStore(_FailingSessionFactory())  # type: ignore[arg-type]
        with pytest.raises(DraftStoreError):
            await store.put("k", _envelope())

    async def test_delete_failure(self) -> None:
        """delete() wraps SQLAlchemy errors."""
        store = SqlDraftStore(_FailingSessionFactory())  # type: ignore[arg-type]
        with pytest.raises(DraftStoreError):
            await store.delete("k")

    async def test_driver_connection_error(self) -> None:
        """Connection errors raised by the driver are wrapped too."""
        store = SqlDraftStore(_RefusingSessionFactory())  # type: ignore[arg-type]
        with pytest.raises(DraftStoreError):
            await store.put("k", _envelope())


@skip_if_no_postgres()
class TestSqlDraftStore:
    """Round trips through the profile_drafts table."""

    async def test_put_replaces_envelope(
        self, db_session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        """Second put overwrites the first."""
        store = SqlDraftStore(db_session_factory)
        await store.put("maidDraft:anonymous", _envelope(version=1, name="A"))
        await store.put("maidDraft:anonymous", _envelope(version=2, name="Ana"))

        envelope = await store.get("maidDraft:anonymous")
        assert envelope is not None
        assert envelope.version == 2
        assert envelope.snapshot == {"name": "Ana"}
        assert envelope.page_index == 1
        assert envelope.saved_at == SAVED_AT

    async def test_delete(
        self, db_session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        """Deleted drafts are absent; deleting twice is fine."""
        store = SqlDraftStore(db_session_factory)
        await store.put("k", _envelope())
        await store.delete("k")
        await store.delete("k")
        assert await store.get("k") is None
