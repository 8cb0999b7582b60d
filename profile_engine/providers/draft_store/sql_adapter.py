"""SQL draft store.

Persists envelopes in the ``profile_drafts`` table through
ProfileDraftRepository. Each call opens its own session from the
injected session factory and commits before returning.
"""

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from profile_engine.providers.draft_store.base import DraftStore
from profile_engine.providers.errors import DraftStoreError
from profile_engine.repositories.profile_draft_repository import (
    ProfileDraftRepository,
)
from profile_engine.services.form_types import DraftEnvelope

logger = structlog.get_logger()

# asyncpg raises OSError subclasses on connect without SQLAlchemy wrapping
_STORE_ERRORS = (SQLAlchemyError, OSError)


class SqlDraftStore(DraftStore):
    """Draft store backed by PostgreSQL.

    Args:
        session_factory: async_sessionmaker bound to the application engine.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, key: str) -> DraftEnvelope | None:
        try:
            async with self._session_factory() as db:
                draft = await ProfileDraftRepository.get(db, key)
                if draft is None:
                    return None
                return DraftEnvelope(
                    snapshot=dict(draft.snapshot),
                    saved_at=draft.saved_at,
                    version=draft.version,
                    page_index=draft.page_index,
                )
        except _STORE_ERRORS as e:
            logger.warning("Draft read failed", draft_key=key, error=type(e).__name__)
            raise DraftStoreError(f"Failed to read draft '{key}'") from e

    async def put(self, key: str, envelope: DraftEnvelope) -> None:
        try:
            async with self._session_factory() as db:
                await ProfileDraftRepository.upsert(
                    db,
                    draft_key=key,
                    snapshot=envelope.to_dict()["snapshot"],
                    saved_at=envelope.saved_at,
                    version=envelope.version,
                    page_index=envelope.page_index,
                )
                await db.commit()
        except _STORE_ERRORS as e:
            logger.warning("Draft write failed", draft_key=key, error=type(e).__name__)
            raise DraftStoreError(f"Failed to write draft '{key}'") from e

    async def delete(self, key: str) -> None:
        try:
            async with self._session_factory() as db:
                await ProfileDraftRepository.delete(db, key)
                await db.commit()
        except _STORE_ERRORS as e:
            logger.warning("Draft delete failed", draft_key=key, error=type(e).__name__)
            raise DraftStoreError(f"Failed to delete draft '{key}'") from e
