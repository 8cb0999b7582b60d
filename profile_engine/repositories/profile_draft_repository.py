"""Repository for ProfileDraft CRUD operations.

Drafts are keyed by draft_key and replaced wholesale on every save.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from profile_engine.models.profile_draft import ProfileDraft


class ProfileDraftRepository:
    """Stateless repository for ProfileDraft table operations.

    All methods are static; no instance state.
    """

    @staticmethod
    async def get(db: AsyncSession, draft_key: str) -> ProfileDraft | None:
        """Look up a draft by key.

        Args:
            db: Async database session.
            draft_key: Storage key.

        Returns:
            ProfileDraft if found, None otherwise.
        """
        return await db.get(ProfileDraft, draft_key)

    @staticmethod
    async def upsert(
        db: AsyncSession,
        *,
        draft_key: str,
        snapshot: dict[str, Any],
        saved_at: datetime,
        version: int,
        page_index: int,
    ) -> ProfileDraft:
        """Create or replace a draft.

        Args:
            db: Async database session.
            draft_key: Storage key.
            snapshot: Full form snapshot (JSON-serializable).
            saved_at: Save timestamp from the engine.
            version: Save counter.
            page_index: Wizard page index.

        Returns:
            The stored ProfileDraft.
        """
        draft = await db.get(ProfileDraft, draft_key)
        if draft is None:
            draft = ProfileDraft(draft_key=draft_key)
            db.add(draft)

        draft.snapshot = snapshot
        draft.saved_at = saved_at
        draft.version = version
        draft.page_index = page_index

        await db.flush()
        return draft

    @staticmethod
    async def delete(db: AsyncSession, draft_key: str) -> None:
        """Delete a draft (no-op if absent).

        Args:
            db: Async database session.
            draft_key: Storage key.
        """
        stmt = delete(ProfileDraft).where(ProfileDraft.draft_key == draft_key)
        await db.execute(stmt)
