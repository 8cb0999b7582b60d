"""Profile draft model - saved wizard progress.

One row per draft key (``"{entity}Draft:{profile_id}"``). Each save
replaces the whole snapshot; version increases with every save.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from profile_engine.models.base import Base, TimestampMixin


class ProfileDraft(Base, TimestampMixin):
    """Saved draft of an in-progress profile.

    Attributes:
        draft_key: Storage key, e.g. ``agencyDraft:anonymous``.
        snapshot: Field name -> value map at save time.
        saved_at: When the save was issued by the engine (not the DB write time).
        version: Monotonic save counter.
        page_index: Wizard page the user was on.
    """

    __tablename__ = "profile_drafts"

    draft_key: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
    )
    snapshot: Mapped[dict[str, Any]] = mapped_column(
        JSONB,
        nullable=False,
    )
    saved_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
    page_index: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
    )
