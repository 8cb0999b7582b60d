"""SQLAlchemy ORM models for the profile engine.

- base.py: Base, TimestampMixin
- profile_draft.py: ProfileDraft (SQL draft store)
"""

from profile_engine.models.base import Base, TimestampMixin
from profile_engine.models.profile_draft import ProfileDraft

__all__ = [
    "Base",
    "ProfileDraft",
    "TimestampMixin",
]
