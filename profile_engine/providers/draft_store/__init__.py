"""Draft stores.

SqlDraftStore is not re-exported here so that the memory store can be
used without importing the database stack.
"""

from profile_engine.providers.draft_store.base import (
    ANONYMOUS_PROFILE_ID,
    DraftStore,
    draft_key,
)
from profile_engine.providers.draft_store.memory_adapter import InMemoryDraftStore

__all__ = [
    # Base
    "DraftStore",
    "draft_key",
    "ANONYMOUS_PROFILE_ID",
    # Adapters
    "InMemoryDraftStore",
]
