"""Abstract base class for draft stores.

A draft store is a key -> DraftEnvelope map. Keys follow the
``"{entity}Draft:{profile_id or 'anonymous'}"`` convention (see draft_key()).
Writes replace the whole envelope; there is no partial update.
"""

from abc import ABC, abstractmethod

from profile_engine.services.form_types import DraftEnvelope

ANONYMOUS_PROFILE_ID = "anonymous"


def draft_key(entity: str, profile_id: str | None = None) -> str:
    """Build the storage key for an entity's draft.

    Example:
        >>> draft_key("agency", None)
        'agencyDraft:anonymous'
    """
    return f"{entity}Draft:{profile_id or ANONYMOUS_PROFILE_ID}"


class DraftStore(ABC):
    """Persists and retrieves draft envelopes.

    Implementations raise DraftStoreError on any storage failure.
    """

    @abstractmethod
    async def get(self, key: str) -> DraftEnvelope | None:
        """Return the stored envelope, or None if absent."""
        ...

    @abstractmethod
    async def put(self, key: str, envelope: DraftEnvelope) -> None:
        """Replace the envelope stored under key."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove the envelope. Deleting an absent key is not an error."""
        ...
