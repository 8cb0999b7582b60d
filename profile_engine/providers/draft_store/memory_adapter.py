"""In-memory draft store.

Process-local dict of envelopes. Default store for local development and
the store used by unit tests. Drafts are lost on restart.
"""

from profile_engine.providers.draft_store.base import DraftStore
from profile_engine.providers.errors import DraftStoreError
from profile_engine.services.form_types import DraftEnvelope


class InMemoryDraftStore(DraftStore):
    """Dict-backed draft store.

    Attributes:
        put_calls: Envelopes written, in order, for test assertions.
        fail_writes: When True, put() raises DraftStoreError (simulates a
            full quota or an unavailable backend).
    """

    def __init__(self) -> None:
        self._drafts: dict[str, DraftEnvelope] = {}
        self.put_calls: list[tuple[str, DraftEnvelope]] = []
        self.fail_writes = False

    async def get(self, key: str) -> DraftEnvelope | None:
        return self._drafts.get(key)

    async def put(self, key: str, envelope: DraftEnvelope) -> None:
        if self.fail_writes:
            raise DraftStoreError("Draft store is configured to fail writes")
        self.put_calls.append((key, envelope))
        self._drafts[key] = envelope

    async def delete(self, key: str) -> None:
        self._drafts.pop(key, None)

    def keys(self) -> list[str]:
        """Stored keys (test helper)."""
        return list(self._drafts)
