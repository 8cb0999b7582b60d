"""Draft persistence: debounced, serialized auto-save.

Two entry points write drafts:

1. schedule(snapshot): called on every edit. Cancels the pending save
   and schedules a new one after the quiet window, so a burst of edits
   produces at most one write carrying the final values.
2. save_now(snapshot, silent): immediate write (manual "Save draft",
   debounced timer firing, save on page navigation).

Concurrency discipline:
- At most one write is in flight per DraftPersistence instance
- save_now() during an in-flight write queues its snapshot; only the most
  recent queued snapshot is kept and it is written right after the
  in-flight write completes
- Writes therefore reach the store in call order, so an older snapshot can
  never overwrite a newer one

Failed writes never touch in-memory form state, whatever the store raised.
They are reported through the notification sink only for non-silent saves,
and a queued snapshot is still written after a failed one.
"""

import copy
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any

from profile_engine.providers.draft_store.base import DraftStore
from profile_engine.providers.errors import DraftStoreError
from profile_engine.providers.notification.base import NotificationKind, NotificationSink
from profile_engine.services.form_types import DraftEnvelope, has_meaningful_content
from profile_engine.services.profile_errors import PersistenceError
from profile_engine.services.scheduler import ScheduleHandle, Scheduler

logger = logging.getLogger(__name__)

SAVED_TITLE = "Draft Saved"
SAVED_MESSAGE = "Your progress has been saved and can be resumed later."
SAVE_ERROR_TITLE = "Save Error"
SAVE_ERROR_MESSAGE = "Failed to save draft. Please try again."


class SaveOutcome(str, Enum):
    """Result of a save request."""

    SAVED = "saved"
    QUEUED = "queued"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class _SaveRequest:
    snapshot: dict[str, Any]
    page_index: int
    silent: bool


def _utcnow() -> datetime:
    return datetime.now(UTC)


class DraftPersistence:
    """Auto-save coordinator for one editing session.

    Args:
        store: Draft store collaborator.
        key: Draft key for this session (see draft_key()).
        scheduler: Runs the debounced save.
        notifier: Receives "Draft Saved" / "Save Error" for non-silent saves.
        delay_seconds: Quiet window for schedule().
        max_age: Drafts older than this are ignored by load(). None = no limit.
        skip_empty: When True, schedule() never writes an empty snapshot.
        clock: Returns the current UTC time (injectable for tests).
    """

    def __init__(
        self,
        store: DraftStore,
        key: str,
        scheduler: Scheduler,
        notifier: NotificationSink,
        *,
        delay_seconds: float,
        max_age: timedelta | None = None,
        skip_empty: bool = True,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if delay_seconds <= 0:
            raise ValueError("delay_seconds must be positive")
        self._store = store
        self._key = key
        self._scheduler = scheduler
        self._notifier = notifier
        self._delay = delay_seconds
        self._max_age = max_age
        self._skip_empty = skip_empty
        self._clock = clock

        self._pending: ScheduleHandle | None = None
        self._queued: _SaveRequest | None = None
        self._in_flight = False
        self._epoch = 0
        self._version = 0
        self._last_saved_at: datetime | None = None

    # -------------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------------

    @property
    def key(self) -> str:
        """Draft key written by this instance."""
        return self._key

    @property
    def delay_seconds(self) -> float:
        """Debounce quiet window."""
        return self._delay

    @property
    def is_saving(self) -> bool:
        """Whether a write is in flight."""
        return self._in_flight

    @property
    def has_pending(self) -> bool:
        """Whether a debounced save is waiting for its window to elapse."""
        return self._pending is not None

    @property
    def last_saved_at(self) -> datetime | None:
        """saved_at of the most recent successful write (or loaded draft)."""
        return self._last_saved_at

    @property
    def version(self) -> int:
        """Version of the most recent successful write."""
        return self._version

    # -------------------------------------------------------------------------
    # Saving
    # -------------------------------------------------------------------------

    def schedule(
        self,
        snapshot: Mapping[str, Any],
        *,
        page_index: int = 0,
        immediate: bool = False,
    ) -> None:
        """Debounce a silent save of the snapshot.

        Any pending save is cancelled first (standard debounce). The
        snapshot is copied now, so later edits do not leak into this save;
        they schedule their own.

        Args:
            snapshot: Current form snapshot.
            page_index: Wizard page to store with the draft.
            immediate: Schedule with zero delay (save on page navigation).
        """
        self.cancel_pending()
        if self._skip_empty and not has_meaningful_content(snapshot):
            return

        request = _SaveRequest(
            snapshot=copy.deepcopy(dict(snapshot)),
            page_index=page_index,
            silent=True,
        )

        async def _fire() -> None:
            self._pending = None
            await self._submit(request)

        self._pending = self._scheduler.schedule_after(
            0.0 if immediate else self._delay, _fire
        )

    def cancel_pending(self) -> None:
        """Cancel the debounced save, if any."""
        if self._pending is not None:
            self._scheduler.cancel(self._pending)
            self._pending = None

    async def save_now(
        self,
        snapshot: Mapping[str, Any],
        *,
        page_index: int = 0,
        silent: bool = False,
    ) -> SaveOutcome:
        """Write the snapshot now, or queue it behind the in-flight write.

        Manual saves always write, even for an empty snapshot.

        Args:
            snapshot: Current form snapshot.
            page_index: Wizard page to store with the draft.
            silent: Suppress success and failure notifications.

        Returns:
            QUEUED if another write is in flight, otherwise the outcome of
            the last write this call performed.
        """
        self.cancel_pending()
        request = _SaveRequest(
            snapshot=copy.deepcopy(dict(snapshot)),
            page_index=page_index,
            silent=silent,
        )
        return await self._submit(request)

    async def _submit(self, request: _SaveRequest) -> SaveOutcome:
        if self._in_flight:
            if self._queued is not None:
                # Newest snapshot wins; a superseded manual save still reports
                request = _SaveRequest(
                    snapshot=request.snapshot,
                    page_index=request.page_index,
                    silent=request.silent and self._queued.silent,
                )
            self._queued = request
            return SaveOutcome.QUEUED

        self._in_flight = True
        outcome = SaveOutcome.SKIPPED
        try:
            next_request: _SaveRequest | None = request
            while next_request is not None:
                outcome = await self._write(next_request)
                next_request, self._queued = self._queued, None
        finally:
            self._in_flight = False
            self._queued = None
        return outcome

    async def _write(self, request: _SaveRequest) -> SaveOutcome:
        epoch = self._epoch
        envelope = DraftEnvelope.capture(
            request.snapshot,
            saved_at=self._clock(),
            version=self._version + 1,
            page_index=request.page_index,
        )

        try:
            await self._store.put(self._key, envelope)
        except Exception as e:
            # Adapters may leak driver errors (e.g. OSError from asyncpg)
            logger.warning("Draft save failed for %s: %r", self._key, e)
            if not request.silent:
                self._notifier.notify(
                    NotificationKind.ERROR, SAVE_ERROR_TITLE, SAVE_ERROR_MESSAGE
                )
            return SaveOutcome.FAILED

        if epoch != self._epoch:
            # Discarded while this write was in flight
            await self._delete_quietly()
            return SaveOutcome.SKIPPED

        self._version = envelope.version
        self._last_saved_at = envelope.saved_at
        logger.debug("Draft %s saved (version %d)", self._key, envelope.version)
        if not request.silent:
            self._notifier.notify(NotificationKind.INFO, SAVED_TITLE, SAVED_MESSAGE)
        return SaveOutcome.SAVED

    # -------------------------------------------------------------------------
    # Loading and discarding
    # -------------------------------------------------------------------------

    async def load(self) -> DraftEnvelope | None:
        """Read the stored draft.

        Returns:
            The envelope, or None if absent or older than max_age.

        Raises:
            PersistenceError: If the store could not be read.
        """
        try:
            envelope = await self._store.get(self._key)
        except DraftStoreError as e:
            logger.warning("Draft load failed for %s: %s", self._key, e)
            raise PersistenceError("Failed to load saved draft.") from e

        if envelope is None:
            return None
        if self._max_age is not None and self._clock() - envelope.saved_at > self._max_age:
            logger.info(
                "Ignoring draft %s saved at %s (older than %s)",
                self._key,
                envelope.saved_at.isoformat(),
                self._max_age,
            )
            return None

        self._version = max(self._version, envelope.version)
        self._last_saved_at = envelope.saved_at
        return envelope

    async def discard(self) -> None:
        """Cancel pending work and delete the stored draft.

        A write already in flight is allowed to finish and is then deleted
        again.

        Raises:
            PersistenceError: If the store could not delete the draft.
        """
        self.cancel_pending()
        self._queued = None
        self._epoch += 1
        try:
            await self._store.delete(self._key)
        except DraftStoreError as e:
            logger.warning("Draft discard failed for %s: %s", self._key, e)
            raise PersistenceError("Failed to discard saved draft.") from e
        self._version = 0
        self._last_saved_at = None

    async def _delete_quietly(self) -> None:
        try:
            await self._store.delete(self._key)
        except Exception as e:
            logger.warning("Draft re-delete failed for %s: %r", self._key, e)
