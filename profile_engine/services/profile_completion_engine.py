"""Profile completion engine.

Orchestrates one in-progress profile edit session:

    apply_edit ─▶ reset stale verification ─▶ validate ─▶ score ─▶ collect errors
                                                                    │
                                                 DraftPersistence.schedule (debounced)

    request_code / submit_code ─▶ VerificationStateMachine ─▶ flip <field>Verified

    next_page / jump_to ─▶ PageController gate ─▶ immediate silent save

    submit ─▶ all pages valid ─▶ ProfileSubmitter ─▶ discard draft ─▶ closed

The engine owns the FormSnapshot. All mutations happen here, on the
caller's event loop; only transport and store calls suspend.

WHY ONE GENERIC ENGINE:
- Agency, maid, and sponsor wizards differ only in their FieldSpec and
  PageSpec tables (EntityProfile)
- Collaborators are passed in per session, never module-level singletons
"""

import copy
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from types import MappingProxyType
from typing import Any

from profile_engine.core.config import Settings, settings
from profile_engine.core.logging import mask_destination
from profile_engine.entities.base import EntityProfile
from profile_engine.providers.draft_store.base import DraftStore, draft_key
from profile_engine.providers.errors import SubmissionError
from profile_engine.providers.notification.base import NotificationKind, NotificationSink
from profile_engine.providers.submission.base import ProfileSubmitter
from profile_engine.providers.verification.base import VerificationTransport
from profile_engine.services.completion_score import (
    missing_required_fields,
    score_completion,
)
from profile_engine.services.draft_persistence import DraftPersistence, SaveOutcome
from profile_engine.services.error_aggregation import (
    collect_errors,
    first_error,
    next_error_after,
)
from profile_engine.services.field_validation import FieldValidator
from profile_engine.services.form_types import (
    CompletionResult,
    ContactChannel,
    FieldError,
    FieldSpec,
    FormSnapshot,
)
from profile_engine.services.page_controller import PageController
from profile_engine.services.profile_errors import (
    CodeExpiredError,
    EmptyInputError,
    InvalidCodeError,
    NotOnFinalPageError,
    PageInvalidError,
    PersistenceError,
    ProtectedFieldError,
    SessionClosedError,
    SubmitFailedError,
    SubmitInProgressError,
    TooManyAttemptsError,
    TransportFailureError,
    UnknownFieldError,
)
from profile_engine.services.scheduler import Scheduler
from profile_engine.services.verification import (
    VerificationRecord,
    VerificationState,
    VerificationStateMachine,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EditResult:
    """Outcome of applying one or more field edits.

    Attributes:
        field_errors: Error (or None) for each edited field.
        errors: All current field errors in declaration order.
        completion: Completion after the edit.
    """

    field_errors: dict[str, str | None]
    errors: list[FieldError] = field(default_factory=list)
    completion: CompletionResult | None = None


def _contact_value(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ProfileCompletionEngine:
    """Wizard engine for one profile edit session.

    Args:
        profile: Entity tables (fields, pages, auto-save window).
        draft_store: Durable draft backend.
        transport: Verification code transport.
        notifier: Receives user-visible notifications.
        submitter: Receives the completed profile.
        scheduler: Runs debounced auto-saves.
        profile_id: Existing profile id; drafts of new profiles use the
            anonymous key.
        config: Settings for windows, attempt caps, and TTLs.
        clock: Returns the current UTC time (injectable for tests).
    """

    def __init__(
        self,
        profile: EntityProfile,
        *,
        draft_store: DraftStore,
        transport: VerificationTransport,
        notifier: NotificationSink,
        submitter: ProfileSubmitter,
        scheduler: Scheduler,
        profile_id: str | None = None,
        config: Settings | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        config = config or settings
        self._profile = profile
        self._profile_id = profile_id
        self._notifier = notifier
        self._submitter = submitter
        self._snapshot: FormSnapshot = {}
        self._validator = FieldValidator(profile.fields)
        self._pages = PageController(
            profile.pages,
            profile.fields,
            lambda: self._snapshot,
            validator=self._validator,
        )

        delay = (
            config.long_form_autosave_delay_seconds
            if profile.long_form
            else config.autosave_delay_seconds
        )
        self._persistence = DraftPersistence(
            draft_store,
            draft_key(profile.name, profile_id),
            scheduler,
            notifier,
            delay_seconds=delay,
            max_age=timedelta(days=config.draft_max_age_days),
            skip_empty=config.autosave_skip_empty,
            clock=clock,
        )

        code_ttl = (
            timedelta(minutes=config.verification_code_ttl_minutes)
            if config.verification_code_ttl_minutes > 0
            else None
        )
        self._verifiers: dict[str, VerificationStateMachine] = {
            spec.name: VerificationStateMachine(
                spec.name,
                spec.verification,  # type: ignore[arg-type]
                transport,
                code_length=config.verification_code_length,
                max_attempts=config.verification_max_attempts,
                code_ttl=code_ttl,
                clock=clock,
            )
            for spec in profile.contact_fields
        }
        self._protected_flags = {
            spec.verified_flag: spec.name for spec in profile.contact_fields
        }

        self._submitting = False
        self._closed = False
        self._submitted_profile_id: str | None = None

    # =========================================================================
    # State
    # =========================================================================

    @property
    def profile(self) -> EntityProfile:
        """Entity tables this engine runs on."""
        return self._profile

    @property
    def profile_id(self) -> str | None:
        """Existing profile id, if editing one."""
        return self._profile_id

    @property
    def snapshot(self) -> Mapping[str, Any]:
        """Read-only live view of the form snapshot."""
        return MappingProxyType(self._snapshot)

    @property
    def completion(self) -> CompletionResult:
        """Weighted completion of the current snapshot."""
        return score_completion(self._profile.fields, self._snapshot)

    @property
    def errors(self) -> list[FieldError]:
        """All current field errors in declaration order."""
        return collect_errors(
            self._profile.fields, self._snapshot, validator=self._validator
        )

    @property
    def pages(self) -> PageController:
        """Page controller (read its index, completed pages, validity)."""
        return self._pages

    @property
    def persistence(self) -> DraftPersistence:
        """Draft persistence (read last_saved_at, is_saving, version)."""
        return self._persistence

    @property
    def verification(self) -> dict[str, VerificationRecord]:
        """Verification record per contact field."""
        return {name: machine.record for name, machine in self._verifiers.items()}

    @property
    def is_closed(self) -> bool:
        """Whether the profile has been submitted."""
        return self._closed

    @property
    def is_submitting(self) -> bool:
        """Whether a submit is in flight."""
        return self._submitting

    @property
    def submitted_profile_id(self) -> str | None:
        """Id returned by the submitter, once submitted."""
        return self._submitted_profile_id

    @property
    def missing_required(self) -> list[str]:
        """Required fields not yet complete, in declaration order."""
        return missing_required_fields(self._profile.fields, self._snapshot)

    def next_error(self, after: str | None = None) -> FieldError | None:
        """Error the "jump to error" control should focus next.

        Args:
            after: Currently focused field. None starts at the first error;
                the cursor wraps past the last one.
        """
        errors = self.errors
        if after is None:
            return first_error(errors)
        return next_error_after(errors, after)

    def field_error(self, field_name: str) -> str | None:
        """Current validation error for one field."""
        return self._validator.validate(
            field_name, self._snapshot.get(field_name), self._snapshot
        )

    # =========================================================================
    # Editing
    # =========================================================================

    def apply_edit(self, field_name: str, value: Any) -> EditResult:
        """Set one field value. See apply_edits()."""
        return self.apply_edits({field_name: value})

    def apply_edits(self, changes: Mapping[str, Any]) -> EditResult:
        """Apply field edits, re-validate, re-score, and schedule auto-save.

        Changing a contact field's value resets its verification record to
        IDLE and clears its ``<field>Verified`` flag, whatever state the
        record was in.

        Args:
            changes: Field name -> new value.

        Returns:
            EditResult with per-field errors, all errors, and completion.

        Raises:
            SessionClosedError: If the profile was already submitted.
            ProtectedFieldError: If a ``<field>Verified`` flag is edited.
        """
        self._ensure_open()
        for name in changes:
            if name in self._protected_flags:
                raise ProtectedFieldError(
                    f"'{name}' is set by verifying "
                    f"'{self._protected_flags[name]}' and cannot be edited directly."
                )

        for name, value in changes.items():
            previous = self._snapshot.get(name)
            self._snapshot[name] = value
            machine = self._verifiers.get(name)
            if machine is not None and _contact_value(value) != _contact_value(previous):
                self._invalidate_verification(machine)

        self._schedule_autosave()
        return EditResult(
            field_errors={name: self.field_error(name) for name in changes},
            errors=self.errors,
            completion=self.completion,
        )

    def _invalidate_verification(self, machine: VerificationStateMachine) -> None:
        if machine.state is not VerificationState.IDLE:
            logger.info(
                "Contact field %s changed; verification reset from %s",
                machine.field_name,
                machine.state.value,
            )
            machine.reset()
        self._snapshot[f"{machine.field_name}Verified"] = False

    # =========================================================================
    # Navigation
    # =========================================================================

    def next_page(self) -> int:
        """Advance one page if the current page is valid.

        Returns:
            New page index.

        Raises:
            PageInvalidError: With the current page's errors.
        """
        self._ensure_open()
        try:
            index = self._pages.next()
        except PageInvalidError:
            self._notify_missing_information()
            raise
        self._schedule_autosave(immediate=True)
        return index

    def prev_page(self) -> int:
        """Go back one page (never gated)."""
        self._ensure_open()
        return self._pages.prev()

    def jump_to(self, index: int) -> int:
        """Jump to a page; forward jumps require every earlier page valid.

        Raises:
            PageIndexError: If index is outside the wizard.
            PageInvalidError: With the first blocking page and its errors.
        """
        self._ensure_open()
        before = self._pages.current_index
        try:
            new_index = self._pages.jump_to(index)
        except PageInvalidError:
            self._notify_missing_information()
            raise
        if new_index > before:
            self._schedule_autosave(immediate=True)
        return new_index

    # =========================================================================
    # Verification
    # =========================================================================

    async def request_code(self, field_name: str) -> VerificationRecord:
        """Send (or resend) a verification code for a contact field.

        Raises:
            UnknownFieldError: If the field is not a contact field.
            EmptyInputError: If the field is blank.
            InvalidTransitionError: If a send/check is running or the field
                is already verified.
            TransportFailureError: If the code could not be sent.
        """
        self._ensure_open()
        machine, spec = self._contact(field_name)
        destination = _contact_value(self._snapshot.get(field_name))

        try:
            record = await machine.request_code(destination)
        except EmptyInputError:
            self._notifier.notify(
                NotificationKind.ERROR,
                "Missing Information",
                f"Please enter your {spec.display_name.lower()} first.",
            )
            raise
        except TransportFailureError as e:
            self._notifier.notify(NotificationKind.ERROR, "Send Failed", e.message)
            raise

        if record.state is VerificationState.SENT:
            where = "phone" if spec.verification is ContactChannel.PHONE else "email"
            self._notifier.notify(
                NotificationKind.INFO,
                "Verification Code Sent",
                f"A verification code has been sent to your {where} "
                f"({mask_destination(destination)}).",
            )
        return record

    async def submit_code(self, field_name: str, code: str | None) -> VerificationRecord:
        """Submit a verification code for a contact field.

        On success the field's ``<field>Verified`` flag becomes True and an
        auto-save is scheduled.

        Raises:
            UnknownFieldError: If the field is not a contact field.
            EmptyInputError: If the code is blank.
            InvalidCodeError: On mismatch.
            TooManyAttemptsError: If the attempt cap is reached.
            CodeExpiredError: If the code expired.
            TransportFailureError: If the check could not be performed.
            InvalidTransitionError: If no code is pending.
        """
        self._ensure_open()
        machine, spec = self._contact(field_name)

        try:
            record = await machine.submit_code(code)
        except EmptyInputError:
            self._notifier.notify(
                NotificationKind.ERROR,
                "Missing Code",
                "Please enter the verification code.",
            )
            raise
        except InvalidCodeError as e:
            self._notifier.notify(NotificationKind.ERROR, "Invalid Code", e.message)
            raise
        except (TransportFailureError, TooManyAttemptsError, CodeExpiredError) as e:
            self._notifier.notify(
                NotificationKind.ERROR, "Verification Failed", e.message
            )
            raise

        # The value may have changed while the check was in flight
        if machine.is_verified_for(self._snapshot.get(field_name)):
            self._snapshot[spec.verified_flag] = True  # type: ignore[index]
            self._notifier.notify(
                NotificationKind.INFO,
                "Verification Successful",
                f"Your {spec.display_name.lower()} has been verified.",
            )
            self._schedule_autosave()
        return record

    async def on_code_input(
        self, field_name: str, code: str | None
    ) -> VerificationRecord | None:
        """Auto-submit typed input once it is a complete all-digit code.

        Returns:
            Result of submit_code(), or None if the input is incomplete.
        """
        self._ensure_open()
        machine, _ = self._contact(field_name)
        if not machine.should_auto_submit(code):
            return None
        return await self.submit_code(field_name, code)

    def _contact(self, field_name: str) -> tuple[VerificationStateMachine, FieldSpec]:
        machine = self._verifiers.get(field_name)
        spec = self._profile.field(field_name)
        if machine is None or spec is None:
            raise UnknownFieldError(
                f"'{field_name}' is not a verifiable contact field of "
                f"{self._profile.name} profiles."
            )
        return machine, spec

    # =========================================================================
    # Drafts
    # =========================================================================

    async def save_draft(self, *, silent: bool = False) -> SaveOutcome:
        """Save the draft now (manual save)."""
        self._ensure_open()
        return await self._persistence.save_now(
            self._snapshot,
            page_index=self._pages.current_index,
            silent=silent,
        )

    async def restore_draft(self) -> bool:
        """Load the saved draft into this session.

        Restores the snapshot, VERIFIED records for contact fields whose
        flag was saved as True, and the page (re-gated; lands on the first
        blocking page if an earlier page is no longer valid). Does not
        schedule a save.

        Returns:
            True if a draft was restored.

        Raises:
            PersistenceError: If the store could not be read.
        """
        self._ensure_open()
        envelope = await self._persistence.load()
        if envelope is None:
            return False

        self._persistence.cancel_pending()
        self._snapshot.clear()
        self._snapshot.update(copy.deepcopy(envelope.snapshot))

        for name, machine in self._verifiers.items():
            machine.reset()
            flag = f"{name}Verified"
            value = _contact_value(self._snapshot.get(name))
            if self._snapshot.get(flag) is True and value:
                machine.mark_verified(value)
            elif flag in self._snapshot:
                self._snapshot[flag] = False

        self._restore_page(envelope.page_index)
        logger.info(
            "Restored draft %s (version %d, page %d)",
            self._persistence.key,
            envelope.version,
            self._pages.current_index,
        )
        return True

    def _restore_page(self, page_index: int) -> None:
        target = min(max(page_index, 0), self._pages.last_index)
        self._pages.jump_to(0)
        try:
            self._pages.jump_to(target)
        except PageInvalidError as e:
            self._pages.jump_to(e.page_index)

    async def discard_draft(self) -> None:
        """Cancel pending auto-save and delete the saved draft.

        Raises:
            PersistenceError: If the store could not delete the draft.
        """
        await self._persistence.discard()

    def close(self) -> None:
        """Drop pending auto-save work (session eviction)."""
        self._persistence.cancel_pending()

    # =========================================================================
    # Submission
    # =========================================================================

    async def submit(self) -> str:
        """Submit the completed profile.

        Returns:
            Profile id assigned by the submitter.

        Raises:
            SessionClosedError: If already submitted.
            SubmitInProgressError: If a submit is already running.
            NotOnFinalPageError: If the wizard is not on its last page.
            PageInvalidError: For the first page that is not valid.
            SubmitFailedError: If the submitter failed; session stays open.
        """
        self._ensure_open()
        if self._submitting:
            raise SubmitInProgressError()
        if not self._pages.is_terminal:
            raise NotOnFinalPageError()

        blocking = self._pages.first_invalid_page()
        if blocking is not None:
            self._notify_missing_information()
            raise PageInvalidError(
                blocking,
                self._pages.page_errors(blocking),
                message="Please complete all required fields before submitting.",
            )

        self._submitting = True
        try:
            profile_id = await self._submitter.submit(
                self._profile.name, copy.deepcopy(self._snapshot)
            )
        except SubmissionError as e:
            logger.warning("Profile submit failed for %s: %s", self._profile.name, e)
            self._notifier.notify(
                NotificationKind.ERROR,
                "Submission Failed",
                "Failed to submit your profile. Please try again.",
            )
            raise SubmitFailedError(
                "Failed to submit your profile. Please try again."
            ) from e
        finally:
            self._submitting = False

        self._closed = True
        self._submitted_profile_id = profile_id
        try:
            await self._persistence.discard()
        except PersistenceError:
            logger.warning(
                "Submitted profile %s but could not remove its draft", profile_id
            )
        self._notifier.notify(
            NotificationKind.INFO,
            "Profile Submitted!",
            "Your profile has been submitted successfully.",
        )
        return profile_id

    # =========================================================================
    # Internals
    # =========================================================================

    def _ensure_open(self) -> None:
        if self._closed:
            raise SessionClosedError()

    def _schedule_autosave(self, *, immediate: bool = False) -> None:
        self._persistence.schedule(
            self._snapshot,
            page_index=self._pages.current_index,
            immediate=immediate,
        )

    def _notify_missing_information(self) -> None:
        self._notifier.notify(
            NotificationKind.ERROR,
            "Missing Information",
            "Please fill in all required fields before continuing.",
        )
