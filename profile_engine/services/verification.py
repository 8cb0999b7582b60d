"""Contact verification state machine.

One VerificationStateMachine per verifiable contact field (phone or email).

States and legal transitions:

    IDLE ──request──▶ SENDING ──ok──▶ SENT ──submit──▶ VERIFYING ──match──▶ VERIFIED
                         │             ▲ │                 │
                         │      resend └─┘◀────mismatch────┘
                         ▼                                 │
                       FAILED ◀──────transport error───────┘
                         │
                         └──request──▶ SENDING   (or reset ──▶ IDLE)

reset() returns to IDLE from any state. It is how the engine enforces
"a verified contact is only valid for the exact value it was verified
against": any change to the field value resets the record.

Each request_code()/reset() bumps a generation counter. A transport call
that returns after its generation was superseded does not touch the
record, so a slow send for an old phone number cannot mark the new one
as Sent or Verified.

Any exception raised by the transport counts as a transport error: the
record moves to FAILED, so the user can always retry.

The machine never edits the form snapshot; the engine flips the
``<field>Verified`` flag when submit_code() returns a VERIFIED record.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime, timedelta
from enum import Enum

from profile_engine.providers.verification.base import VerificationTransport
from profile_engine.services.form_types import ContactChannel
from profile_engine.services.profile_errors import (
    CodeExpiredError,
    EmptyInputError,
    InvalidCodeError,
    InvalidTransitionError,
    TooManyAttemptsError,
    TransportFailureError,
)

logger = logging.getLogger(__name__)

DEFAULT_CODE_LENGTH = 6


class VerificationState(str, Enum):
    """Lifecycle state of one contact verification."""

    IDLE = "idle"
    SENDING = "sending"
    SENT = "sent"
    VERIFYING = "verifying"
    VERIFIED = "verified"
    FAILED = "failed"


_TRANSITIONS: dict[VerificationState, frozenset[VerificationState]] = {
    VerificationState.IDLE: frozenset({VerificationState.SENDING}),
    VerificationState.SENDING: frozenset(
        {VerificationState.SENT, VerificationState.FAILED}
    ),
    VerificationState.SENT: frozenset(
        {VerificationState.SENDING, VerificationState.VERIFYING}
    ),
    VerificationState.VERIFYING: frozenset(
        {VerificationState.VERIFIED, VerificationState.SENT, VerificationState.FAILED}
    ),
    VerificationState.VERIFIED: frozenset(),
    VerificationState.FAILED: frozenset(
        {VerificationState.IDLE, VerificationState.SENDING}
    ),
}


@dataclass(frozen=True)
class VerificationRecord:
    """Snapshot of one field's verification lifecycle.

    Attributes:
        state: Current state.
        code: Last code submitted (empty until the first submit).
        attempts: Failed submits since the last code was sent.
        destination: Contact value the current code was sent to.
        sent_at: When the current code was sent.
    """

    state: VerificationState = VerificationState.IDLE
    code: str = ""
    attempts: int = 0
    destination: str | None = None
    sent_at: datetime | None = None


def _utcnow() -> datetime:
    return datetime.now(UTC)


class VerificationStateMachine:
    """Drives send -> await -> verify for one contact field.

    Args:
        field_name: Snapshot key of the contact field.
        channel: PHONE or EMAIL.
        transport: Sends and checks codes.
        code_length: Expected code length for auto-submit.
        max_attempts: Failed submits allowed per sent code. None = no cap.
        code_ttl: How long a sent code stays valid. None = no expiry.
        clock: Returns the current UTC time (injectable for tests).
    """

    def __init__(
        self,
        field_name: str,
        channel: ContactChannel,
        transport: VerificationTransport,
        *,
        code_length: int = DEFAULT_CODE_LENGTH,
        max_attempts: int | None = None,
        code_ttl: timedelta | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if max_attempts is not None and max_attempts < 1:
            raise ValueError("max_attempts must be at least 1 when set")
        self.field_name = field_name
        self.channel = channel
        self.code_length = code_length
        self._transport = transport
        self._max_attempts = max_attempts
        self._code_ttl = code_ttl
        self._clock = clock
        self._record = VerificationRecord()
        self._generation = 0

    @property
    def record(self) -> VerificationRecord:
        """Current record (immutable snapshot)."""
        return self._record

    @property
    def state(self) -> VerificationState:
        """Current state."""
        return self._record.state

    @property
    def remaining_attempts(self) -> int | None:
        """Submits left for the current code, or None if uncapped."""
        if self._max_attempts is None:
            return None
        return max(self._max_attempts - self._record.attempts, 0)

    def is_verified_for(self, value: object) -> bool:
        """Whether the record is VERIFIED for exactly this contact value."""
        return (
            self._record.state is VerificationState.VERIFIED
            and isinstance(value, str)
            and value.strip() == self._record.destination
        )

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def request_code(self, contact_value: str | None) -> VerificationRecord:
        """Send (or resend) a code to the contact value.

        Args:
            contact_value: Phone number or email address as entered.

        Returns:
            The record after the send: SENT on success. If the request was
            superseded by reset() while in flight, the current record.

        Raises:
            EmptyInputError: If contact_value is blank.
            InvalidTransitionError: If a send or check is already running,
                or the field is already verified.
            TransportFailureError: If the transport failed; record is FAILED.
        """
        destination = (contact_value or "").strip()
        if not destination:
            raise EmptyInputError("Please enter a contact value before requesting a code.")

        self._transition(
            VerificationState.SENDING,
            code="",
            attempts=0,
            destination=destination,
            sent_at=None,
        )
        self._generation += 1
        generation = self._generation

        try:
            await self._transport.send_code(self.channel, destination)
        except Exception as e:
            if generation != self._generation:
                return self._record
            self._transition(VerificationState.FAILED)
            logger.warning(
                "Verification code send failed for %s via %s: %r",
                self.field_name,
                self._transport.transport_name,
                e,
            )
            raise TransportFailureError(
                "Failed to send verification code. Please try again."
            ) from e

        if generation != self._generation:
            logger.debug("Discarding superseded send result for %s", self.field_name)
            return self._record

        self._transition(VerificationState.SENT, sent_at=self._clock())
        return self._record

    async def submit_code(self, code: str | None) -> VerificationRecord:
        """Check a code against the transport's accepted set.

        Args:
            code: Code entered by the user.

        Returns:
            VERIFIED record on match. If superseded by reset() while the
            check was in flight, the current record.

        Raises:
            EmptyInputError: If code is blank.
            InvalidTransitionError: If no code has been sent.
            TooManyAttemptsError: If the attempt cap is reached.
            CodeExpiredError: If the code TTL elapsed; record stays SENT.
            InvalidCodeError: On mismatch; record is back in SENT with
                attempts incremented.
            TransportFailureError: If the check could not be performed.
        """
        entered = (code or "").strip()
        if not entered:
            raise EmptyInputError("Please enter the verification code.")

        if self._record.state is not VerificationState.SENT:
            raise InvalidTransitionError(
                f"No verification code is pending for {self.field_name} "
                f"(state: {self._record.state.value})."
            )
        if self._max_attempts is not None and self._record.attempts >= self._max_attempts:
            raise TooManyAttemptsError()
        if self._is_expired():
            raise CodeExpiredError()

        self._transition(VerificationState.VERIFYING, code=entered)
        generation = self._generation
        destination = self._record.destination or ""

        try:
            accepted = await self._transport.check_code(self.channel, destination, entered)
        except Exception as e:
            if generation != self._generation:
                return self._record
            self._transition(VerificationState.FAILED)
            logger.warning(
                "Verification check failed for %s via %s: %r",
                self.field_name,
                self._transport.transport_name,
                e,
            )
            raise TransportFailureError("Verification failed. Please try again.") from e

        if generation != self._generation:
            logger.debug("Discarding superseded check result for %s", self.field_name)
            return self._record

        if not accepted:
            attempts = self._record.attempts + 1
            self._transition(VerificationState.SENT, attempts=attempts)
            raise InvalidCodeError(attempts, self.remaining_attempts)

        self._transition(VerificationState.VERIFIED)
        logger.info("Contact field %s verified", self.field_name)
        return self._record

    def should_auto_submit(self, code: str | None) -> bool:
        """Whether typed input is a complete code ready to submit."""
        return (
            self._record.state is VerificationState.SENT
            and code is not None
            and len(code) == self.code_length
            and code.isdigit()
        )

    async def on_code_input(self, code: str | None) -> VerificationRecord | None:
        """Auto-submit a complete all-digit code.

        Returns:
            Result of submit_code(), or None if the input is not complete.
        """
        if not self.should_auto_submit(code):
            return None
        return await self.submit_code(code)

    def reset(self) -> None:
        """Return to IDLE and discard any in-flight transport result."""
        self._generation += 1
        self._record = VerificationRecord()

    def mark_verified(self, destination: str) -> None:
        """Restore a VERIFIED record (draft restore of a verified contact)."""
        self._generation += 1
        self._record = VerificationRecord(
            state=VerificationState.VERIFIED,
            destination=destination.strip(),
        )

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _transition(self, target: VerificationState, **changes: object) -> None:
        current = self._record.state
        if target not in _TRANSITIONS[current]:
            raise InvalidTransitionError(
                f"Cannot move {self.field_name} verification "
                f"from {current.value} to {target.value}."
            )
        self._record = replace(self._record, state=target, **changes)

    def _is_expired(self) -> bool:
        sent_at = self._record.sent_at
        if self._code_ttl is None or sent_at is None:
            return False
        return self._clock() - sent_at > self._code_ttl
