"""Profile completion engine error taxonomy.

Every error here is recoverable: the user keeps editing and retries. None
of them is fatal to the process; the worst case is a draft that failed to
persist.

Categories:
    - Verification: EmptyInputError, InvalidCodeError, TransportFailureError,
      TooManyAttemptsError, CodeExpiredError, InvalidTransitionError
    - Persistence: PersistenceError
    - Page gate: PageInvalidError (alias PageGateError), PageIndexError
    - Session: SubmitInProgressError, SubmitFailedError, NotOnFinalPageError,
      SessionClosedError, UnknownFieldError, ProtectedFieldError
"""

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from profile_engine.services.form_types import FieldError


class ProfileEngineError(Exception):
    """Base class for all completion engine errors.

    Attributes:
        code: Machine-readable error code.
        message: Human-readable message, safe to show to the user.
    """

    code = "PROFILE_ENGINE_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# =============================================================================
# Verification
# =============================================================================


class VerificationError(ProfileEngineError):
    """Base class for contact verification failures."""

    code = "VERIFICATION_ERROR"


class EmptyInputError(VerificationError):
    """Contact value or code was blank."""

    code = "EMPTY_INPUT"


class InvalidCodeError(VerificationError):
    """Submitted code did not match; the record is back in Sent.

    Attributes:
        attempts: Failed attempts so far, including this one.
        remaining_attempts: Attempts left before the cap, or None if uncapped.
    """

    code = "INVALID_CODE"

    def __init__(self, attempts: int, remaining_attempts: int | None = None) -> None:
        if remaining_attempts is None:
            message = "The verification code you entered is incorrect. Please try again."
        else:
            noun = "attempt" if remaining_attempts == 1 else "attempts"
            message = f"Invalid code. {remaining_attempts} {noun} remaining."
        super().__init__(message)
        self.attempts = attempts
        self.remaining_attempts = remaining_attempts


class TransportFailureError(VerificationError):
    """Verification service could not be reached; the record is Failed."""

    code = "TRANSPORT_FAILURE"


class TooManyAttemptsError(VerificationError):
    """Attempt cap reached; a new code must be requested."""

    code = "TOO_MANY_ATTEMPTS"

    def __init__(self) -> None:
        super().__init__("Too many failed attempts. Please request a new code.")


class CodeExpiredError(VerificationError):
    """The code was sent too long ago; a new code must be requested."""

    code = "CODE_EXPIRED"

    def __init__(self) -> None:
        super().__init__("Verification code has expired. Please request a new code.")


class InvalidTransitionError(VerificationError):
    """Operation not allowed from the record's current state."""

    code = "INVALID_VERIFICATION_STATE"


# =============================================================================
# Persistence
# =============================================================================


class PersistenceError(ProfileEngineError):
    """Draft could not be read, written, or deleted."""

    code = "PERSISTENCE_ERROR"


# =============================================================================
# Page gating
# =============================================================================


class PageInvalidError(ProfileEngineError):
    """Navigation blocked by a page with missing or invalid fields.

    Attributes:
        page_index: Index of the page that blocks navigation.
        errors: Ordered field errors for that page.
    """

    code = "PAGE_INVALID"

    def __init__(
        self,
        page_index: int,
        errors: Sequence["FieldError"],
        message: str | None = None,
    ) -> None:
        super().__init__(
            message
            or "Please complete the required fields on this page before continuing."
        )
        self.page_index = page_index
        self.errors = list(errors)


PageGateError = PageInvalidError


class PageIndexError(ProfileEngineError):
    """Requested page index is outside the wizard."""

    code = "PAGE_OUT_OF_RANGE"


# =============================================================================
# Session
# =============================================================================


class UnknownFieldError(ProfileEngineError):
    """Field is not a contact field of this entity type."""

    code = "UNKNOWN_FIELD"


class ProtectedFieldError(ProfileEngineError):
    """Field is derived by the engine and cannot be edited directly."""

    code = "PROTECTED_FIELD"


class NotOnFinalPageError(ProfileEngineError):
    """Submit was called before reaching the last page."""

    code = "NOT_ON_FINAL_PAGE"

    def __init__(self) -> None:
        super().__init__("Complete the remaining pages before submitting your profile.")


class SubmitInProgressError(ProfileEngineError):
    """A submit for this session is already running."""

    code = "SUBMIT_IN_PROGRESS"

    def __init__(self) -> None:
        super().__init__("Your profile is already being submitted.")


class SubmitFailedError(ProfileEngineError):
    """The submit endpoint rejected or failed the submission."""

    code = "SUBMIT_FAILED"


class SessionClosedError(ProfileEngineError):
    """Profile was already submitted; the session accepts no more edits."""

    code = "SESSION_CLOSED"

    def __init__(self) -> None:
        super().__init__("This profile has already been submitted.")
