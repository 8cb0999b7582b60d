"""API error classes.

HTTP status codes and error codes returned by the profile session API.

WHY CUSTOM ERROR CLASSES:
- Consistent error response format across all endpoints
- Easy to map to HTTP status codes in exception handlers
- Domain errors from the completion engine are translated into these in
  one place (to_api_error) instead of in every endpoint
"""

from profile_engine.services.profile_errors import (
    CodeExpiredError,
    EmptyInputError,
    InvalidCodeError,
    InvalidTransitionError,
    NotOnFinalPageError,
    PageIndexError,
    PageInvalidError,
    PersistenceError,
    ProfileEngineError,
    ProtectedFieldError,
    SessionClosedError,
    SubmitFailedError,
    SubmitInProgressError,
    TooManyAttemptsError,
    TransportFailureError,
    UnknownFieldError,
)


class APIError(Exception):
    """Base class for API errors.

    All API errors have a code, message, and HTTP status.
    Subclasses set default status_code.

    Attributes:
        code: Machine-readable error code (e.g., "NOT_FOUND").
        message: Human-readable error message.
        status_code: HTTP status code to return.
        details: Optional list of additional error details.
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: list[dict] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class ValidationError(APIError):
    """Request or field validation failed (400).

    Accepts a custom code so engine errors (EMPTY_INPUT, INVALID_CODE)
    keep their machine-readable identity.
    """

    def __init__(
        self,
        message: str,
        details: list[dict] | None = None,
        code: str = "VALIDATION_ERROR",
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            status_code=400,
            details=details,
        )


class NotFoundError(APIError):
    """Resource not found (404)."""

    def __init__(self, resource: str, resource_id: str | None = None) -> None:
        if resource_id:
            message = f"{resource} with id '{resource_id}' not found"
        else:
            message = f"{resource} not found"
        super().__init__(
            code="NOT_FOUND",
            message=message,
            status_code=404,
        )


class ConflictError(APIError):
    """Conflicting state (409).

    Use for double submits, closed sessions, and out-of-order verification
    steps. Accepts custom code for specific conflict types.
    """

    def __init__(
        self,
        code: str,
        message: str,
        details: list[dict] | None = None,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details,
        )


class InvalidStateError(APIError):
    """Business rule violation (422).

    Use when request is syntactically valid but the wizard cannot proceed,
    e.g. navigating past a page with missing required fields.
    """

    def __init__(
        self,
        message: str,
        code: str = "INVALID_STATE_TRANSITION",
        details: list[dict] | None = None,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details,
        )


class TooManyRequestsError(APIError):
    """Attempt limit reached (429)."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(
            code=code,
            message=message,
            status_code=429,
        )


class ServiceUnavailableError(APIError):
    """A collaborator (verification service, draft store) failed (503)."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(
            code=code,
            message=message,
            status_code=503,
        )


class InternalError(APIError):
    """Unexpected server error (500).

    Use for unhandled exceptions. Never expose stack traces to clients.
    """

    def __init__(self, message: str = "An unexpected error occurred") -> None:
        super().__init__(
            code="INTERNAL_ERROR",
            message=message,
            status_code=500,
        )


def to_api_error(exc: ProfileEngineError) -> APIError:
    """Translate a completion engine error into an API error.

    Args:
        exc: Domain error raised by the engine or one of its components.

    Returns:
        APIError carrying the domain error's code and message.
    """
    if isinstance(exc, PageInvalidError):
        return InvalidStateError(
            message=exc.message,
            code=exc.code,
            details=[
                {"field": error.field_name, "message": error.message}
                for error in exc.errors
            ]
            or None,
        )
    if isinstance(exc, InvalidCodeError):
        return ValidationError(
            message=exc.message,
            code=exc.code,
            details=[
                {
                    "attempts": exc.attempts,
                    "remaining_attempts": exc.remaining_attempts,
                }
            ],
        )
    if isinstance(exc, (EmptyInputError, UnknownFieldError, ProtectedFieldError, PageIndexError)):
        return ValidationError(message=exc.message, code=exc.code)
    if isinstance(exc, (CodeExpiredError, NotOnFinalPageError)):
        return InvalidStateError(message=exc.message, code=exc.code)
    if isinstance(exc, TooManyAttemptsError):
        return TooManyRequestsError(code=exc.code, message=exc.message)
    if isinstance(exc, (TransportFailureError, PersistenceError, SubmitFailedError)):
        return ServiceUnavailableError(code=exc.code, message=exc.message)
    if isinstance(exc, (InvalidTransitionError, SubmitInProgressError, SessionClosedError)):
        return ConflictError(code=exc.code, message=exc.message)
    return InternalError()
