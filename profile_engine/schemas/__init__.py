"""Pydantic request/response schemas for the HTTP surface."""

from profile_engine.schemas.profile_session import (
    CompletionSchema,
    CreateSessionRequest,
    DraftStatusSchema,
    FieldErrorSchema,
    JumpToPageRequest,
    NotificationSchema,
    PageSchema,
    SaveDraftRequest,
    SessionState,
    SubmitCodeRequest,
    SubmitResult,
    UpdateFieldsRequest,
    VerificationSchema,
)

__all__ = [
    # Requests
    "CreateSessionRequest",
    "JumpToPageRequest",
    "SaveDraftRequest",
    "SubmitCodeRequest",
    "UpdateFieldsRequest",
    # Responses
    "CompletionSchema",
    "DraftStatusSchema",
    "FieldErrorSchema",
    "NotificationSchema",
    "PageSchema",
    "SessionState",
    "SubmitResult",
    "VerificationSchema",
]
