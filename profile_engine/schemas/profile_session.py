"""Profile session API request/response schemas.

Pydantic models for the /profile-sessions endpoints. Request schemas use
ConfigDict(extra="forbid") to reject unexpected fields.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from profile_engine.providers.notification.base import Notification
from profile_engine.services.form_types import CompletionResult, FieldError
from profile_engine.services.verification import VerificationRecord

# Guards against pathological request bodies; real forms have ~25 fields.
_MAX_FIELDS_PER_EDIT = 100

# =============================================================================
# Requests
# =============================================================================


class CreateSessionRequest(BaseModel):
    """Start editing a profile."""

    model_config = ConfigDict(extra="forbid")

    entity: str = Field(min_length=1, max_length=50)
    profile_id: str | None = Field(default=None, max_length=100)
    restore_draft: bool = True


class UpdateFieldsRequest(BaseModel):
    """Apply one or more field edits."""

    model_config = ConfigDict(extra="forbid")

    fields: dict[str, Any] = Field(min_length=1, max_length=_MAX_FIELDS_PER_EDIT)


class JumpToPageRequest(BaseModel):
    """Jump directly to a page."""

    model_config = ConfigDict(extra="forbid")

    index: int = Field(ge=0)


class SubmitCodeRequest(BaseModel):
    """Submit a verification code."""

    model_config = ConfigDict(extra="forbid")

    code: str = Field(max_length=20)


class SaveDraftRequest(BaseModel):
    """Manual draft save."""

    model_config = ConfigDict(extra="forbid")

    silent: bool = False


# =============================================================================
# Responses
# =============================================================================


class FieldErrorSchema(BaseModel):
    """One current field error."""

    field: str
    message: str

    @classmethod
    def from_error(cls, error: FieldError) -> "FieldErrorSchema":
        return cls(field=error.field_name, message=error.message)


class GroupCompletionSchema(BaseModel):
    """Completion of one field group."""

    completed_weight: float
    total_weight: float
    percentage: int


class CompletionSchema(BaseModel):
    """Weighted completion with per-group breakdown."""

    percentage: int
    completed_weight: float
    total_weight: float
    groups: dict[str, GroupCompletionSchema]

    @classmethod
    def from_result(cls, result: CompletionResult) -> "CompletionSchema":
        return cls(
            percentage=result.percentage,
            completed_weight=result.completed_weight,
            total_weight=result.total_weight,
            groups={
                name: GroupCompletionSchema(
                    completed_weight=group.completed_weight,
                    total_weight=group.total_weight,
                    percentage=group.percentage,
                )
                for name, group in result.groups.items()
            },
        )


class PageSchema(BaseModel):
    """One wizard page."""

    index: int
    id: str
    title: str
    fields: list[str]
    valid: bool
    completed: bool


class VerificationSchema(BaseModel):
    """Verification record of one contact field (the code is never echoed)."""

    state: str
    attempts: int
    sent_at: datetime | None = None

    @classmethod
    def from_record(cls, record: VerificationRecord) -> "VerificationSchema":
        return cls(
            state=record.state.value,
            attempts=record.attempts,
            sent_at=record.sent_at,
        )


class DraftStatusSchema(BaseModel):
    """Auto-save indicator."""

    last_saved_at: datetime | None = None
    is_saving: bool
    has_pending: bool
    version: int


class NotificationSchema(BaseModel):
    """User-visible notification."""

    kind: str
    title: str
    message: str

    @classmethod
    def from_notification(cls, notification: Notification) -> "NotificationSchema":
        return cls(
            kind=notification.kind.value,
            title=notification.title,
            message=notification.message,
        )


class SessionState(BaseModel):
    """Full state of an editing session."""

    session_id: str
    entity: str
    profile_id: str | None = None
    snapshot: dict[str, Any]
    completion: CompletionSchema
    errors: list[FieldErrorSchema]
    missing_required: list[str]
    current_page: int
    pages: list[PageSchema]
    verification: dict[str, VerificationSchema]
    draft: DraftStatusSchema
    closed: bool
    submitted_profile_id: str | None = None
    notifications: list[NotificationSchema]


class NextErrorResult(BaseModel):
    """Next field for the "jump to error" control (None when error-free)."""

    error: FieldErrorSchema | None = None


class SubmitResult(BaseModel):
    """Result of a successful submit."""

    profile_id: str
    notifications: list[NotificationSchema]
