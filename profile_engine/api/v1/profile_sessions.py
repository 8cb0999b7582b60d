"""Profile sessions API router.

Drives the profile completion wizard over HTTP. Each session wraps one
ProfileCompletionEngine; every endpoint returns the full session state so
the client can re-render completion, errors, page, verification, and the
auto-save indicator from a single response.

Engine errors (page gate, verification, persistence) propagate to the
ProfileEngineError handler registered in create_app().
"""

from fastapi import APIRouter, status

from profile_engine.api.deps import (
    AppSettings,
    CurrentSession,
    Registry,
    SharedDraftStore,
    SharedSubmitter,
)
from profile_engine.core.errors import ValidationError
from profile_engine.core.responses import DataResponse
from profile_engine.entities import get_entity_profile, list_entity_profiles
from profile_engine.providers.factory import build_collaborators
from profile_engine.providers.notification.recording_adapter import (
    RecordingNotificationSink,
)
from profile_engine.schemas.profile_session import (
    CompletionSchema,
    CreateSessionRequest,
    DraftStatusSchema,
    FieldErrorSchema,
    JumpToPageRequest,
    NextErrorResult,
    NotificationSchema,
    PageSchema,
    SaveDraftRequest,
    SessionState,
    SubmitCodeRequest,
    SubmitResult,
    UpdateFieldsRequest,
    VerificationSchema,
)
from profile_engine.services.profile_completion_engine import ProfileCompletionEngine
from profile_engine.services.session_registry import ProfileSession

router = APIRouter()


# =============================================================================
# Helper Functions
# =============================================================================


def _session_state(session: ProfileSession) -> SessionState:
    """Build the response state and drain pending notifications.

    Args:
        session: The editing session.

    Returns:
        SessionState for the API response.
    """
    engine = session.engine
    controller = engine.pages
    completed = controller.completed_pages
    persistence = engine.persistence

    return SessionState(
        session_id=session.session_id,
        entity=engine.profile.name,
        profile_id=engine.profile_id,
        snapshot=dict(engine.snapshot),
        completion=CompletionSchema.from_result(engine.completion),
        errors=[FieldErrorSchema.from_error(e) for e in engine.errors],
        missing_required=engine.missing_required,
        current_page=controller.current_index,
        pages=[
            PageSchema(
                index=index,
                id=page.id,
                title=page.title,
                fields=sorted(page.field_names),
                valid=controller.is_page_valid(index),
                completed=index in completed,
            )
            for index, page in enumerate(controller.pages)
        ],
        verification={
            name: VerificationSchema.from_record(record)
            for name, record in engine.verification.items()
        },
        draft=DraftStatusSchema(
            last_saved_at=persistence.last_saved_at,
            is_saving=persistence.is_saving,
            has_pending=persistence.has_pending,
            version=persistence.version,
        ),
        closed=engine.is_closed,
        submitted_profile_id=engine.submitted_profile_id,
        notifications=[
            NotificationSchema.from_notification(n) for n in session.notifier.drain()
        ],
    )


# =============================================================================
# Sessions
# =============================================================================


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_profile_session(
    body: CreateSessionRequest,
    registry: Registry,
    config: AppSettings,
    draft_store: SharedDraftStore,
    submitter: SharedSubmitter,
) -> DataResponse[SessionState]:
    """Start a profile editing session.

    Args:
        body: Entity type, optional profile id, and whether to restore a draft.
        registry: Session registry (injected).
        config: Application settings (injected).
        draft_store: Shared draft store (injected).
        submitter: Shared submitter (injected).

    Returns:
        DataResponse with the new session's state.

    Raises:
        ValidationError: If the entity type is unknown.
    """
    try:
        profile = get_entity_profile(body.entity)
    except KeyError:
        raise ValidationError(
            message=f"Unknown entity type '{body.entity}'",
            details=[{"allowed": list_entity_profiles()}],
        ) from None

    notifier = RecordingNotificationSink()
    collaborators = build_collaborators(
        config, draft_store=draft_store, submitter=submitter, notifier=notifier
    )
    engine = ProfileCompletionEngine(
        profile,
        draft_store=collaborators.draft_store,
        transport=collaborators.transport,
        notifier=notifier,
        submitter=collaborators.submitter,
        scheduler=collaborators.scheduler,
        profile_id=body.profile_id,
        config=config,
    )
    if body.restore_draft:
        await engine.restore_draft()

    registry.cleanup_expired()
    session = registry.create(engine, notifier)
    return DataResponse(data=_session_state(session))


@router.get("/{session_id}")
async def read_profile_session(session: CurrentSession) -> DataResponse[SessionState]:
    """Get the current state of a session."""
    return DataResponse(data=_session_state(session))


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_profile_session(session_id: str, registry: Registry) -> None:
    """Close a session. Saved drafts are kept."""
    registry.remove(session_id)


# =============================================================================
# Editing and navigation
# =============================================================================


@router.patch("/{session_id}/fields")
async def update_fields(
    body: UpdateFieldsRequest,
    session: CurrentSession,
) -> DataResponse[SessionState]:
    """Apply field edits and schedule auto-save."""
    session.engine.apply_edits(body.fields)
    return DataResponse(data=_session_state(session))


@router.get("/{session_id}/errors/next")
async def next_field_error(
    session: CurrentSession,
    after: str | None = None,
) -> DataResponse[NextErrorResult]:
    """Field error following ``after`` in declaration order, wrapping around."""
    error = session.engine.next_error(after)
    return DataResponse(
        data=NextErrorResult(
            error=FieldErrorSchema.from_error(error) if error is not None else None
        )
    )


@router.post("/{session_id}/pages/next")
async def next_page(session: CurrentSession) -> DataResponse[SessionState]:
    """Advance one page (gated on the current page's validity)."""
    session.engine.next_page()
    return DataResponse(data=_session_state(session))


@router.post("/{session_id}/pages/prev")
async def prev_page(session: CurrentSession) -> DataResponse[SessionState]:
    """Go back one page."""
    session.engine.prev_page()
    return DataResponse(data=_session_state(session))


@router.post("/{session_id}/pages/jump")
async def jump_to_page(
    body: JumpToPageRequest,
    session: CurrentSession,
) -> DataResponse[SessionState]:
    """Jump to a page (forward jumps gated on all earlier pages)."""
    session.engine.jump_to(body.index)
    return DataResponse(data=_session_state(session))


# =============================================================================
# Verification
# =============================================================================


@router.post("/{session_id}/verification/{field_name}/request")
async def request_verification_code(
    field_name: str,
    session: CurrentSession,
) -> DataResponse[SessionState]:
    """Send (or resend) a verification code for a contact field."""
    await session.engine.request_code(field_name)
    return DataResponse(data=_session_state(session))


@router.post("/{session_id}/verification/{field_name}/submit")
async def submit_verification_code(
    field_name: str,
    body: SubmitCodeRequest,
    session: CurrentSession,
) -> DataResponse[SessionState]:
    """Check a verification code for a contact field."""
    await session.engine.submit_code(field_name, body.code)
    return DataResponse(data=_session_state(session))


# =============================================================================
# Drafts and submission
# =============================================================================


@router.post("/{session_id}/draft/save")
async def save_draft(
    session: CurrentSession,
    body: SaveDraftRequest | None = None,
) -> DataResponse[SessionState]:
    """Save the draft now."""
    silent = body.silent if body is not None else False
    await session.engine.save_draft(silent=silent)
    return DataResponse(data=_session_state(session))


@router.delete("/{session_id}/draft")
async def discard_draft(session: CurrentSession) -> DataResponse[SessionState]:
    """Discard the saved draft (form state in the session is kept)."""
    await session.engine.discard_draft()
    return DataResponse(data=_session_state(session))


@router.post("/{session_id}/submit")
async def submit_profile(session: CurrentSession) -> DataResponse[SubmitResult]:
    """Submit the completed profile and close the session."""
    profile_id = await session.engine.submit()
    return DataResponse(
        data=SubmitResult(
            profile_id=profile_id,
            notifications=[
                NotificationSchema.from_notification(n)
                for n in session.notifier.drain()
            ],
        )
    )
