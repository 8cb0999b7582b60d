"""API v1 router aggregator.

All v1 endpoint routers are included here.
"""

from fastapi import APIRouter

from profile_engine.api.v1 import profile_sessions

router = APIRouter()

# =============================================================================
# Profile completion
# =============================================================================

router.include_router(
    profile_sessions.router,
    prefix="/profile-sessions",
    tags=["profile-sessions"],
)
