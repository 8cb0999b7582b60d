"""Built-in entity profiles.

Each entity type is a configuration table consumed by the generic
ProfileCompletionEngine:
- agency.py: AGENCY_PROFILE (long-form auto-save)
- maid.py: MAID_PROFILE
- sponsor.py: SPONSOR_PROFILE
"""

from profile_engine.entities.agency import AGENCY_PROFILE
from profile_engine.entities.base import EntityProfile, build_profile
from profile_engine.entities.maid import MAID_PROFILE
from profile_engine.entities.sponsor import SPONSOR_PROFILE

_PROFILES: dict[str, EntityProfile] = {
    profile.name: profile
    for profile in (AGENCY_PROFILE, MAID_PROFILE, SPONSOR_PROFILE)
}


def get_entity_profile(name: str) -> EntityProfile:
    """Look up a built-in entity profile.

    Args:
        name: Entity type name ("agency", "maid", "sponsor").

    Returns:
        The EntityProfile.

    Raises:
        KeyError: If the entity type is unknown.
    """
    try:
        return _PROFILES[name]
    except KeyError:
        raise KeyError(f"Unknown entity type: {name}") from None


def list_entity_profiles() -> list[str]:
    """Names of the built-in entity profiles, sorted."""
    return sorted(_PROFILES)


__all__ = [
    "AGENCY_PROFILE",
    "EntityProfile",
    "MAID_PROFILE",
    "SPONSOR_PROFILE",
    "build_profile",
    "get_entity_profile",
    "list_entity_profiles",
]
