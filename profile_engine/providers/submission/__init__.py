"""Profile submitters."""

from profile_engine.providers.submission.base import ProfileSubmitter
from profile_engine.providers.submission.memory_adapter import InMemoryProfileSubmitter

__all__ = [
    "InMemoryProfileSubmitter",
    "ProfileSubmitter",
]
