"""Abstract base class for profile submitters.

A submitter hands a finished snapshot to whatever owns profiles (a
profiles service, a queue). It returns the id of the created profile.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any


class ProfileSubmitter(ABC):
    """Receives completed profiles."""

    @abstractmethod
    async def submit(self, entity: str, snapshot: Mapping[str, Any]) -> str:
        """Submit a completed profile.

        Args:
            entity: Entity type name (e.g., "agency").
            snapshot: Final form snapshot.

        Returns:
            Identifier assigned to the created profile.

        Raises:
            SubmissionError: If the profile could not be submitted.
        """
        ...
