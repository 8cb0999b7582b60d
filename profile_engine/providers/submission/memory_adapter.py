"""In-memory profile submitter.

Keeps submitted profiles in a dict keyed by a generated UUID.
"""

import copy
import uuid
from collections.abc import Mapping
from typing import Any

import structlog

from profile_engine.providers.errors import SubmissionError
from profile_engine.providers.submission.base import ProfileSubmitter

logger = structlog.get_logger()


class InMemoryProfileSubmitter(ProfileSubmitter):
    """Dict-backed submitter.

    Attributes:
        profiles: Submitted profiles as (entity, snapshot), keyed by id.
        fail_submits: When True, submit() raises SubmissionError.
    """

    def __init__(self) -> None:
        self.profiles: dict[str, tuple[str, dict[str, Any]]] = {}
        self.fail_submits = False

    async def submit(self, entity: str, snapshot: Mapping[str, Any]) -> str:
        if self.fail_submits:
            raise SubmissionError("Profile submitter is configured to fail")
        profile_id = str(uuid.uuid4())
        self.profiles[profile_id] = (entity, copy.deepcopy(dict(snapshot)))
        logger.info("Profile submitted", entity=entity, profile_id=profile_id)
        return profile_id
