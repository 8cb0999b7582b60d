"""Collaborator abstraction layer.

Exports:
    Error classes for collaborator error handling
    Factory functions for collaborator instances
"""

from profile_engine.providers.errors import (
    DraftStoreError,
    ProviderError,
    SubmissionError,
    VerificationTransportError,
)
from profile_engine.providers.factory import (
    Collaborators,
    build_collaborators,
    create_draft_store,
    create_verification_transport,
)

__all__ = [
    # Errors
    "ProviderError",
    "DraftStoreError",
    "VerificationTransportError",
    "SubmissionError",
    # Factory
    "Collaborators",
    "build_collaborators",
    "create_draft_store",
    "create_verification_transport",
]
