"""Collaborator error taxonomy.

Error classes raised by draft stores, verification transports, and profile
submitters.

WHY SEPARATE ERROR CLASSES:
- The engine catches exactly these and nothing broader
- Adapters map library exceptions (SQLAlchemyError, httpx.HTTPError) onto
  them, so engine code stays storage- and transport-agnostic
"""


__all__ = [
    "ProviderError",
    "DraftStoreError",
    "VerificationTransportError",
    "SubmissionError",
]


class ProviderError(Exception):
    """Base class for all collaborator errors.

    All adapter-specific exceptions should be wrapped in a subclass,
    allowing callers to catch all collaborator errors with a single handler.
    """

    pass


class DraftStoreError(ProviderError):
    """Draft could not be read, written, or deleted.

    WHY RECOVERABLE:
    - In-memory form state is untouched
    - The next scheduled save retries with a newer snapshot
    """

    pass


class VerificationTransportError(ProviderError):
    """Code could not be sent or checked (network, service outage)."""

    pass


class SubmissionError(ProviderError):
    """Profile submit endpoint failed or rejected the profile."""

    pass
