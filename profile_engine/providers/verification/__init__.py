"""Contact verification transports."""

from profile_engine.providers.verification.base import VerificationTransport
from profile_engine.providers.verification.demo_adapter import (
    DEFAULT_DEMO_CODES,
    DemoVerificationTransport,
)
from profile_engine.providers.verification.http_adapter import HttpVerificationTransport

__all__ = [
    # Base
    "VerificationTransport",
    # Adapters
    "DemoVerificationTransport",
    "HttpVerificationTransport",
    "DEFAULT_DEMO_CODES",
]
