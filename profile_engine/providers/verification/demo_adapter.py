"""Demo verification transport.

Accepts a small fixed set of codes for any destination. Stand-in for a
real one-time-code service in local development and tests; rejected in
production by Settings.
"""

from collections.abc import Iterable
from typing import Any

import structlog

from profile_engine.core.logging import mask_destination
from profile_engine.providers.errors import VerificationTransportError
from profile_engine.providers.verification.base import VerificationTransport
from profile_engine.services.form_types import ContactChannel

logger = structlog.get_logger()

DEFAULT_DEMO_CODES = ("123456", "000000", "111111")


class DemoVerificationTransport(VerificationTransport):
    """Fixed-code transport.

    Attributes:
        accepted_codes: Codes check_code() accepts.
        calls: Record of all method invocations for test assertions.
        fail_sends: When True, send_code() raises VerificationTransportError
            (simulates an SMS/email outage).
        fail_checks: When True, check_code() raises VerificationTransportError.
    """

    def __init__(self, accepted_codes: Iterable[str] = DEFAULT_DEMO_CODES) -> None:
        """Initialize the demo transport.

        Args:
            accepted_codes: Codes to accept. Defaults to the demo set.
        """
        self.accepted_codes = frozenset(accepted_codes)
        self.calls: list[dict[str, Any]] = []
        self.fail_sends = False
        self.fail_checks = False

    @property
    def transport_name(self) -> str:
        """Return 'demo'."""
        return "demo"

    async def send_code(self, channel: ContactChannel, destination: str) -> None:
        """Pretend to send a code; records the call."""
        self.calls.append(
            {"method": "send_code", "channel": channel, "destination": destination}
        )
        if self.fail_sends:
            raise VerificationTransportError("Demo transport configured to fail sends")
        logger.info(
            "Demo verification code sent",
            channel=channel.value,
            destination=mask_destination(destination),
        )

    async def check_code(
        self,
        channel: ContactChannel,
        destination: str,
        code: str,
    ) -> bool:
        """Accept any code in accepted_codes."""
        self.calls.append(
            {
                "method": "check_code",
                "channel": channel,
                "destination": destination,
                "code": code,
            }
        )
        if self.fail_checks:
            raise VerificationTransportError("Demo transport configured to fail checks")
        return code.strip() in self.accepted_codes
