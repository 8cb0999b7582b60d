"""Tests for the contact verification state machine.

Uses the demo transport (accepts 123456, 000000, 111111) and a fake clock.
"""

import asyncio
from datetime import timedelta

import pytest

from profile_engine.providers.errors import VerificationTransportError
from profile_engine.providers.verification.demo_adapter import DemoVerificationTransport
from profile_engine.services.form_types import ContactChannel
from profile_engine.services.profile_errors import (
    CodeExpiredError,
    EmptyInputError,
    InvalidCodeError,
    InvalidTransitionError,
    TooManyAttemptsError,
    TransportFailureError,
)
from profile_engine.services.verification import (
    VerificationState,
    VerificationStateMachine,
)
from tests.conftest import VALID_CODE, WRONG_CODE, FakeClock

PHONE = "+971501234567"


@pytest.fixture
def machine(
    demo_transport: DemoVerificationTransport, clock: FakeClock
) -> VerificationStateMachine:
    return VerificationStateMachine(
        "phone", ContactChannel.PHONE, demo_transport, clock=clock
    )


class _GatedTransport(DemoVerificationTransport):
    """Demo transport whose calls wait until released."""

    def __init__(self) -> None:
        super().__init__()
        self.release = asyncio.Event()

    async def send_code(self, channel: ContactChannel, destination: str) -> None:
        await self.release.wait()
        await super().send_code(channel, destination)

    async def check_code(
        self, channel: ContactChannel, destination: str, code: str
    ) -> bool:
        await self.release.wait()
        return await super().check_code(channel, destination, code)


class _CrashingTransport(DemoVerificationTransport):
    """Demo transport raising an unexpected error while crash is set."""

    def __init__(self) -> None:
        super().__init__()
        self.crash = True

    async def send_code(self, channel: ContactChannel, destination: str) -> None:
        if self.crash:
            raise RuntimeError("transport bug")
        await super().send_code(channel, destination)

    async def check_code(
        self, channel: ContactChannel, destination: str, code: str
    ) -> bool:
        if self.crash:
            raise RuntimeError("transport bug")
        return await super().check_code(channel, destination, code)


# =============================================================================
# request_code
# =============================================================================


class TestRequestCode:
    """Tests for request_code()."""

    async def test_sends_code_and_moves_to_sent(
        self,
        machine: VerificationStateMachine,
        demo_transport: DemoVerificationTransport,
        clock: FakeClock,
    ) -> None:
        """Successful send records destination and time."""
        record = await machine.request_code(f"  {PHONE} ")
        assert record.state is VerificationState.SENT
        assert record.destination == PHONE
        assert record.sent_at == clock.now
        assert demo_transport.calls[0]["method"] == "send_code"
        assert demo_transport.calls[0]["destination"] == PHONE

    async def test_empty_value_rejected_without_state_change(
        self, machine: VerificationStateMachine, demo_transport: DemoVerificationTransport
    ) -> None:
        """Blank contact values never reach the transport."""
        with pytest.raises(EmptyInputError):
            await machine.request_code("   ")
        assert machine.state is VerificationState.IDLE
        assert demo_transport.calls == []

    async def test_transport_failure_moves_to_failed(
        self, machine: VerificationStateMachine, demo_transport: DemoVerificationTransport
    ) -> None:
        """Send errors surface as TransportFailureError."""
        demo_transport.fail_sends = True
        with pytest.raises(TransportFailureError) as exc_info:
            await machine.request_code(PHONE)
        assert machine.state is VerificationState.FAILED
        assert isinstance(exc_info.value.__cause__, VerificationTransportError)

    async def test_retry_after_failure(
        self, machine: VerificationStateMachine, demo_transport: DemoVerificationTransport
    ) -> None:
        """FAILED -> SENDING -> SENT on a new request."""
        demo_transport.fail_sends = True
        with pytest.raises(TransportFailureError):
            await machine.request_code(PHONE)
        demo_transport.fail_sends = False
        record = await machine.request_code(PHONE)
        assert record.state is VerificationState.SENT

    async def test_unexpected_send_error_allows_retry(self, clock: FakeClock) -> None:
        """Any transport exception lands in FAILED, never stuck in SENDING."""
        transport = _CrashingTransport()
        machine = VerificationStateMachine(
            "phone", ContactChannel.PHONE, transport, clock=clock
        )
        with pytest.raises(TransportFailureError) as exc_info:
            await machine.request_code(PHONE)
        assert machine.state is VerificationState.FAILED
        assert isinstance(exc_info.value.__cause__, RuntimeError)

        transport.crash = False
        assert (await machine.request_code(PHONE)).state is VerificationState.SENT

    async def test_resend_resets_attempts(
        self, machine: VerificationStateMachine
    ) -> None:
        """A resend from SENT starts a fresh attempt count."""
        await machine.request_code(PHONE)
        with pytest.raises(InvalidCodeError):
            await machine.submit_code(WRONG_CODE)
        assert machine.record.attempts == 1
        record = await machine.request_code(PHONE)
        assert record.attempts == 0
        assert record.state is VerificationState.SENT

    async def test_cannot_request_when_verified(
        self, machine: VerificationStateMachine
    ) -> None:
        """VERIFIED is terminal until reset()."""
        await machine.request_code(PHONE)
        await machine.submit_code(VALID_CODE)
        with pytest.raises(InvalidTransitionError):
            await machine.request_code(PHONE)
        assert machine.state is VerificationState.VERIFIED


# =============================================================================
# submit_code
# =============================================================================


class TestSubmitCode:
    """Tests for submit_code()."""

    async def test_valid_code_verifies(self, machine: VerificationStateMachine) -> None:
        """Accepted code -> VERIFIED for that destination."""
        await machine.request_code(PHONE)
        record = await machine.submit_code(VALID_CODE)
        assert record.state is VerificationState.VERIFIED
        assert record.code == VALID_CODE
        assert machine.is_verified_for(PHONE)
        assert not machine.is_verified_for("+971509999999")

    async def test_wrong_code_returns_to_sent(
        self, machine: VerificationStateMachine
    ) -> None:
        """Mismatch increments attempts and stays retryable."""
        await machine.request_code(PHONE)
        with pytest.raises(InvalidCodeError) as exc_info:
            await machine.submit_code(WRONG_CODE)
        assert exc_info.value.attempts == 1
        assert exc_info.value.remaining_attempts is None
        assert machine.state is VerificationState.SENT
        assert (await machine.submit_code(VALID_CODE)).state is VerificationState.VERIFIED

    async def test_empty_code_rejected(self, machine: VerificationStateMachine) -> None:
        """Blank codes never reach the transport."""
        await machine.request_code(PHONE)
        with pytest.raises(EmptyInputError):
            await machine.submit_code("  ")
        assert machine.state is VerificationState.SENT

    async def test_submit_without_send(self, machine: VerificationStateMachine) -> None:
        """No code pending from IDLE."""
        with pytest.raises(InvalidTransitionError):
            await machine.submit_code(VALID_CODE)

    async def test_check_failure_moves_to_failed(
        self, machine: VerificationStateMachine, demo_transport: DemoVerificationTransport
    ) -> None:
        """Transport errors during check -> FAILED."""
        await machine.request_code(PHONE)
        demo_transport.fail_checks = True
        with pytest.raises(TransportFailureError):
            await machine.submit_code(VALID_CODE)
        assert machine.state is VerificationState.FAILED

    async def test_unexpected_check_error_allows_resend(self, clock: FakeClock) -> None:
        """A crashing check leaves FAILED, never stuck in VERIFYING."""
        transport = _CrashingTransport()
        transport.crash = False
        machine = VerificationStateMachine(
            "phone", ContactChannel.PHONE, transport, clock=clock
        )
        await machine.request_code(PHONE)

        transport.crash = True
        with pytest.raises(TransportFailureError):
            await machine.submit_code(VALID_CODE)
        assert machine.state is VerificationState.FAILED

        transport.crash = False
        await machine.request_code(PHONE)
        assert (await machine.submit_code(VALID_CODE)).state is VerificationState.VERIFIED

    async def test_attempt_cap(
        self, demo_transport: DemoVerificationTransport, clock: FakeClock
    ) -> None:
        """After max_attempts mismatches, a new code is required."""
        machine = VerificationStateMachine(
            "phone", ContactChannel.PHONE, demo_transport, max_attempts=2, clock=clock
        )
        await machine.request_code(PHONE)
        with pytest.raises(InvalidCodeError) as exc_info:
            await machine.submit_code(WRONG_CODE)
        assert exc_info.value.remaining_attempts == 1
        assert exc_info.value.message == "Invalid code. 1 attempt remaining."
        with pytest.raises(InvalidCodeError):
            await machine.submit_code(WRONG_CODE)
        with pytest.raises(TooManyAttemptsError):
            await machine.submit_code(VALID_CODE)

        await machine.request_code(PHONE)
        assert (await machine.submit_code(VALID_CODE)).state is VerificationState.VERIFIED

    async def test_expired_code(
        self, demo_transport: DemoVerificationTransport, clock: FakeClock
    ) -> None:
        """Codes older than the TTL are rejected."""
        machine = VerificationStateMachine(
            "phone",
            ContactChannel.PHONE,
            demo_transport,
            code_ttl=timedelta(minutes=10),
            clock=clock,
        )
        await machine.request_code(PHONE)
        clock.advance(minutes=11)
        with pytest.raises(CodeExpiredError):
            await machine.submit_code(VALID_CODE)
        assert machine.state is VerificationState.SENT

    def test_rejects_invalid_attempt_cap(
        self, demo_transport: DemoVerificationTransport
    ) -> None:
        """max_attempts must allow at least one try."""
        with pytest.raises(ValueError):
            VerificationStateMachine(
                "phone", ContactChannel.PHONE, demo_transport, max_attempts=0
            )


# =============================================================================
# Auto-submit, reset, superseded results
# =============================================================================


class TestAutoSubmit:
    """Tests for should_auto_submit() and on_code_input()."""

    async def test_incomplete_input_not_submitted(
        self, machine: VerificationStateMachine
    ) -> None:
        """Fewer than six digits, or non-digits, wait for more input."""
        await machine.request_code(PHONE)
        assert not machine.should_auto_submit("12345")
        assert not machine.should_auto_submit("12345a")
        assert await machine.on_code_input("123") is None
        assert machine.state is VerificationState.SENT

    async def test_complete_code_submitted(
        self, machine: VerificationStateMachine
    ) -> None:
        """Six digits submit automatically."""
        await machine.request_code(PHONE)
        record = await machine.on_code_input(VALID_CODE)
        assert record is not None
        assert record.state is VerificationState.VERIFIED

    def test_no_auto_submit_before_send(self, machine: VerificationStateMachine) -> None:
        """Nothing to submit from IDLE."""
        assert not machine.should_auto_submit(VALID_CODE)


class TestReset:
    """Tests for reset() and superseded transport results."""

    async def test_reset_from_verified(self, machine: VerificationStateMachine) -> None:
        """reset() returns to a blank IDLE record."""
        await machine.request_code(PHONE)
        await machine.submit_code(VALID_CODE)
        machine.reset()
        assert machine.state is VerificationState.IDLE
        assert machine.record.destination is None
        assert not machine.is_verified_for(PHONE)

    async def test_superseded_send_discarded(self) -> None:
        """A send that completes after reset() does not mark the record SENT."""
        transport = _GatedTransport()
        machine = VerificationStateMachine("phone", ContactChannel.PHONE, transport)
        task = asyncio.create_task(machine.request_code(PHONE))
        await asyncio.sleep(0)
        assert machine.state is VerificationState.SENDING

        machine.reset()
        transport.release.set()
        record = await task
        assert record.state is VerificationState.IDLE
        assert machine.state is VerificationState.IDLE

    async def test_superseded_check_discarded(self) -> None:
        """A check that completes after reset() does not verify."""
        transport = _GatedTransport()
        transport.release.set()
        machine = VerificationStateMachine("phone", ContactChannel.PHONE, transport)
        await machine.request_code(PHONE)

        transport.release.clear()
        task = asyncio.create_task(machine.submit_code(VALID_CODE))
        await asyncio.sleep(0)
        assert machine.state is VerificationState.VERIFYING

        machine.reset()
        transport.release.set()
        await task
        assert machine.state is VerificationState.IDLE

    async def test_concurrent_request_rejected(self) -> None:
        """A second request while SENDING is an invalid transition."""
        transport = _GatedTransport()
        machine = VerificationStateMachine("phone", ContactChannel.PHONE, transport)
        task = asyncio.create_task(machine.request_code(PHONE))
        await asyncio.sleep(0)
        with pytest.raises(InvalidTransitionError):
            await machine.request_code(PHONE)
        transport.release.set()
        assert (await task).state is VerificationState.SENT

    def test_mark_verified(self, machine: VerificationStateMachine) -> None:
        """Restored records are VERIFIED for the stripped destination."""
        machine.mark_verified(f" {PHONE} ")
        assert machine.is_verified_for(PHONE)
