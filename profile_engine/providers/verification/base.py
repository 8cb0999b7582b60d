"""Abstract base class for contact verification transports.

A transport sends one-time codes and checks submitted codes against a
backend-defined accepted set. The engine never embeds the code check.
"""

from abc import ABC, abstractmethod

from profile_engine.services.form_types import ContactChannel


class VerificationTransport(ABC):
    """Sends and checks one-time codes.

    Implementations raise VerificationTransportError on transport failure.
    A wrong code is not a transport failure: check_code() returns False.
    """

    @property
    @abstractmethod
    def transport_name(self) -> str:
        """Short identifier used in logs (e.g., "demo", "http")."""
        ...

    @abstractmethod
    async def send_code(self, channel: ContactChannel, destination: str) -> None:
        """Send a code to a phone number or email address.

        Args:
            channel: PHONE or EMAIL.
            destination: Contact value exactly as entered.

        Raises:
            VerificationTransportError: If the code could not be sent.
        """
        ...

    @abstractmethod
    async def check_code(
        self,
        channel: ContactChannel,
        destination: str,
        code: str,
    ) -> bool:
        """Check a submitted code.

        Args:
            channel: PHONE or EMAIL.
            destination: Contact value the code was sent to.
            code: Code entered by the user.

        Returns:
            True if the code is accepted.

        Raises:
            VerificationTransportError: If the check could not be performed.
        """
        ...
