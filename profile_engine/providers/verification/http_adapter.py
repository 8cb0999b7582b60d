"""HTTP verification transport.

Talks to an external one-time-code service:

    POST {base_url}/send   {"channel": "phone", "destination": "+9715..."}
    POST {base_url}/check  {"channel": "phone", "destination": "...", "code": "123456"}
                           -> {"valid": true}

Any network error or non-2xx status is a VerificationTransportError. A
2xx response with ``"valid": false`` is a wrong code, not a failure.
"""

import httpx
import structlog

from profile_engine.core.logging import mask_destination
from profile_engine.providers.errors import VerificationTransportError
from profile_engine.providers.verification.base import VerificationTransport
from profile_engine.services.form_types import ContactChannel

logger = structlog.get_logger()

_DEFAULT_TIMEOUT = 10.0


class HttpVerificationTransport(VerificationTransport):
    """Verification transport backed by an HTTP service.

    Args:
        base_url: Service root, without trailing slash.
        api_key: Bearer token sent with every request (empty to omit).
        timeout: Per-request timeout in seconds.
        client: Optional shared httpx.AsyncClient (tests inject one with a
            MockTransport). When None, a client is opened per call.
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_key: str = "",
        timeout: float = _DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._client = client

    @property
    def transport_name(self) -> str:
        """Return 'http'."""
        return "http"

    async def send_code(self, channel: ContactChannel, destination: str) -> None:
        """POST /send."""
        await self._post(
            "send",
            {"channel": channel.value, "destination": destination},
        )
        logger.info(
            "Verification code sent",
            channel=channel.value,
            destination=mask_destination(destination),
        )

    async def check_code(
        self,
        channel: ContactChannel,
        destination: str,
        code: str,
    ) -> bool:
        """POST /check and read ``valid`` from the response body."""
        body = await self._post(
            "check",
            {"channel": channel.value, "destination": destination, "code": code},
        )
        return body.get("valid") is True

    async def _post(self, action: str, payload: dict[str, str]) -> dict:
        url = f"{self._base_url}/{action}"
        headers = {}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        try:
            if self._client is not None:
                resp = await self._client.post(
                    url, json=payload, headers=headers, timeout=self._timeout
                )
            else:
                async with httpx.AsyncClient() as client:
                    resp = await client.post(
                        url, json=payload, headers=headers, timeout=self._timeout
                    )
            resp.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(
                "Verification service request failed",
                action=action,
                channel=payload["channel"],
                destination=mask_destination(payload["destination"]),
                error=type(e).__name__,
            )
            raise VerificationTransportError(
                f"Verification service {action} request failed"
            ) from e

        if not resp.content:
            return {}
        try:
            body = resp.json()
        except ValueError as e:
            raise VerificationTransportError(
                f"Verification service returned invalid JSON for {action}"
            ) from e
        return body if isinstance(body, dict) else {}
