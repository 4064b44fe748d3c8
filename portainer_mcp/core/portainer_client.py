"""HTTP transport for the Portainer REST API."""

from typing import Any

import httpx
import structlog

from .config_loader import PortainerConnection
from .exceptions import BackendError

logger = structlog.get_logger()

API_KEY_HEADER = "x-api-key"


class PortainerClient:
    """Thin async wrapper around the Portainer REST API.

    Each call opens its own ``httpx.AsyncClient`` from the immutable
    connection settings: the API key header, TLS policy and timeout are fixed
    at construction time.
    """

    def __init__(
        self,
        connection: PortainerConnection,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.connection = connection
        self._transport = transport

    def _build_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.connection.base_url,
            headers={API_KEY_HEADER: self.connection.token, "Accept": "application/json"},
            verify=not self.connection.skip_tls_verify,
            timeout=self.connection.timeout,
            transport=self._transport,
        )

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        """Issue one request and return the decoded JSON body.

        Returns None when the backend answers with no content.

        Raises:
            BackendError: On transport failure, non-success status or an
                undecodable body
        """
        try:
            async with self._build_client() as client:
                response = await client.request(method, path, params=params, json=json)
        except httpx.HTTPError as e:
            logger.debug("Portainer request failed", method=method, path=path, error=str(e))
            raise BackendError(f"{method} {path} failed: {e}") from e

        if response.is_error:
            raise BackendError(
                f"{method} {path} returned {response.status_code}: {_error_message(response)}",
                status_code=response.status_code,
            )

        if response.status_code == httpx.codes.NO_CONTENT or not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise BackendError(f"{method} {path} returned invalid JSON: {e}") from e


def _error_message(response: httpx.Response) -> str:
    """Extract Portainer's error message, falling back to the raw body."""
    try:
        payload = response.json()
    except ValueError:
        return response.text.strip() or response.reason_phrase

    if isinstance(payload, dict):
        message = payload.get("message") or ""
        details = payload.get("details") or ""
        if message and details and details != message:
            return f"{message} ({details})"
        if message or details:
            return message or details
    return response.text.strip() or response.reason_phrase
