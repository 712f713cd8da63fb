"""Vested Impact HTTP Client.

Low-level client for the Vested Impact data API. Attaches the static
`api-key` credential, builds URLs under the versioned base URL, sends every
call through the resilient transport and maps error statuses to exceptions.
"""

from typing import Any, Dict, Optional
from dataclasses import dataclass, field
from urllib.parse import quote
import logging

from connectors.http_transport import ResilientTransport, RetryConfig, TransportResponse
from core.config import DEFAULT_BASE_URL, Settings
from core.errors import ConfigurationError

logger = logging.getLogger(__name__)


class VIApiError(Exception):
    """Base exception for Vested Impact API errors."""
    def __init__(self, message: str, status_code: int = 0, response_body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class VIAuthenticationError(VIApiError):
    """API key rejected (401/403)."""
    pass


class VINotFoundError(VIApiError):
    """Resource not found (404)."""
    pass


class VIConflictError(VIApiError):
    """Resource already exists (409)."""
    pass


@dataclass
class VIApiConfig:
    """Configuration for the Vested Impact API client."""
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    retry_config: RetryConfig = field(default_factory=RetryConfig)
    timeout_seconds: int = 30

    @classmethod
    def from_settings(cls, settings: Settings) -> "VIApiConfig":
        return cls(
            api_key=settings.api_key,
            base_url=settings.base_url,
            retry_config=RetryConfig(
                max_attempts=settings.max_attempts,
                base_delay=settings.retry_base_delay,
                retry_on_status=settings.retry_on_status,
            ),
            timeout_seconds=settings.timeout_seconds,
        )

    def url(self, path: str) -> str:
        """Absolute URL for a path like '/asset/id/123'."""
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"


def path_segment(value: str) -> str:
    """URL-encode a value used as a single path segment (e.g. a search name)."""
    return quote(str(value), safe="")


class VIApiClient:
    """HTTP client for the Vested Impact API.

    Usage:
        async with VIApiClient(VIApiConfig(api_key=key)) as client:
            body = await client.request_json("GET", "/reference/countries")
    """

    def __init__(self, config: VIApiConfig, transport: Optional[ResilientTransport] = None):
        if not config.api_key:
            raise ConfigurationError("Server configuration error: API key not found")
        self.config = config
        self.transport = transport or ResilientTransport(
            retry_config=config.retry_config,
            timeout_seconds=config.timeout_seconds,
        )

    async def __aenter__(self) -> "VIApiClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    async def close(self) -> None:
        await self.transport.close()

    def _get_headers(self, with_body: bool) -> Dict[str, str]:
        headers = {"api-key": self.config.api_key}
        if with_body:
            headers["Content-Type"] = "application/json"
        return headers

    async def request(
        self,
        method: str,
        path: str,
        data: Optional[Any] = None,
        max_attempts: Optional[int] = None,
    ) -> TransportResponse:
        """Send a request and return the raw response, whatever its status.

        Raises:
            TransientTransportError: Network failure on the last attempt
        """
        return await self.transport.call(
            method,
            self.config.url(path),
            headers=self._get_headers(data is not None),
            json=data,
            max_attempts=max_attempts,
        )

    async def request_json(
        self,
        method: str,
        path: str,
        data: Optional[Any] = None,
        max_attempts: Optional[int] = None,
    ) -> Any:
        """Send a request and decode the JSON body of a 2xx response.

        Returns:
            Decoded body (None for an empty body)

        Raises:
            VIAuthenticationError: 401/403
            VINotFoundError: 404
            VIConflictError: 409
            VIApiError: Any other non-2xx status or an undecodable body
            TransientTransportError: Network failure on the last attempt
        """
        response = await self.request(method, path, data=data, max_attempts=max_attempts)
        raise_for_status(response)
        try:
            return response.json()
        except ValueError as e:
            raise VIApiError(
                f"Invalid JSON from {method} {response.url}: {e}",
                response.status,
                response.text,
            )


def raise_for_status(response: TransportResponse) -> None:
    """Raise the matching VIApiError for a non-2xx response."""
    if response.ok:
        return

    status = response.status
    body = response.text
    if status in (401, 403):
        raise VIAuthenticationError(f"Authentication failed: {body}", status, body)
    if status == 404:
        raise VINotFoundError(f"Resource not found: {response.url}", status, body)
    if status == 409:
        raise VIConflictError(f"Resource already exists: {body}", status, body)
    raise VIApiError(f"API error {status}: {body}", status, body)
