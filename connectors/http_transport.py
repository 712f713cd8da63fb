"""Resilient HTTP transport.

Generic retry decorator over a single request/response exchange:
- Retries responses whose status is in RetryConfig.retry_on_status
- Retries network failures (connection errors, timeouts)
- Linear backoff: attempt * base_delay

On exhaustion the caller gets the last response, or the last
TransientTransportError. Interpreting status codes is left to the caller.
"""

from typing import Any, Dict, Optional, Tuple
from dataclasses import dataclass, field
import json
import asyncio
import logging

import aiohttp

from core.config import DEFAULT_RETRY_STATUSES
from core.errors import TransientTransportError
from core.observability.metrics import record_transport_retry

logger = logging.getLogger(__name__)


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""
    max_attempts: int = 4  # first try + 3 retries
    base_delay: float = 1.0  # seconds
    max_delay: float = 30.0  # seconds
    retry_on_status: Tuple[int, ...] = field(default=DEFAULT_RETRY_STATUSES)

    def get_delay(self, attempt: int) -> float:
        """Delay before the retry that follows `attempt` (1-based, linear backoff)."""
        return min(attempt * self.base_delay, self.max_delay)

    def is_retryable(self, status: int) -> bool:
        return status in self.retry_on_status


@dataclass
class TransportResponse:
    """A fully read HTTP response."""
    status: int
    url: str
    text: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    attempts: int = 1

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        """Decode the body as JSON; an empty body decodes to None."""
        if not self.text:
            return None
        return json.loads(self.text)


class ResilientTransport:
    """HTTP transport with bounded retry and linear backoff.

    Usage:
        async with ResilientTransport(RetryConfig(max_attempts=5)) as transport:
            response = await transport.call("GET", url, headers={"api-key": key})
            if response.ok:
                data = response.json()

    A session can be injected (tests, shared pools); an injected session is
    not closed by the transport.
    """

    def __init__(
        self,
        retry_config: Optional[RetryConfig] = None,
        timeout_seconds: int = 30,
        session: Optional[Any] = None,
    ):
        self.retry_config = retry_config or RetryConfig()
        self.timeout_seconds = timeout_seconds
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "ResilientTransport":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP session if this transport created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    def _get_session(self):
        if self._session is None:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def _send(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]],
        body: Optional[Any],
        params: Optional[Dict[str, str]],
    ) -> TransportResponse:
        """Perform one exchange. Network failures become TransientTransportError."""
        session = self._get_session()
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        try:
            async with session.request(
                method,
                url,
                headers=headers,
                params=params,
                json=body,
                timeout=timeout,
            ) as response:
                text = await response.text()
                return TransportResponse(
                    status=response.status,
                    url=str(response.url),
                    text=text,
                    headers=dict(response.headers),
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransientTransportError(f"{type(e).__name__}: {e}", url=url) from e

    async def call(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        json: Optional[Any] = None,
        params: Optional[Dict[str, str]] = None,
        max_attempts: Optional[int] = None,
    ) -> TransportResponse:
        """Send a request, retrying transient failures.

        Args:
            method: HTTP method
            url: Absolute URL
            headers: Request headers
            json: JSON-serializable body
            params: Query parameters
            max_attempts: Override RetryConfig.max_attempts for this call

        Returns:
            The first non-retryable response, or the last response once
            attempts are exhausted

        Raises:
            TransientTransportError: The final attempt failed at network level
        """
        attempts = max(1, max_attempts or self.retry_config.max_attempts)

        for attempt in range(1, attempts + 1):
            try:
                response = await self._send(method, url, headers, json, params)
            except TransientTransportError as e:
                if attempt >= attempts:
                    raise
                delay = self.retry_config.get_delay(attempt)
                logger.warning(
                    f"[Retry] attempt {attempt + 1}/{attempts} | {method} {url} | "
                    f"{e}, retrying in {delay:.1f}s"
                )
                record_transport_retry(None)
                await asyncio.sleep(delay)
                continue

            response.attempts = attempt
            if self.retry_config.is_retryable(response.status) and attempt < attempts:
                delay = self.retry_config.get_delay(attempt)
                logger.warning(
                    f"[Retry] attempt {attempt + 1}/{attempts} | {method} {response.url} | "
                    f"Status: {response.status}, retrying in {delay:.1f}s"
                )
                record_transport_retry(response.status)
                await asyncio.sleep(delay)
                continue

            return response

        # Unreachable: the loop either returns or raises on the last attempt
        raise TransientTransportError(f"Request failed: {method} {url}", url=url)
