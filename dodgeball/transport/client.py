"""
Dodgeball HTTP Transport

Thin async wrapper around ``httpx`` that performs one request and hands
back either the decoded JSON body or a ``TransportError`` value. Nothing
is raised across this boundary: callers decide what a failed request
means for them.
"""

from dataclasses import dataclass
from typing import Any, Optional, Union

import httpx

from dodgeball.config import get_settings
from dodgeball.logger import ClientLogger


@dataclass
class TransportError:
    """A request that produced no usable response body."""
    message: str
    status_code: Optional[int] = None


TransportResult = Union[dict[str, Any], TransportError]


class HttpTransport:
    """
    Async HTTP transport for the Dodgeball API.

    One ``httpx.AsyncClient`` is created lazily and reused by every
    request, including concurrent ones.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        logger: Optional[ClientLogger] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self.logger = logger or ClientLogger()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        json: Optional[dict[str, Any]] = None,
    ) -> TransportResult:
        """
        Perform a single request.

        Args:
            method: HTTP method
            url: Absolute URL
            headers: Request headers
            json: Optional JSON body

        Returns:
            The decoded JSON object, or a TransportError. A JSON object is
            returned whatever the status code so that error decisions from
            the API reach the caller intact.
        """
        client = await self._get_client()
        try:
            response = await client.request(
                method,
                url,
                headers=headers,
                json=json,
            )
        except httpx.HTTPError as e:
            self.logger.error("%s %s failed: %s", method, url, e)
            return TransportError(str(e) or type(e).__name__)

        try:
            data = response.json()
        except ValueError as e:
            self.logger.error(
                "%s %s returned an undecodable body (HTTP %d): %s",
                method, url, response.status_code, e,
            )
            return TransportError(f"Invalid JSON body: {e}", response.status_code)

        if not isinstance(data, dict):
            self.logger.error(
                "%s %s returned %s instead of an object (HTTP %d)",
                method, url, type(data).__name__, response.status_code,
            )
            return TransportError("Response body is not an object", response.status_code)

        return data
