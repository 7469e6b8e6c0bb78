"""Base HTTP client and fetch error taxonomy."""

import asyncio
import json
from typing import Any, Dict, Optional

import aiohttp

from ..utils.logger import get_logger

logger = get_logger(__name__)


class FetchError(Exception):
    """Base class for every failure talking to LingQ or AnkiConnect."""


class TransportError(FetchError):
    """Connection, DNS, TLS or timeout failure."""


class HTTPStatusError(FetchError):
    """Server answered with a non-2xx status."""

    def __init__(self, status: int, body: str, url: str = "") -> None:
        self.status = status
        self.body = body
        self.url = url
        message = f"HTTP {status} from {url}"
        if body:
            message = f"{message}: {body[:200]}"
        super().__init__(message)


class DeserializationError(FetchError):
    """Response body does not have the expected shape."""


class AnkiConnectError(FetchError):
    """AnkiConnect reported an error inside a successful HTTP response."""

    def __init__(self, action: str, message: str) -> None:
        self.action = action
        self.message = message
        super().__init__(f"AnkiConnect {action}: {message}")


class BaseClient:
    """
    Shared aiohttp session handling for API clients.

    Provides lazy session creation, lifecycle management and async context
    manager support. Subclasses add one method per API capability.
    """

    def __init__(self, base_url: str, timeout: int = 60, headers: Optional[Dict[str, str]] = None):
        """
        Initialize the client.

        Args:
            base_url: API root URL
            timeout: Total request timeout in seconds
            headers: Headers sent with every request
        """
        self.base_url = base_url
        self.timeout = timeout
        self._headers = dict(headers or {})
        self._session: Optional[aiohttp.ClientSession] = None
        self._session_lock = asyncio.Lock()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the shared session (connection pooling)."""
        async with self._session_lock:
            if self._session is None or self._session.closed:
                self._session = aiohttp.ClientSession(
                    headers=self._headers,
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                )
            return self._session

    async def close(self) -> None:
        """Close the aiohttp session. Call this when done with the client."""
        async with self._session_lock:
            if self._session and not self._session.closed:
                await self._session.close()
                self._session = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _request_json(self, method: str, url: str, **kwargs: Any) -> Any:
        """
        Perform a request and decode the JSON body.

        Raises:
            TransportError: the request never produced a response
            HTTPStatusError: the response status is not 2xx
            DeserializationError: the body is not valid JSON
        """
        session = await self._get_session()
        try:
            async with session.request(method, url, **kwargs) as response:
                body = await response.text()
                status = response.status
        except asyncio.TimeoutError as e:
            raise TransportError(f"Timed out after {self.timeout}s: {method} {url}") from e
        except aiohttp.ClientError as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

        if not 200 <= status < 300:
            logger.warning("%s %s -> HTTP %d", method, url, status)
            raise HTTPStatusError(status, body, url)

        try:
            return json.loads(body)
        except ValueError as e:
            raise DeserializationError(f"Invalid JSON from {url}: {e}") from e
