"""
httpx-based transport.

Streams the response body of a POST to the backend's streaming endpoint
as incrementally decoded text.
"""

import asyncio
from typing import Any, AsyncIterator, Dict, Optional

import httpx

from ..config.constants import DEFAULT_TIMEOUT_SECONDS
from ..errors import TransportError
from ..observability.logging import StreamLogger
from .base import Transport

CONNECT_TIMEOUT_SECONDS = 10.0


class HttpTransport(Transport):
    """Transport over ``httpx.AsyncClient.stream``."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        """
        Initialize the transport.

        Args:
            client: Shared client to stream with; when omitted a short-lived
                client is created for every request
            timeout: Read timeout in seconds for per-request clients
        """
        self.client = client
        self.timeout = timeout
        self.logger = StreamLogger("http")

    async def open(
        self,
        url: str,
        method: str = "POST",
        headers: Optional[Dict[str, str]] = None,
        body: Optional[Dict[str, Any]] = None,
        signal: Optional[asyncio.Event] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> AsyncIterator[str]:
        if self.client is not None:
            async for chunk in self._stream(self.client, url, method, headers, body, signal, params):
                yield chunk
            return

        timeout = httpx.Timeout(self.timeout, connect=min(self.timeout, CONNECT_TIMEOUT_SECONDS))
        async with httpx.AsyncClient(timeout=timeout) as client:
            async for chunk in self._stream(client, url, method, headers, body, signal, params):
                yield chunk

    async def _stream(
        self,
        client: httpx.AsyncClient,
        url: str,
        method: str,
        headers: Optional[Dict[str, str]],
        body: Optional[Dict[str, Any]],
        signal: Optional[asyncio.Event],
        params: Optional[Dict[str, str]],
    ) -> AsyncIterator[str]:
        async with client.stream(method, url, headers=headers, json=body, params=params) as response:
            if not response.is_success:
                detail = await self._read_detail(response)
                self.logger.error(
                    "Stream request rejected",
                    url=url,
                    status_code=response.status_code,
                )
                raise TransportError(
                    f"HTTP error! status: {response.status_code}",
                    status_code=response.status_code,
                    detail=detail,
                    url=url,
                )

            self.logger.debug("Stream opened", url=url, status_code=response.status_code)
            async for chunk in response.aiter_text():
                if signal is not None and signal.is_set():
                    self.logger.debug("Abort signal set, closing stream", url=url)
                    break
                if chunk:
                    yield chunk

    @staticmethod
    async def _read_detail(response: httpx.Response) -> Optional[str]:
        try:
            await response.aread()
            return response.text or None
        except httpx.HTTPError:
            return None
