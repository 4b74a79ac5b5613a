"""
Transport Adapter Interface

A transport issues the streaming HTTP request and exposes the response body
as text chunks. Chunks carry no framing guarantees; the session controller
reassembles frames from them.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Dict, Optional


class Transport(ABC):
    """
    Abstract base class for streaming transports.

    The transport is responsible for:
    - Issuing the request with the given method, headers and JSON body
    - Raising for responses that cannot deliver a stream (non-2xx)
    - Yielding decoded text chunks until the body ends or ``signal`` is set
    - Releasing the connection when iteration stops for any reason

    Transports should NOT parse frames or interpret payloads.
    """

    @abstractmethod
    def open(
        self,
        url: str,
        method: str = "POST",
        headers: Optional[Dict[str, str]] = None,
        body: Optional[Dict[str, Any]] = None,
        signal: Optional[asyncio.Event] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> AsyncIterator[str]:
        """
        Open a stream and return an async iterator of text chunks.

        Args:
            url: Streaming endpoint URL
            method: HTTP method
            headers: Request headers
            body: JSON request body
            signal: Abort signal; once set no further chunks are yielded
            params: Query string parameters

        Raises:
            TransportError: If the backend answers with a non-2xx status
        """
        pass
