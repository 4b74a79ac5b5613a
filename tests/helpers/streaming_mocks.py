"""Helpers for creating streaming mocks."""

import asyncio
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

from llm_stream.streaming.manager import StreamingCallbacks
from llm_stream.transport.base import Transport


def sse_frame(data: str, event: Optional[str] = None) -> str:
    """Serialize one frame with its blank-line terminator."""
    lines = []
    if event:
        lines.append(f"event: {event}")
    lines.append(f"data: {data}")
    return "\n".join(lines) + "\n\n"


def split_every(text: str, size: int) -> List[str]:
    """Split text into chunks of ``size`` characters."""
    return [text[i:i + size] for i in range(0, len(text), size)]


class FakeTransport(Transport):
    """Transport that yields canned chunks and records each request."""

    def __init__(
        self,
        chunks: Optional[List[str]] = None,
        error: Optional[BaseException] = None,
        hold_open: bool = False,
        delay: float = 0.0,
    ):
        """
        Args:
            chunks: Text chunks to yield, in order
            error: Raised after the chunks are exhausted
            hold_open: Block after the last chunk until the reader gives up
            delay: Seconds to sleep before each chunk
        """
        self.chunks = list(chunks or [])
        self.error = error
        self.hold_open = hold_open
        self.delay = delay
        self.requests: List[Dict[str, Any]] = []
        self.chunks_yielded = 0
        self.closed = False

    async def open(self, url, method="POST", headers=None, body=None,
                   signal=None, params=None) -> AsyncIterator[str]:
        self.requests.append({
            "url": url,
            "method": method,
            "headers": headers,
            "body": body,
            "params": params,
            "signal": signal,
        })
        try:
            for chunk in self.chunks:
                if self.delay:
                    await asyncio.sleep(self.delay)
                self.chunks_yielded += 1
                yield chunk
            if self.error is not None:
                raise self.error
            if self.hold_open:
                await asyncio.Event().wait()
        finally:
            self.closed = True


class RecordingCallbacks:
    """Records every callback invocation as ``(name, argument)``."""

    def __init__(self):
        self.calls: List[Tuple[str, Any]] = []

    def _record(self, name: str):
        def handler(arg=None):
            self.calls.append((name, arg))
        return handler

    def as_callbacks(self) -> StreamingCallbacks:
        return StreamingCallbacks(
            on_start=self._record("start"),
            on_token=self._record("token"),
            on_tool_call=self._record("tool_call"),
            on_tool_result=self._record("tool_result"),
            on_error=self._record("error"),
            on_end=self._record("end"),
        )

    @property
    def names(self) -> List[str]:
        return [name for name, _ in self.calls]

    def of(self, name: str) -> List[Any]:
        return [arg for n, arg in self.calls if n == name]
