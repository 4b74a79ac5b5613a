"""
Streaming statistics.

Wraps a caller's callbacks to count tokens, collect error messages and
time the stream from start to end.
"""

from dataclasses import dataclass, field, replace
from typing import Any, List, Optional
import inspect
import time

from .manager import StreamingCallbacks


@dataclass
class StreamingStats:
    """Statistics for one stream."""
    total_tokens: int = 0
    streaming_duration_ms: float = 0.0
    average_token_rate: float = 0.0
    errors: List[str] = field(default_factory=list)

    @property
    def tokens_per_second(self) -> float:
        """Alias of average_token_rate."""
        return self.average_token_rate


async def _call(handler, *args: Any) -> None:
    if handler is None:
        return
    result = handler(*args)
    if inspect.isawaitable(result):
        await result


class StreamingStatsTracker:
    """Collects StreamingStats while forwarding every callback unchanged."""

    def __init__(self, callbacks: Optional[StreamingCallbacks] = None):
        """
        Initialize the tracker.

        Args:
            callbacks: Callbacks to forward to (optional)
        """
        self.callbacks = callbacks or StreamingCallbacks()
        self._stats = StreamingStats()
        self._start_time: Optional[float] = None
        self.wrapped_callbacks = StreamingCallbacks(
            on_start=self._on_start,
            on_token=self._on_token,
            on_tool_call=self.callbacks.on_tool_call,
            on_tool_result=self.callbacks.on_tool_result,
            on_error=self._on_error,
            on_end=self._on_end,
        )

    async def _on_start(self, meta: Any) -> None:
        self._start_time = time.time()
        self._stats.total_tokens = 0
        self._stats.errors = []
        await _call(self.callbacks.on_start, meta)

    async def _on_token(self, text: str) -> None:
        if self._start_time is None:
            # Backend skipped the start event; time from the first token
            self._start_time = time.time()
        self._stats.total_tokens += 1
        await _call(self.callbacks.on_token, text)

    async def _on_error(self, message: str) -> None:
        self._stats.errors.append(message)
        await _call(self.callbacks.on_error, message)

    async def _on_end(self, meta: Any) -> None:
        if self._start_time is not None:
            duration_ms = (time.time() - self._start_time) * 1000
            self._stats.streaming_duration_ms = duration_ms
            self._stats.average_token_rate = (
                self._stats.total_tokens / (duration_ms / 1000) if duration_ms > 0 else 0.0
            )
        await _call(self.callbacks.on_end, meta)

    def get_stats(self) -> StreamingStats:
        """Return a copy of the current statistics."""
        return replace(self._stats, errors=list(self._stats.errors))
