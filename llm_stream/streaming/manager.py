from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union
import inspect
import logging

from ..models.tools import ToolCall, ToolResult

logger = logging.getLogger(__name__)

# Callbacks may be plain functions or coroutine functions
Callback = Callable[..., Union[None, Awaitable[None]]]


@dataclass
class StreamingCallbacks:
    """Capability set of stream callbacks; every member is optional.

    Attributes:
        on_start: Called with the start metadata
        on_token: Called with each token's text (not the accumulated total)
        on_tool_call: Called with each requested ToolCall
        on_tool_result: Called with each ToolResult
        on_error: Called once with the error message when the stream fails
        on_end: Called once with the end metadata when the stream finishes
    """
    on_start: Optional[Callback] = None
    on_token: Optional[Callback] = None
    on_tool_call: Optional[Callback] = None
    on_tool_result: Optional[Callback] = None
    on_error: Optional[Callback] = None
    on_end: Optional[Callback] = None

    @classmethod
    def from_dict(cls, callbacks: Dict[str, Callback]) -> "StreamingCallbacks":
        """Build from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in callbacks.items() if k in known})

    def provided(self) -> List[str]:
        """Names of the callbacks that are set."""
        return [f.name for f in fields(self) if getattr(self, f.name) is not None]


class CallbackManager:
    """Invokes the callbacks a caller supplied, and only those.

    Once suppressed, nothing is invoked again. Exceptions raised by caller
    code are logged and recorded; they never propagate into the stream loop.
    """

    def __init__(
        self,
        callbacks: Optional[Union[StreamingCallbacks, Dict[str, Callback]]] = None,
    ) -> None:
        if callbacks is None:
            callbacks = StreamingCallbacks()
        elif isinstance(callbacks, dict):
            callbacks = StreamingCallbacks.from_dict(callbacks)
        self.callbacks = callbacks
        self.suppressed = False
        self.errors: List[BaseException] = []

    def suppress(self) -> None:
        """Stop all further callback invocations."""
        self.suppressed = True

    async def _invoke(self, name: str, *args: Any) -> None:
        if self.suppressed:
            return
        handler = getattr(self.callbacks, name)
        if handler is None:
            return
        try:
            result = handler(*args)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            self.errors.append(e)
            logger.exception(f"Callback {name} raised {type(e).__name__}")

    async def emit_start(self, meta: Any) -> None:
        """Emit start event."""
        await self._invoke("on_start", meta)

    async def emit_token(self, text: str) -> None:
        """Emit token event."""
        await self._invoke("on_token", text)

    async def emit_tool_call(self, tool_call: ToolCall) -> None:
        """Emit tool call event."""
        await self._invoke("on_tool_call", tool_call)

    async def emit_tool_result(self, tool_result: ToolResult) -> None:
        """Emit tool result event."""
        await self._invoke("on_tool_result", tool_result)

    async def emit_error(self, message: str) -> None:
        """Emit error event."""
        await self._invoke("on_error", message)

    async def emit_end(self, meta: Any) -> None:
        """Emit end event."""
        await self._invoke("on_end", meta)
