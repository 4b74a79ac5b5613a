"""Data models for frames, decoded events, tool calls and requests."""

from .events import (
    StreamEndedEvent,
    StreamEvent,
    StreamFailedEvent,
    StreamStartedEvent,
    TokenEvent,
    ToolCallRequestedEvent,
    ToolResultReceivedEvent,
)
from .frames import Frame
from .request import ConversationItem, StreamRequest
from .streaming import DEBUG_OPTIONS, DEFAULT_OPTIONS, StreamingOptions
from .tools import (
    ToolCall,
    ToolExecution,
    ToolExecutionStatus,
    ToolFunction,
    ToolResult,
)

__all__ = [
    "Frame",
    "StreamEvent",
    "StreamStartedEvent",
    "TokenEvent",
    "ToolCallRequestedEvent",
    "ToolResultReceivedEvent",
    "StreamEndedEvent",
    "StreamFailedEvent",
    "ToolCall",
    "ToolFunction",
    "ToolResult",
    "ToolExecution",
    "ToolExecutionStatus",
    "ConversationItem",
    "StreamRequest",
    "StreamingOptions",
    "DEFAULT_OPTIONS",
    "DEBUG_OPTIONS",
]
