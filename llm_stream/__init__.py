"""
LLM Stream - Incremental decoder for streaming LLM chat responses.

This package consumes the chunked response body of a streaming LLM backend
and turns it into ordered, typed events:
- Text tokens
- Tool call requests and tool results
- Start, end and failure markers

Features:
- Tolerant frame assembly (missing terminators, double data prefixes, bare lines)
- Fallback payload decoding for OpenAI-style and flat JSON shapes
- Tool execution lifecycle tracking
- Cancellable sessions with ordered callbacks
"""

__version__ = "0.1.0"

from .errors import SessionStateError, StreamingError, TransportError
from .models.events import (
    StreamEndedEvent,
    StreamEvent,
    StreamFailedEvent,
    StreamStartedEvent,
    TokenEvent,
    ToolCallRequestedEvent,
    ToolResultReceivedEvent,
)
from .models.frames import Frame
from .models.request import ConversationItem, StreamRequest
from .models.streaming import StreamingOptions
from .models.tools import ToolCall, ToolExecution, ToolExecutionStatus, ToolResult
from .session.controller import CancelHandle, StreamSessionController
from .session.state import SessionStatus, StreamSession
from .streaming.assembler import FrameAssembler
from .streaming.decoder import PayloadDecoder
from .streaming.manager import StreamingCallbacks
from .streaming.stats import StreamingStats, StreamingStatsTracker
from .tools.tracker import ToolExecutionTracker
from .transport.base import Transport
from .transport.http import HttpTransport

__all__ = [
    # Session
    "StreamSessionController",
    "CancelHandle",
    "StreamSession",
    "SessionStatus",
    "StreamingCallbacks",

    # Pipeline
    "FrameAssembler",
    "PayloadDecoder",
    "ToolExecutionTracker",

    # Transport
    "Transport",
    "HttpTransport",

    # Models
    "Frame",
    "StreamEvent",
    "StreamStartedEvent",
    "TokenEvent",
    "ToolCallRequestedEvent",
    "ToolResultReceivedEvent",
    "StreamEndedEvent",
    "StreamFailedEvent",
    "ToolCall",
    "ToolResult",
    "ToolExecution",
    "ToolExecutionStatus",
    "StreamRequest",
    "ConversationItem",
    "StreamingOptions",

    # Stats
    "StreamingStats",
    "StreamingStatsTracker",

    # Errors
    "StreamingError",
    "TransportError",
    "SessionStateError",
]
