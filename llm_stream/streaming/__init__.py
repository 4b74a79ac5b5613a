"""Streaming decode layer for chunked LLM responses.

This layer handles:
- Frame assembly from arbitrarily split text chunks
- Payload decoding into typed stream events
- Callback dispatch (on_start, on_token, on_tool_call, on_tool_result, on_error, on_end)
- Streaming statistics
"""

from .assembler import FrameAssembler
from .decoder import PayloadDecoder, decode_unicode_escapes, extract_text
from .manager import CallbackManager, StreamingCallbacks
from .stats import StreamingStats, StreamingStatsTracker

__all__ = [
    "FrameAssembler",
    "PayloadDecoder",
    "decode_unicode_escapes",
    "extract_text",
    "CallbackManager",
    "StreamingCallbacks",
    "StreamingStats",
    "StreamingStatsTracker",
]
