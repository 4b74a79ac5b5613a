"""
Payload decoder for assembled frames.

Turns a frame's raw data into typed stream events. Backends disagree on
payload shape, so text extraction is an explicit, ordered fallback chain
and every failure degrades to the most conservative interpretation
instead of raising.
"""

from typing import Any, List, Optional
import json
import logging
import re

from ..config.constants import (
    DEFAULT_EVENT_TYPE,
    TOKEN_EVENT_TYPES,
    TOOL_CALL_EVENT_TYPES,
    TOOL_RESULT_EVENT_TYPES,
    UNKNOWN_STREAM_ERROR,
)
from ..models.events import (
    StreamEndedEvent,
    StreamEvent,
    StreamFailedEvent,
    StreamStartedEvent,
    TokenEvent,
    ToolCallRequestedEvent,
    ToolResultReceivedEvent,
)
from ..models.frames import Frame
from ..models.tools import ToolCall, ToolResult

logger = logging.getLogger(__name__)

_UNICODE_ESCAPE = re.compile(r"\\u[0-9a-fA-F]{4}")


def decode_unicode_escapes(value: str) -> str:
    """
    Re-decode ``\\uXXXX`` sequences left in an already decoded string.

    Some backend paths JSON-encode a field twice, so the text still carries
    literal escape sequences after the first parse. Never raises: the raw
    value is returned when it cannot be decoded.
    """
    if not _UNICODE_ESCAPE.search(value):
        return value
    try:
        decoded = json.loads(f'"{value}"')
    except ValueError:
        logger.debug("Unicode re-decode failed, keeping raw value")
        return value
    return decoded if isinstance(decoded, str) else value


def _non_empty_str(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


def extract_text(payload: Any) -> Optional[str]:
    """
    Extract token text from a parsed payload.

    Fallback order, first match wins:
    ``choices[0].delta.content`` -> ``choices[0].message.content`` ->
    ``delta.content`` -> ``content`` -> ``text`` -> the payload itself when
    it is a string.

    Returns:
        The text, or None when the payload carries no text
    """
    if isinstance(payload, str):
        return decode_unicode_escapes(payload) if payload else None
    if not isinstance(payload, dict):
        return None

    choices = payload.get("choices")
    if isinstance(choices, list) and choices and isinstance(choices[0], dict):
        choice = choices[0]
        for key in ("delta", "message"):
            part = choice.get(key)
            if isinstance(part, dict):
                text = _non_empty_str(part.get("content"))
                if text is not None:
                    return decode_unicode_escapes(text)

    delta = payload.get("delta")
    if isinstance(delta, dict):
        text = _non_empty_str(delta.get("content"))
        if text is not None:
            return decode_unicode_escapes(text)

    for key in ("content", "text"):
        text = _non_empty_str(payload.get(key))
        if text is not None:
            return decode_unicode_escapes(text)

    return None


def is_done_signal(payload: Any) -> bool:
    """True for payloads carrying ``done: true`` or ``done: "true"``."""
    return isinstance(payload, dict) and (payload.get("done") is True or payload.get("done") == "true")


def error_message(payload: Any) -> str:
    """Human-readable message of an error payload."""
    if isinstance(payload, str):
        return payload or UNKNOWN_STREAM_ERROR
    if not isinstance(payload, dict):
        return UNKNOWN_STREAM_ERROR

    error = payload.get("error")
    if isinstance(error, dict):
        error = error.get("message") or json.dumps(error, ensure_ascii=False)
    message = error or payload.get("message")
    return str(message) if message else UNKNOWN_STREAM_ERROR


def _list_field(payload: Any, key: str) -> List[Any]:
    if isinstance(payload, dict):
        value = payload.get(key)
        if isinstance(value, list):
            return value
    return []


class PayloadDecoder:
    """
    Decodes frames into stream events.

    ``decode`` returns a list: empty for frames that carry nothing (a token
    frame without text), one event in the common case, more when tool
    metadata is bundled into the frame.
    """

    def __init__(self):
        """Initialize decoder counters."""
        self.frames_decoded = 0
        self.fallbacks = 0

    def decode(self, frame: Frame) -> List[StreamEvent]:
        """
        Decode a frame. Never raises.

        Args:
            frame: The frame to decode

        Returns:
            Events in emission order
        """
        self.frames_decoded += 1
        event_type = (frame.event_type or DEFAULT_EVENT_TYPE).strip().lower()
        try:
            return self._decode(event_type, frame.data)
        except Exception as e:
            # Shape we did not anticipate: fall back to literal text
            self.fallbacks += 1
            logger.warning(f"Frame decode failed ({type(e).__name__}: {e}), using raw data")
            if event_type == "error":
                return [StreamFailedEvent(event_type=event_type, message=frame.data or UNKNOWN_STREAM_ERROR)]
            return [TokenEvent(event_type=event_type, text=frame.data)]

    def _decode(self, event_type: str, data: str) -> List[StreamEvent]:
        try:
            payload = json.loads(data)
        except ValueError:
            self.fallbacks += 1
            if event_type == "error":
                return [StreamFailedEvent(event_type=event_type, message=data or UNKNOWN_STREAM_ERROR)]
            logger.debug("Non-JSON data, treating as text token")
            return [TokenEvent(event_type=event_type, text=data)]

        bundled = self._bundled_tool_events(event_type, payload)
        if is_done_signal(payload):
            return bundled + [StreamEndedEvent(event_type=event_type, meta=payload)]

        primary = self._dispatch(event_type, payload)

        if primary is None:
            return bundled
        if primary.is_terminal:
            # Nothing is delivered after a terminal event
            return bundled + [primary]
        return [primary] + bundled

    def _dispatch(self, event_type: str, payload: Any) -> Optional[StreamEvent]:
        if event_type == "start":
            return StreamStartedEvent(event_type=event_type, meta=payload)

        if event_type == "end":
            return StreamEndedEvent(event_type=event_type, meta=payload)

        if event_type == "error":
            return StreamFailedEvent(event_type=event_type, message=error_message(payload))

        if event_type in TOOL_CALL_EVENT_TYPES:
            tool_call = self._tool_call_from(payload)
            if tool_call is not None:
                return ToolCallRequestedEvent(event_type=event_type, tool_call=tool_call)
            return self._token_from(event_type, payload)

        if event_type in TOOL_RESULT_EVENT_TYPES:
            return ToolResultReceivedEvent(
                event_type=event_type,
                tool_result=ToolResult.from_payload(payload),
            )

        if event_type not in TOKEN_EVENT_TYPES:
            logger.debug(f"Unknown event type {event_type!r}, trying token fallback")
        return self._token_from(event_type, payload)

    def _token_from(self, event_type: str, payload: Any) -> Optional[StreamEvent]:
        text = extract_text(payload)
        if text is not None:
            return TokenEvent(event_type=event_type, text=text)

        if _list_field(payload, "tool_calls") or _list_field(payload, "tool_execution_results"):
            return None

        if isinstance(payload, dict) and payload.get("error"):
            return StreamFailedEvent(event_type=event_type, message=error_message(payload))

        logger.debug("No token content found in payload")
        return None

    def _tool_call_from(self, payload: Any) -> Optional[ToolCall]:
        if not isinstance(payload, dict):
            return None
        nested = payload.get("tool_call")
        if isinstance(nested, dict):
            return ToolCall.from_payload(nested)
        if "function" in payload or "name" in payload:
            return ToolCall.from_payload(payload)
        if _list_field(payload, "tool_calls"):
            # The array carries the calls; see _bundled_tool_events
            return None
        return ToolCall.from_payload(payload)

    def _bundled_tool_events(self, event_type: str, payload: Any) -> List[StreamEvent]:
        events: List[StreamEvent] = []
        for item in _list_field(payload, "tool_calls"):
            if isinstance(item, dict):
                events.append(ToolCallRequestedEvent(
                    event_type=event_type,
                    tool_call=ToolCall.from_payload(item),
                ))
        for item in _list_field(payload, "tool_execution_results"):
            events.append(ToolResultReceivedEvent(
                event_type=event_type,
                tool_result=ToolResult.from_payload(item),
            ))
        return events
