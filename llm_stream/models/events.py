"""Event models produced by the payload decoder.

These are the stable output contract of the decoding pipeline: every
assembled frame decodes into zero or more of the events below.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional
import time

from pydantic import BaseModel

from .tools import ToolCall, ToolResult


@dataclass
class StreamEvent:
    """Base class for all decoded stream events."""
    type: str = ""  # Will be set by subclasses
    event_type: Optional[str] = None  # Label of the source frame
    timestamp: float = field(default_factory=time.time)

    @property
    def is_terminal(self) -> bool:
        return False

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-ready dict (timestamp omitted)."""
        data: Dict[str, Any] = {"type": self.type}
        for f in fields(self):
            if f.name in ("type", "timestamp"):
                continue
            value = getattr(self, f.name)
            if isinstance(value, BaseModel):
                value = value.model_dump(mode="json")
            data[f.name] = value
        return data


@dataclass
class StreamStartedEvent(StreamEvent):
    """Backend signalled the start of a generation."""
    type: str = field(default="started", init=False)
    meta: Any = field(default_factory=dict)

    def __post_init__(self):
        self.type = "started"


@dataclass
class TokenEvent(StreamEvent):
    """A piece of generated text."""
    type: str = field(default="token", init=False)
    text: str = ""

    def __post_init__(self):
        self.type = "token"


@dataclass
class ToolCallRequestedEvent(StreamEvent):
    """The model requested a tool invocation."""
    type: str = field(default="tool_call_requested", init=False)
    tool_call: Optional[ToolCall] = None

    def __post_init__(self):
        self.type = "tool_call_requested"
        if self.tool_call is None:
            self.tool_call = ToolCall()

    @property
    def id(self) -> str:
        return self.tool_call.id

    @property
    def function_name(self) -> str:
        return self.tool_call.function.name

    @property
    def arguments_json(self) -> str:
        return self.tool_call.function.arguments


@dataclass
class ToolResultReceivedEvent(StreamEvent):
    """The backend reported the result of a tool invocation."""
    type: str = field(default="tool_result_received", init=False)
    tool_result: Optional[ToolResult] = None

    def __post_init__(self):
        self.type = "tool_result_received"
        if self.tool_result is None:
            self.tool_result = ToolResult()

    @property
    def tool_call_id(self) -> Optional[str]:
        return self.tool_result.tool_call_id

    @property
    def function_name(self) -> Optional[str]:
        return self.tool_result.function_name

    @property
    def result(self) -> Any:
        return self.tool_result.result


@dataclass
class StreamEndedEvent(StreamEvent):
    """The generation finished."""
    type: str = field(default="ended", init=False)
    meta: Any = field(default_factory=dict)

    def __post_init__(self):
        self.type = "ended"

    @property
    def is_terminal(self) -> bool:
        return True


@dataclass
class StreamFailedEvent(StreamEvent):
    """The backend or the transport reported an error."""
    type: str = field(default="failed", init=False)
    message: str = ""

    def __post_init__(self):
        self.type = "failed"

    @property
    def is_terminal(self) -> bool:
        return True
