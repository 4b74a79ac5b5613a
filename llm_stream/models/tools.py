"""Tool call and tool execution models.

Tool calls arrive mid-stream in OpenAI function-call shape
(``{"id", "type", "function": {"name", "arguments"}}``); results arrive
either as dedicated frames or bundled in ``tool_execution_results``.
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


def generate_tool_call_id() -> str:
    """Generate an id for tool calls the backend sent without one."""
    return f"call_{uuid.uuid4().hex[:12]}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ToolFunction(BaseModel):
    """Function name and JSON-encoded arguments of a tool call."""
    model_config = ConfigDict(extra="allow")

    name: str = ""
    arguments: str = "{}"


class ToolCall(BaseModel):
    """A tool invocation requested by the model."""
    model_config = ConfigDict(extra="allow")

    id: str = Field(default_factory=generate_tool_call_id)
    type: str = "function"
    function: ToolFunction = Field(default_factory=ToolFunction)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ToolCall":
        """Build a tool call from an OpenAI-style or flat payload.

        Accepts ``{"id", "function": {"name", "arguments"}}`` as well as
        ``{"id", "name", "arguments"}``. Dict arguments are re-encoded as
        JSON text; a missing id is generated.
        """
        function = payload.get("function")
        if not isinstance(function, dict):
            function = {
                "name": payload.get("name") or payload.get("function_name") or "",
                "arguments": payload.get("arguments", "{}"),
            }

        arguments = function.get("arguments", "{}")
        if arguments is None:
            arguments = "{}"
        elif not isinstance(arguments, str):
            arguments = json.dumps(arguments, ensure_ascii=False)

        call_id = payload.get("id")
        extra = {
            k: v for k, v in payload.items()
            if k not in ("id", "type", "function", "name", "arguments", "function_name")
        }
        return cls(
            id=str(call_id) if call_id else generate_tool_call_id(),
            type=str(payload.get("type") or "function"),
            function=ToolFunction(
                name=str(function.get("name") or ""),
                arguments=arguments,
            ),
            **extra,
        )

    @property
    def function_name(self) -> str:
        return self.function.name

    @property
    def arguments_json(self) -> str:
        return self.function.arguments

    def parsed_arguments(self) -> Any:
        """Decode the arguments JSON, returning the raw text if it is not JSON."""
        try:
            return json.loads(self.function.arguments)
        except (TypeError, ValueError):
            return self.function.arguments


class ToolResult(BaseModel):
    """The outcome of a tool invocation as reported by the backend."""

    tool_call_id: Optional[str] = None
    function_name: Optional[str] = None
    result: Any = None
    error: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @classmethod
    def from_payload(cls, payload: Any) -> "ToolResult":
        """Build a result from a ``tool_result`` frame or a bundled array element.

        ``result`` falls back to the whole payload when the payload has no
        ``result`` key. A payload with an ``error`` field, ``success: false``
        or ``status: "error"`` is a failed execution.
        """
        if not isinstance(payload, dict):
            return cls(result=payload)

        call_id = payload.get("tool_call_id")
        name = payload.get("function_name") or payload.get("name")
        function = payload.get("function")
        if not name and isinstance(function, dict):
            name = function.get("name")

        result = payload.get("result")
        if result is None:
            result = payload

        error = payload.get("error")
        if error is not None and not isinstance(error, str):
            error = json.dumps(error, ensure_ascii=False)
        if not error and (payload.get("success") is False or payload.get("status") == "error"):
            error = "Tool execution failed"
        return cls(
            tool_call_id=str(call_id) if call_id else None,
            function_name=str(name) if name else None,
            result=result,
            error=error or None,
        )


class ToolExecutionStatus(str, Enum):
    """Lifecycle status of a tracked tool execution."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (ToolExecutionStatus.COMPLETED, ToolExecutionStatus.ERROR)


class ToolExecution(BaseModel):
    """Tracked lifecycle record for one tool invocation."""

    id: str
    tool_call: ToolCall
    status: ToolExecutionStatus = ToolExecutionStatus.PENDING
    started_at: datetime = Field(default_factory=_utcnow)
    ended_at: Optional[datetime] = None
    result: Any = None
    error: Optional[str] = None
    progress: Optional[float] = None

    @property
    def function_name(self) -> str:
        return self.tool_call.function.name

    @property
    def duration_ms(self) -> Optional[float]:
        if self.ended_at is None:
            return None
        return (self.ended_at - self.started_at).total_seconds() * 1000
