from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from ..streaming.assembler import FrameAssembler
from ..streaming.decoder import PayloadDecoder
from ..tools.tracker import ToolExecutionTracker


class SessionStatus(str, Enum):
    """Lifecycle status of a stream session."""
    IDLE = "idle"
    OPEN = "open"
    ENDED = "ended"
    ABORTED = "aborted"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionStatus.ENDED, SessionStatus.ABORTED, SessionStatus.FAILED)


def _new_session_id() -> str:
    return str(uuid.uuid4())[:8]


@dataclass
class StreamSession:
    """One streamed request/response exchange.

    Each session owns its parsing buffer, its decoder, its tool tracker and
    its abort signal; nothing here is shared between sessions.
    """
    id: str = field(default_factory=_new_session_id)
    status: SessionStatus = SessionStatus.IDLE
    accumulated_text: str = ""
    abort_signal: asyncio.Event = field(default_factory=asyncio.Event)
    assembler: FrameAssembler = field(default_factory=FrameAssembler)
    decoder: PayloadDecoder = field(default_factory=PayloadDecoder)
    tracker: ToolExecutionTracker = field(default_factory=ToolExecutionTracker)
    end_meta: Any = None
    error_message: Optional[str] = None
    frames_processed: int = 0
    token_count: int = 0
    callback_errors: List[BaseException] = field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def is_aborted(self) -> bool:
        return self.status == SessionStatus.ABORTED
