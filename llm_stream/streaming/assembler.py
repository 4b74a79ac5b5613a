"""
Frame assembler for pseudo-SSE streaming responses.

This module turns a stream of arbitrarily split text chunks into discrete
frames. It is permissive: backends in the wild omit the
``event:`` line, never send the blank separator line, double-prefix
payloads with ``data: data:``, or stream bare JSON/plain-text lines.
"""

from typing import Any, Dict, List
import json
import logging

from ..config.constants import DEFAULT_EVENT_TYPE
from ..models.frames import Frame

logger = logging.getLogger(__name__)

# Standard SSE fields that carry no payload
_IGNORED_FIELDS = ("id:", "retry:")


def _is_complete_json(data: str) -> bool:
    try:
        json.loads(data)
    except ValueError:
        return False
    return True


def _opens_json(data: str) -> bool:
    return data.lstrip().startswith(("{", "["))


class FrameAssembler:
    """
    Assembles frames from a chunked text stream.

    Only complete lines are interpreted; the trailing partial line stays in
    the buffer until the next ``feed`` or ``flush``. Because of that the
    frames produced do not depend on where the chunk boundaries fall.
    """

    def __init__(self):
        """Initialize the assembler with an empty buffer."""
        self.buffer = ""
        self._event_type = ""
        self._data_lines: List[str] = []
        self.frames_emitted = 0
        self.lines_processed = 0

    def feed(self, chunk: str) -> List[Frame]:
        """
        Append a chunk and return every frame it completes.

        Args:
            chunk: Text as received from the transport

        Returns:
            Frames completed by this chunk, in arrival order
        """
        if not chunk:
            return []

        self.buffer += chunk
        lines = self.buffer.split("\n")
        # Last element is an incomplete line (or "" after a trailing newline)
        self.buffer = lines.pop()

        frames: List[Frame] = []
        for line in lines:
            self._process_line(line, frames)
        return frames

    def flush(self) -> List[Frame]:
        """
        Drain the buffer once the transport has completed.

        Returns:
            The trailing frame(s) that had no terminating blank line
        """
        frames: List[Frame] = []
        if self.buffer:
            line = self.buffer
            self.buffer = ""
            self._process_line(line, frames)
        self._emit_pending(frames)
        return frames

    @property
    def has_pending_data(self) -> bool:
        return bool(self.buffer.strip()) or bool("\n".join(self._data_lines))

    def _process_line(self, line: str, frames: List[Frame]) -> None:
        self.lines_processed += 1
        stripped = line.strip()

        if not stripped:
            self._emit_pending(frames)
            return

        if stripped.startswith(":"):
            # SSE comment / keep-alive
            return

        if stripped.startswith("event:"):
            # Data left over without a separator belongs to the previous event
            self._emit_pending(frames)
            self._event_type = stripped[6:].strip()
            return

        if stripped.startswith("data:"):
            value = stripped[5:].strip()
            if value.startswith("data:"):
                logger.debug("Stripping doubled data: prefix")
                value = value[5:].strip()
            self._data_lines.append(value)

            # Backends that never send blank separators: every data line is a
            # frame on its own unless it continues an unfinished JSON document.
            data = "\n".join(self._data_lines)
            if _is_complete_json(data) or not _opens_json(data):
                self._emit_pending(frames)
            return

        if stripped.startswith(_IGNORED_FIELDS):
            return

        # Bare line: raw JSON or plain text from a non-SSE backend
        self._emit_pending(frames)
        if logger.isEnabledFor(logging.DEBUG):
            kind = "JSON" if _is_complete_json(stripped) else "text"
            logger.debug(f"Bare {kind} line treated as token frame")
        self._append(frames, Frame(event_type=DEFAULT_EVENT_TYPE, data=stripped))

    def _emit_pending(self, frames: List[Frame]) -> None:
        data = "\n".join(self._data_lines)
        self._data_lines = []
        if not data:
            return
        self._append(frames, Frame(event_type=self._event_type or DEFAULT_EVENT_TYPE, data=data))
        self._event_type = ""

    def _append(self, frames: List[Frame], frame: Frame) -> None:
        frames.append(frame)
        self.frames_emitted += 1

    def reset(self) -> None:
        """Reset the assembler state."""
        self.buffer = ""
        self._event_type = ""
        self._data_lines = []
        self.frames_emitted = 0
        self.lines_processed = 0

    def get_statistics(self) -> Dict[str, Any]:
        """
        Get statistics about processing.

        Returns:
            Dictionary with processing statistics
        """
        return {
            "buffer_size": len(self.buffer),
            "frames_emitted": self.frames_emitted,
            "lines_processed": self.lines_processed,
            "pending_data": self.has_pending_data,
        }
