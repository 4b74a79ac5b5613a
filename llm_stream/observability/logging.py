"""
Structured logging utility for stream sessions.

This module provides a consistent logging interface for the session
controller and transports, ensuring structured logging with standard
fields like component and session_id.
"""

import logging
import time
import uuid
from contextlib import contextmanager
from typing import Any, Dict, Optional


class StreamLogger:
    """Structured logger for streaming components."""

    def __init__(self, component: str):
        """
        Initialize logger for a specific component.

        Args:
            component: Name of the component (e.g., "session", "http")
        """
        self.component = component
        self.logger = logging.getLogger(f"llm_stream.{component}")

    def _format_message(self, message: str, **kwargs) -> str:
        """Format message with structured fields."""
        fields = [f"component={self.component}"]

        for key, value in kwargs.items():
            if value is not None:
                fields.append(f"{key}={value}")

        return f"[{' '.join(fields)}] {message}"

    def debug(self, message: str, session_id: Optional[str] = None, **kwargs):
        """Log debug message with structured fields."""
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(self._format_message(message, session_id=session_id, **kwargs))

    def info(self, message: str, session_id: Optional[str] = None, **kwargs):
        """Log info message with structured fields."""
        self.logger.info(self._format_message(message, session_id=session_id, **kwargs))

    def warning(self, message: str, session_id: Optional[str] = None, **kwargs):
        """Log warning message with structured fields."""
        self.logger.warning(self._format_message(message, session_id=session_id, **kwargs))

    def error(self, message: str, session_id: Optional[str] = None,
              error: Optional[BaseException] = None, **kwargs):
        """Log error message with structured fields."""
        if error:
            kwargs['error_type'] = type(error).__name__
            kwargs['error_msg'] = str(error)

        self.logger.error(self._format_message(message, session_id=session_id, **kwargs))

    @contextmanager
    def track_session(self, url: str, session_id: Optional[str] = None):
        """
        Context manager to track session timing and log key events.

        Args:
            url: The streaming URL being requested
            session_id: Optional session ID (generated if not provided)

        Yields:
            Dict with session metadata including session_id
        """
        if session_id is None:
            session_id = str(uuid.uuid4())[:8]

        start_time = time.time()

        self.debug("Starting stream", session_id=session_id, url=url)

        metadata = {
            'session_id': session_id,
            'url': url,
            'start_time': start_time,
        }

        try:
            yield metadata

            duration = time.time() - start_time
            self.info(
                "Completed stream",
                session_id=session_id,
                status=metadata.get('status'),
                duration_ms=int(duration * 1000),
            )

        except Exception as e:
            duration = time.time() - start_time
            self.error(
                "Failed stream",
                session_id=session_id,
                duration_ms=int(duration * 1000),
                error=e,
            )
            raise

    def log_streaming_metrics(self, session_id: str, frames: int, tokens: int,
                              total_chars: int, duration: float,
                              tool_executions: int = 0):
        """Log streaming performance metrics."""
        chars_per_second = total_chars / duration if duration > 0 else 0

        self.info(
            "Streaming metrics",
            session_id=session_id,
            frames=frames,
            tokens=tokens,
            total_chars=total_chars,
            tool_executions=tool_executions or None,
            duration_ms=int(duration * 1000),
            chars_per_second=int(chars_per_second),
        )

    def log_frame(self, session_id: str, frame: Any) -> None:
        """Log one assembled frame at DEBUG level."""
        self.debug(
            f"Frame data={frame.data!r}",
            session_id=session_id,
            event_type=frame.event_type,
        )


def configure_logging(level: str = "INFO", fmt: Optional[str] = None) -> None:
    """Basic logging setup for command-line use."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=fmt or "%(asctime)s %(levelname)s %(name)s %(message)s",
    )
