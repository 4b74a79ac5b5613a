"""Observability layer for stream sessions.

This layer handles:
- Structured logging with component and session fields
- Session timing and streaming metrics
"""

from .logging import StreamLogger, configure_logging

__all__ = [
    "StreamLogger",
    "configure_logging",
]
