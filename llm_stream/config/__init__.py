"""Configuration constants for the streaming client."""

from .constants import (
    DEFAULT_API_BASE_URL,
    DEFAULT_EVENT_TYPE,
    DEFAULT_STREAM_ENDPOINT,
    DEFAULT_TIMEOUT_SECONDS,
    STREAM_REQUEST_HEADERS,
)

__all__ = [
    "DEFAULT_API_BASE_URL",
    "DEFAULT_EVENT_TYPE",
    "DEFAULT_STREAM_ENDPOINT",
    "DEFAULT_TIMEOUT_SECONDS",
    "STREAM_REQUEST_HEADERS",
]
