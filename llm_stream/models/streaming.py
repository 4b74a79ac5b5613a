"""
Streaming configuration models.

This module provides configuration options for the streaming client,
including the backend location, transport timeout and debug logging.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from ..config.constants import (
    API_BASE_URL_ENV_VAR,
    DEFAULT_API_BASE_URL,
    DEFAULT_STREAM_ENDPOINT,
    DEFAULT_TIMEOUT_SECONDS,
    STREAM_ENDPOINT_ENV_VAR,
    STREAM_REQUEST_HEADERS,
    TIMEOUT_ENV_VAR,
)

logger = logging.getLogger(__name__)


@dataclass
class StreamingOptions:
    """
    Configuration for streaming sessions.

    This class consolidates all streaming-related options to avoid
    parameter sprawl and provide a clean API for streaming configuration.
    """

    # Backend location
    api_base_url: str = DEFAULT_API_BASE_URL
    """Base URL of the LLM backend."""

    endpoint: str = DEFAULT_STREAM_ENDPOINT
    """Path of the streaming endpoint."""

    # Transport
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    """Transport timeout in seconds."""

    headers: Dict[str, str] = field(default_factory=dict)
    """Extra request headers, merged over the streaming defaults."""

    # Debugging
    log_streaming_metrics: bool = False
    """Log session metrics when a session finishes."""

    capture_raw_frames: bool = False
    """Log every assembled frame at DEBUG level."""

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.headers is None:
            self.headers = {}

        if not self.api_base_url:
            self.api_base_url = DEFAULT_API_BASE_URL
        if not self.endpoint:
            self.endpoint = DEFAULT_STREAM_ENDPOINT

        if self.timeout is None or self.timeout <= 0:
            self.timeout = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "StreamingOptions":
        """
        Create StreamingOptions from dictionary.

        Args:
            config: Configuration dictionary

        Returns:
            StreamingOptions instance
        """
        # Filter out unknown keys
        known_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered_config = {k: v for k, v in config.items() if k in known_fields}
        return cls(**filtered_config)

    @classmethod
    def from_env(cls, **overrides: Any) -> "StreamingOptions":
        """
        Create StreamingOptions from environment variables (and a .env file).

        Keyword overrides win over the environment.
        """
        load_dotenv()

        config: Dict[str, Any] = {
            "api_base_url": os.getenv(API_BASE_URL_ENV_VAR, DEFAULT_API_BASE_URL),
            "endpoint": os.getenv(STREAM_ENDPOINT_ENV_VAR, DEFAULT_STREAM_ENDPOINT),
        }
        timeout = os.getenv(TIMEOUT_ENV_VAR)
        if timeout:
            try:
                config["timeout"] = float(timeout)
            except ValueError:
                logger.warning(
                    f"Invalid {TIMEOUT_ENV_VAR}={timeout!r}, using default {DEFAULT_TIMEOUT_SECONDS}s"
                )
        config.update({k: v for k, v in overrides.items() if v is not None})
        return cls.from_dict(config)

    def stream_url(self) -> str:
        """Join base URL and endpoint with exactly one slash between them."""
        return f"{self.api_base_url.rstrip('/')}/{self.endpoint.lstrip('/')}"

    def request_headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """Streaming headers with configured and per-call extras applied."""
        headers = dict(STREAM_REQUEST_HEADERS)
        headers.update(self.headers)
        if extra:
            headers.update(extra)
        return headers

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary.

        Returns:
            Configuration as dictionary
        """
        return {
            "api_base_url": self.api_base_url,
            "endpoint": self.endpoint,
            "timeout": self.timeout,
            "headers": dict(self.headers),
            "log_streaming_metrics": self.log_streaming_metrics,
            "capture_raw_frames": self.capture_raw_frames,
        }


DEFAULT_OPTIONS = StreamingOptions()
"""Default streaming options with minimal overhead."""

DEBUG_OPTIONS = StreamingOptions(
    log_streaming_metrics=True,
    capture_raw_frames=True,
)
"""Options for debugging with frame capture and metrics logging."""
