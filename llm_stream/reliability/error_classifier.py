"""
Error classification for streaming transport failures.

Turns exceptions raised while opening or reading a stream into a category
plus the human-readable message the session reports through on_error.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Set

import httpx

from ..config.constants import UNKNOWN_STREAM_ERROR


class ErrorCategory(Enum):
    """Categories of transport failure."""
    NETWORK = "network"
    CORS = "cors"
    TIMEOUT = "timeout"
    HTTP_CLIENT = "http_client"
    HTTP_SERVER = "http_server"
    RATE_LIMIT = "rate_limit"
    AUTHENTICATION = "authentication"
    UNKNOWN = "unknown"


@dataclass
class ErrorClassification:
    """Detailed error classification."""
    category: ErrorCategory
    is_retryable: bool
    user_message: Optional[str] = None
    status_code: Optional[int] = None


CONNECT_FAILURE_MESSAGE = (
    "Network error: Could not connect to server. "
    "Please check if the backend is running and CORS is properly configured."
)
CORS_FAILURE_MESSAGE = (
    "CORS error: The server needs to be configured to allow cross-origin requests."
)


class ErrorClassifier:
    """Classifies transport errors for reporting."""

    # Error patterns for string matching
    ERROR_PATTERNS = {
        'cors': {
            'patterns': ['cors', 'cross-origin', 'access-control-allow-origin'],
            'category': ErrorCategory.CORS,
            'retryable': False
        },
        'timeout': {
            'patterns': ['timeout', 'timed out', 'read timeout'],
            'category': ErrorCategory.TIMEOUT,
            'retryable': True
        },
        'rate_limit': {
            'patterns': ['rate limit', 'too many requests', 'rate_limit_exceeded',
                         'throttled', 'quota exceeded'],
            'category': ErrorCategory.RATE_LIMIT,
            'retryable': True
        },
        'authentication': {
            'patterns': ['invalid api key', 'authentication failed', 'unauthorized'],
            'category': ErrorCategory.AUTHENTICATION,
            'retryable': False
        },
        'network': {
            'patterns': ['failed to fetch', 'connection error', 'network error',
                         'connection refused', 'connection reset', 'dns resolution',
                         'name or service not known'],
            'category': ErrorCategory.NETWORK,
            'retryable': True
        },
    }

    # Checked in this order; cors before network, timeout before network
    PATTERN_PRIORITY = ['cors', 'timeout', 'rate_limit', 'authentication', 'network']

    RETRYABLE_STATUS_CODES: Set[int] = {408, 429, 500, 502, 503, 504}

    @classmethod
    def classify_error(cls, error: BaseException) -> ErrorClassification:
        """
        Classify an error with detailed metadata.

        Order: HTTP status code, then httpx exception type, then message
        patterns, then unknown.

        Args:
            error: The exception to classify

        Returns:
            ErrorClassification with category, retry info and message
        """
        status_code = cls._status_code(error)
        if status_code:
            return ErrorClassification(
                category=cls._categorize_by_status_code(status_code),
                is_retryable=status_code in cls.RETRYABLE_STATUS_CODES,
                user_message=cls._http_message(status_code, getattr(error, 'detail', None)),
                status_code=status_code,
            )

        by_type = cls._classify_by_type(error)
        if by_type is not None:
            return by_type

        error_str = cls._error_text(error).lower()
        for pattern_key in cls.PATTERN_PRIORITY:
            pattern_info = cls.ERROR_PATTERNS[pattern_key]
            if any(pattern in error_str for pattern in pattern_info['patterns']):
                category = pattern_info['category']
                return ErrorClassification(
                    category=category,
                    is_retryable=pattern_info['retryable'],
                    user_message=cls._pattern_message(category, error),
                )

        return ErrorClassification(
            category=ErrorCategory.UNKNOWN,
            is_retryable=False,
            user_message=cls._error_text(error) or UNKNOWN_STREAM_ERROR,
        )

    @classmethod
    def describe(cls, error: BaseException) -> str:
        """Human-readable message for an error, as reported through on_error."""
        return cls.classify_error(error).user_message or UNKNOWN_STREAM_ERROR

    @classmethod
    def _status_code(cls, error: BaseException) -> Optional[int]:
        status_code = getattr(error, 'status_code', None)
        if status_code:
            return int(status_code)
        if isinstance(error, httpx.HTTPStatusError):
            return error.response.status_code
        return None

    @classmethod
    def _classify_by_type(cls, error: BaseException) -> Optional[ErrorClassification]:
        if isinstance(error, (httpx.TimeoutException, asyncio.TimeoutError)):
            return ErrorClassification(
                category=ErrorCategory.TIMEOUT,
                is_retryable=True,
                user_message=f"Request timed out: {cls._error_text(error) or type(error).__name__}",
            )
        if isinstance(error, httpx.ConnectError):
            # httpx's equivalent of a fetch() that never reached the server
            return ErrorClassification(
                category=ErrorCategory.NETWORK,
                is_retryable=True,
                user_message=CONNECT_FAILURE_MESSAGE,
            )
        if isinstance(error, (httpx.NetworkError, httpx.RemoteProtocolError, ConnectionError)):
            return ErrorClassification(
                category=ErrorCategory.NETWORK,
                is_retryable=True,
                user_message=f"Network error: {cls._error_text(error) or type(error).__name__}",
            )
        return None

    @classmethod
    def _categorize_by_status_code(cls, status_code: int) -> ErrorCategory:
        """Categorize error based on HTTP status code."""
        if status_code in (401, 403):
            return ErrorCategory.AUTHENTICATION
        elif status_code == 429:
            return ErrorCategory.RATE_LIMIT
        elif status_code == 408:
            return ErrorCategory.TIMEOUT
        elif status_code >= 500:
            return ErrorCategory.HTTP_SERVER
        elif status_code >= 400:
            return ErrorCategory.HTTP_CLIENT
        else:
            return ErrorCategory.UNKNOWN

    @staticmethod
    def _http_message(status_code: int, detail: Optional[str]) -> str:
        if detail:
            return f"HTTP error! status: {status_code}, details: {detail}"
        return f"HTTP error! status: {status_code}"

    @classmethod
    def _pattern_message(cls, category: ErrorCategory, error: BaseException) -> str:
        text = cls._error_text(error)
        if category == ErrorCategory.CORS:
            return CORS_FAILURE_MESSAGE
        if category == ErrorCategory.TIMEOUT:
            return f"Request timed out: {text}"
        if category == ErrorCategory.NETWORK:
            if 'failed to fetch' in text.lower():
                return CONNECT_FAILURE_MESSAGE
            return f"Network error: {text}"
        return text

    @staticmethod
    def _error_text(error: BaseException) -> str:
        try:
            return str(error)
        except Exception:
            return getattr(error, 'message', '') or ''
