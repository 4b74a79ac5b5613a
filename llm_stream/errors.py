"""Exception types raised by the streaming client."""

from typing import Optional


class StreamingError(Exception):
    """Base exception for streaming client errors."""
    pass


class TransportError(StreamingError):
    """
    Raised by a transport when the backend cannot deliver a stream.

    Attributes:
        status_code: HTTP status code if the backend answered
        detail: Response body text, if any was readable
        url: The URL that was requested
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
        url: Optional[str] = None,
    ):
        self.status_code = status_code
        self.detail = detail
        self.url = url
        super().__init__(message)


class SessionStateError(StreamingError):
    """Raised when a session is used in a way its status does not allow."""
    pass
