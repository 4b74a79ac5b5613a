"""Stream sessions: state and the controller that drives them."""

from .controller import CancelHandle, StreamSessionController
from .state import SessionStatus, StreamSession

__all__ = [
    "CancelHandle",
    "StreamSessionController",
    "SessionStatus",
    "StreamSession",
]
