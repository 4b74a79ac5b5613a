from __future__ import annotations

from dataclasses import dataclass

from ..config.constants import DEFAULT_EVENT_TYPE


@dataclass(frozen=True)
class Frame:
    """One assembled unit of the pseudo-SSE stream.

    Attributes:
        event_type: Label from the ``event:`` line, ``"token"`` when absent
        data: Raw payload, ``data:`` lines joined with ``\\n``
    """
    event_type: str = DEFAULT_EVENT_TYPE
    data: str = ""
