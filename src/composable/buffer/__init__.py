"""Text buffer, markers, and kill ring used by the reference host."""

from .buffer import BufferDelta, TextBuffer, Transaction
from .kill_ring import KillEntry, KillRing
from .markers import Marker
from .state import BufferView, MarkState, Position, Region
from .validation import (
    MarkerReleasedError,
    PositionError,
    clamp_position,
    ensure_position,
)

__all__ = [
    "BufferDelta",
    "BufferView",
    "KillEntry",
    "KillRing",
    "MarkState",
    "Marker",
    "MarkerReleasedError",
    "Position",
    "PositionError",
    "Region",
    "TextBuffer",
    "Transaction",
    "clamp_position",
    "ensure_position",
]
