"""Validation helpers shared across buffer services."""

from __future__ import annotations


class PositionError(RuntimeError):
    """Raised when a caller hands the buffer an out-of-range position."""

    def __init__(self, message: str, *, position: int | None = None) -> None:
        super().__init__(message)
        self.position = position


class MarkerReleasedError(RuntimeError):
    """Raised when a released marker is read or moved."""


def ensure_position(text: str, position: int) -> int:
    if position < 0 or position > len(text):
        raise PositionError(
            f"Position {position} outside 0..{len(text)}", position=position
        )
    return position


def clamp_position(text: str, position: int) -> int:
    return max(0, min(position, len(text)))
