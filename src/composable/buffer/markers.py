"""Positions that follow buffer edits."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from .validation import MarkerReleasedError

if TYPE_CHECKING:  # pragma: no cover
    from .buffer import TextBuffer


class Marker:
    """A buffer position that shifts as text is inserted or deleted.

    Text inserted exactly at the marker goes after it. Text deleted around the
    marker collapses it to the start of the deleted range. ``release`` detaches
    the marker from its buffer; reading it afterwards is an error.
    """

    __slots__ = ("_buffer", "_position", "label")

    def __init__(self, buffer: "TextBuffer", position: int, *, label: str = "") -> None:
        self._buffer: Optional["TextBuffer"] = buffer
        self._position = position
        self.label = label

    @property
    def released(self) -> bool:
        return self._buffer is None

    @property
    def position(self) -> int:
        if self._buffer is None:
            raise MarkerReleasedError(f"Marker '{self.label}' was released")
        return self._position

    def move(self, position: int) -> None:
        if self._buffer is None:
            raise MarkerReleasedError(f"Marker '{self.label}' was released")
        self._position = self._buffer.clamp(position)

    def release(self) -> None:
        if self._buffer is not None:
            self._buffer.forget_marker(self)
            self._buffer = None

    def adjust(self, start: int, end: int, inserted: int) -> None:
        if self._position >= end and not (start == end == self._position):
            self._position += inserted - (end - start)
        elif start < self._position < end:
            self._position = start

    def __repr__(self) -> str:
        where = "released" if self._buffer is None else str(self._position)
        return f"Marker({self.label or '?'}@{where})"


__all__ = ["Marker"]
