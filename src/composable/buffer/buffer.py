"""Flat-text buffer with point, mark, markers, and a kill ring."""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import ContextManager, List, Optional

from composable.runtime import telemetry
from composable.runtime.events import EventBus

from .kill_ring import KillRing
from .markers import Marker
from .state import BufferView, MarkState, Position, Region
from .validation import clamp_position, ensure_position


@dataclass(frozen=True, slots=True)
class BufferDelta:
    version: int
    start: Position
    removed: str
    inserted: str
    label: str


class TextBuffer:
    """Text storage addressed by character offsets.

    Point and mark are both markers, so edits elsewhere in the buffer move
    them the same way they move any other marker.
    """

    def __init__(
        self,
        text: str = "",
        *,
        name: str = "default",
        bus: Optional[EventBus] = None,
        kill_ring: Optional[KillRing] = None,
    ) -> None:
        self.name = name
        self.bus = bus or EventBus()
        self.kill_ring = kill_ring or KillRing()
        self.version = 0
        self._text = text
        self._markers: List[Marker] = []
        self._point = self.make_marker(0, label="point")
        self._mark: Optional[Marker] = None
        self.mark_state = MarkState()

    @property
    def text(self) -> str:
        return self._text

    def __len__(self) -> int:
        return len(self._text)

    def clamp(self, position: Position) -> Position:
        return clamp_position(self._text, position)

    # point and mark

    @property
    def point(self) -> Position:
        return self._point.position

    def goto(self, position: Position) -> Position:
        self._point.move(position)
        return self._point.position

    @property
    def mark(self) -> Optional[Position]:
        return None if self._mark is None else self._mark.position

    @property
    def mark_active(self) -> bool:
        return self.mark_state.active and self._mark is not None

    def set_mark(self, position: Position, *, activate: bool = True) -> None:
        ensure_position(self._text, position)
        if self._mark is None:
            self._mark = self.make_marker(position, label="mark")
        else:
            self._mark.move(position)
        if activate:
            self.activate_mark()

    def push_mark(
        self, position: Optional[Position] = None, *, activate: bool = False
    ) -> None:
        if self._mark is not None:
            self.mark_state.remember(self._mark.position)
        self.set_mark(self.point if position is None else position, activate=activate)

    def pop_mark(self) -> Optional[Position]:
        if not self.mark_state.ring:
            return None
        previous = self.mark_state.ring.pop(0)
        self.set_mark(self.clamp(previous), activate=False)
        return previous

    def activate_mark(self) -> None:
        if self._mark is None:
            return
        if not self.mark_state.active:
            self.mark_state.active = True
            self.bus.emit("mark.activated", self._mark.position)

    def deactivate_mark(self) -> None:
        if self.mark_state.active:
            self.mark_state.active = False
            self.bus.emit("mark.deactivated", self.mark)

    def exchange_point_and_mark(self) -> None:
        if self._mark is None:
            return
        point, mark = self.point, self._mark.position
        self._mark.move(point)
        self._point.move(mark)

    def region(self) -> Optional[Region]:
        if not self.mark_active:
            return None
        return Region.between(self.mark or 0, self.point)

    # markers

    def make_marker(self, position: Position, *, label: str = "") -> Marker:
        marker = Marker(self, self.clamp(position), label=label)
        self._markers.append(marker)
        return marker

    def forget_marker(self, marker: Marker) -> None:
        if marker in self._markers:
            self._markers.remove(marker)

    @property
    def marker_count(self) -> int:
        return len(self._markers)

    # text access and mutation

    def substring(self, start: Position, end: Position) -> str:
        region = Region.between(
            ensure_position(self._text, start), ensure_position(self._text, end)
        )
        return self._text[region.start : region.end]

    def replace_range(
        self, start: Position, end: Position, text: str, *, label: str
    ) -> BufferDelta:
        ensure_position(self._text, start)
        ensure_position(self._text, end)
        if start > end:
            start, end = end, start
        with Transaction(self, label):
            removed = self._text[start:end]
            self._text = self._text[:start] + text + self._text[end:]
            self.version += 1
            for marker in self._markers:
                marker.adjust(start, end, len(text))
        delta = BufferDelta(
            version=self.version,
            start=start,
            removed=removed,
            inserted=text,
            label=label,
        )
        self.bus.emit("buffer.changed", delta)
        return delta

    def insert(self, text: str, *, at: Optional[Position] = None) -> BufferDelta:
        position = self.point if at is None else at
        delta = self.replace_range(position, position, text, label="insert")
        if at is None:
            self.goto(position + len(text))
        return delta

    def delete_range(self, start: Position, end: Position) -> BufferDelta:
        return self.replace_range(start, end, "", label="delete_range")

    # line geometry

    def line_start(self, position: Position) -> Position:
        return self._text.rfind("\n", 0, self.clamp(position)) + 1

    def line_end(self, position: Position) -> Position:
        found = self._text.find("\n", self.clamp(position))
        return len(self._text) if found == -1 else found

    def next_line_start(self, position: Position) -> Position:
        end = self.line_end(position)
        return end if end >= len(self._text) else end + 1

    def snapshot(self) -> BufferView:
        return BufferView(
            version=self.version,
            text=self._text,
            point=self.point,
            mark=self.mark,
            mark_active=self.mark_active,
        )


class Transaction(AbstractContextManager["Transaction"]):
    """Wrap a buffer mutation in a telemetry span."""

    def __init__(self, buffer: TextBuffer, label: str) -> None:
        self.buffer = buffer
        self.label = label
        self._span_cm: Optional[ContextManager[object]] = None

    def __enter__(self) -> "Transaction":
        self._span_cm = telemetry.span(
            name=f"buffer::{self.label}",
            component="buffer",
            metadata={"buffer": self.buffer.name, "version": self.buffer.version},
        )
        self._span_cm.__enter__()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self._span_cm is not None:
            self._span_cm.__exit__(exc_type, exc, tb)
        return False


__all__ = ["BufferDelta", "TextBuffer", "Transaction"]
