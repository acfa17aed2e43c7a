"""Point, mark, and snapshot types for buffers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

Position = int


@dataclass(frozen=True, slots=True)
class Region:
    start: Position
    end: Position

    @classmethod
    def between(cls, a: Position, b: Position) -> "Region":
        return cls(min(a, b), max(a, b))


@dataclass(slots=True)
class MarkState:
    """Whether the mark is active plus the ring of previous mark positions."""

    active: bool = False
    ring: List[Position] = field(default_factory=list)
    ring_max: int = 16

    def remember(self, position: Position) -> None:
        self.ring.insert(0, position)
        del self.ring[self.ring_max :]


@dataclass(frozen=True, slots=True)
class BufferView:
    """Host-friendly snapshot of the buffer."""

    version: int
    text: str
    point: Position
    mark: Optional[Position]
    mark_active: bool


__all__ = ["BufferView", "MarkState", "Position", "Region"]
