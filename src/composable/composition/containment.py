"""Clipping a selection to one side of the composition start."""

from __future__ import annotations

from enum import Enum
from typing import Tuple


class Containment(str, Enum):
    NONE = "none"
    BEGIN = "begin"
    END = "end"


def clip(
    anchor: int, cursor: int, start: int, containment: Containment
) -> Tuple[int, int]:
    """Return ``(anchor, cursor)`` with the part on the wrong side of ``start`` dropped.

    ``BEGIN`` keeps what lies before ``start``, ``END`` what lies after it.
    Clipping is idempotent: a clipped pair clips to itself.
    """

    if containment is Containment.BEGIN:
        return min(anchor, start), min(cursor, start)
    if containment is Containment.END:
        return max(anchor, start), max(cursor, start)
    return anchor, cursor


__all__ = ["Containment", "clip"]
