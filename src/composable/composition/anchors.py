"""Anchors owned by a composition cycle.

``start`` marks where the composable command was invoked and lives only while
an object is awaited. ``excursion`` and ``origin`` belong to the repeat
binding: the first follows the far end of the last motion, the second keeps
the composition start after ``start`` itself has been released.
"""

from __future__ import annotations

from typing import Optional, Tuple

from composable.host.protocol import Anchor, EditorHost


class AnchorTracker:
    def __init__(self, host: EditorHost) -> None:
        self._host = host
        self.start: Optional[Anchor] = None
        self.excursion: Optional[Anchor] = None
        self.origin: Optional[Anchor] = None

    def mark_start(self, position: int) -> Anchor:
        self.release_start()
        self.start = self._host.make_marker(position, label="composition-start")
        return self.start

    def release_start(self) -> None:
        if self.start is not None:
            self.start.release()
            self.start = None

    def track_excursion(self, position: int) -> Anchor:
        """Begin a fresh excursion at ``position``, remembering the start as origin."""

        self.release_repeat()
        origin = self.start.position if self.start is not None else position
        self.origin = self._host.make_marker(origin, label="repeat-origin")
        self.excursion = self._host.make_marker(position, label="repeat-excursion")
        return self.excursion

    def advance_excursion(self, position: int) -> None:
        if self.excursion is None:
            raise RuntimeError("No repeat excursion is being tracked")
        self.excursion.move(position)

    def release_repeat(self) -> None:
        for name in ("excursion", "origin"):
            anchor = getattr(self, name)
            if anchor is not None:
                anchor.release()
                setattr(self, name, None)

    def release_all(self) -> None:
        self.release_start()
        self.release_repeat()

    @property
    def live(self) -> Tuple[Anchor, ...]:
        return tuple(
            anchor
            for anchor in (self.start, self.excursion, self.origin)
            if anchor is not None
        )


__all__ = ["AnchorTracker"]
