"""Symmetric table of opposite-direction motions."""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, Optional, Tuple

DEFAULT_PAIRS: Tuple[Tuple[str, str], ...] = (
    ("motion.forward_word", "motion.backward_word"),
    ("motion.next_line", "motion.previous_line"),
    ("motion.forward_paragraph", "motion.backward_paragraph"),
    ("motion.forward_sentence", "motion.backward_sentence"),
    ("motion.end_of_line", "motion.back_to_indentation"),
)


class PairingTable:
    """Maps a motion id to its counterpart; ``add_pair`` writes both directions."""

    def __init__(self, pairs: Iterable[Tuple[str, str]] = ()) -> None:
        self._pairs: Dict[str, str] = {}
        for first, second in pairs:
            self.add_pair(first, second)

    def add_pair(self, first: str, second: str) -> None:
        for motion in (first, second):
            previous = self._pairs.get(motion)
            if previous is not None and previous not in (first, second):
                # Keep the table symmetric when a motion is re-paired.
                self._pairs.pop(previous, None)
        self._pairs[first] = second
        self._pairs[second] = first

    def remove(self, motion: str) -> None:
        other = self._pairs.pop(motion, None)
        if other is not None:
            self._pairs.pop(other, None)

    def get(self, motion: str) -> Optional[str]:
        return self._pairs.get(motion)

    def __contains__(self, motion: object) -> bool:
        return motion in self._pairs

    def __iter__(self) -> Iterator[str]:
        return iter(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)


def default_pairing_table() -> PairingTable:
    return PairingTable(DEFAULT_PAIRS)


__all__ = ["DEFAULT_PAIRS", "PairingTable", "default_pairing_table"]
