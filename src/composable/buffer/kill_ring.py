"""Kill ring: text removed or copied by region actions."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Optional, Sequence


@dataclass(slots=True)
class KillEntry:
    text: str
    source: str = "kill"  # kill or copy


class KillRing:
    """Bounded most-recent-first history of killed and copied text."""

    def __init__(self, *, max_entries: int = 60) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self._entries: Deque[KillEntry] = deque(maxlen=max_entries)

    def __len__(self) -> int:
        return len(self._entries)

    def push(self, text: str, *, source: str = "kill") -> None:
        self._entries.appendleft(KillEntry(text=text, source=source))

    def append(self, text: str, *, before: bool = False) -> None:
        """Grow the newest entry, as consecutive kills do."""

        if not self._entries:
            self.push(text)
            return
        newest = self._entries[0]
        newest.text = text + newest.text if before else newest.text + text

    def yank_text(self, index: int = 0) -> Optional[str]:
        if not self._entries:
            return None
        return self._entries[index % len(self._entries)].text

    def entries(self) -> Sequence[KillEntry]:
        return tuple(self._entries)


__all__ = ["KillEntry", "KillRing"]
