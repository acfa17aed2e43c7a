"""Shared value types passed between the command loop and commands."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from composable.buffer import KillRing, TextBuffer
from composable.config import ComposableSettings
from composable.runtime.events import EventBus


@dataclass(slots=True)
class KeyInput:
    """Normalized key event handed to the command loop."""

    key: str
    modifiers: Tuple[str, ...] = ()
    text: Optional[str] = None


@dataclass(slots=True)
class DispatchResult:
    """Result returned from ``CommandLoop.handle_key``."""

    consumed: bool
    status: str = "ok"
    command_id: Optional[str] = None
    message: Optional[str] = None
    next_expected: Tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class CommandEvent:
    """What the post-command hooks learn about the command that just ran."""

    command_id: str
    kind: str
    arg: Optional[int]
    keys: Tuple[str, ...]
    keymap: Optional[str] = None

    @property
    def last_key(self) -> Optional[str]:
        return self.keys[-1] if self.keys else None


@dataclass(slots=True)
class EditorContext:
    """Shared services every command handler can reach."""

    buffer: TextBuffer
    bus: EventBus
    settings: ComposableSettings = field(default_factory=ComposableSettings)
    extras: Dict[str, object] = field(default_factory=dict)

    @property
    def kill_ring(self) -> KillRing:
        return self.buffer.kill_ring


__all__ = ["CommandEvent", "DispatchResult", "EditorContext", "KeyInput"]
