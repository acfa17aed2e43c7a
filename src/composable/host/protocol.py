"""Boundary between the composer and whatever editor hosts it."""

from __future__ import annotations

from typing import Callable, Optional, Protocol, runtime_checkable

from .base import CommandEvent


@runtime_checkable
class Disposable(Protocol):
    def dispose(self) -> None: ...


@runtime_checkable
class Anchor(Protocol):
    """A position that follows edits until released."""

    @property
    def position(self) -> int: ...

    @property
    def released(self) -> bool: ...

    def move(self, position: int) -> None: ...

    def release(self) -> None: ...


@runtime_checkable
class Action(Protocol):
    """A range-consuming operation the composer can apply."""

    id: str
    keep_point: bool

    def apply(self, start: int, end: int, arg: Optional[int]) -> object: ...


@runtime_checkable
class EditorHost(Protocol):
    """Editor primitives the composer drives.

    The composer only ever talks to the editor through this surface, so any
    object providing these methods can host a composition session.
    """

    def current_position(self) -> int: ...

    def set_position(self, position: int) -> None: ...

    def selection_active(self) -> bool: ...

    def selection_anchor(self) -> Optional[int]: ...

    def set_selection_anchor(self, position: int) -> None: ...

    def push_anchor(self, position: int) -> None:
        """Push ``position`` as the new, active selection anchor."""

    def deactivate_selection(self) -> None: ...

    def make_marker(self, position: int, *, label: str = "") -> Anchor: ...

    def invoke(self, command_id: str, arg: Optional[int] = None) -> object: ...

    def arm_once(
        self,
        key: str,
        handler: Callable[[Optional[int]], object],
        on_expire: Optional[Callable[[], None]] = None,
    ) -> Disposable: ...

    def add_post_command_hook(
        self, hook: Callable[[CommandEvent], None]
    ) -> Callable[[], None]: ...

    def add_deactivate_hook(self, hook: Callable[[], None]) -> Callable[[], None]: ...

    def set_keymap_flag(self, name: str, value: bool) -> None: ...

    def cursor_style(self) -> str: ...

    def set_cursor_style(self, style: str) -> None: ...

    def set_indicator(self, label: Optional[str], color: Optional[str] = None) -> None: ...


__all__ = ["Action", "Anchor", "Disposable", "EditorHost"]
