"""Helper utilities for keymap-driven dispatch."""

from __future__ import annotations

from typing import Mapping, MutableMapping, cast

from composable.keymaps import KeyStroke

from .base import EditorContext, KeyInput


def key_to_token(key: KeyInput) -> str:
    return KeyStroke(key.key, key.modifiers).token


def keymap_flag_context(context: EditorContext) -> Mapping[str, bool]:
    flags = context.extras.setdefault("keymap_flags", {})
    return cast(Mapping[str, bool], flags)


def update_flag(context: EditorContext, key: str, value: bool) -> None:
    flags = cast(
        MutableMapping[str, bool], context.extras.setdefault("keymap_flags", {})
    )
    flags[key] = value


__all__ = [
    "key_to_token",
    "keymap_flag_context",
    "update_flag",
]
