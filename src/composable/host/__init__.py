"""Reference editor host: command loop, prefix arguments, and default keymaps."""

from .base import CommandEvent, DispatchResult, EditorContext, KeyInput
from .command_loop import CommandLoop, PostCommandHook, TransientHandle
from .prefix_arg import PrefixArgument, direction_of
from .protocol import Action, Anchor, Disposable, EditorHost

__all__ = [
    "Action",
    "Anchor",
    "CommandEvent",
    "CommandLoop",
    "DispatchResult",
    "Disposable",
    "EditorContext",
    "EditorHost",
    "KeyInput",
    "PostCommandHook",
    "PrefixArgument",
    "TransientHandle",
    "direction_of",
]
