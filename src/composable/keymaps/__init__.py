"""Declarative keymap registry and layered resolution."""

from .models import (
    COMMAND_KINDS,
    Binding,
    CommandKind,
    CommandRef,
    KeySequence,
    KeyStroke,
    WhenClause,
)
from .registry import (
    KeymapConflictError,
    KeymapRegistry,
    RegistryStats,
    UnknownCommandError,
)
from .resolver import KeymapResolver, ResolutionMatch, ResolutionResult

__all__ = [
    "COMMAND_KINDS",
    "Binding",
    "CommandKind",
    "CommandRef",
    "KeySequence",
    "KeyStroke",
    "WhenClause",
    "KeymapRegistry",
    "KeymapConflictError",
    "RegistryStats",
    "UnknownCommandError",
    "KeymapResolver",
    "ResolutionResult",
    "ResolutionMatch",
]
