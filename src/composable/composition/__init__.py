"""Action-then-object composition with containment and one-key repeat."""

from .anchors import AnchorTracker
from .composables import (
    BEGIN_COMMAND,
    DEFAULT_COMPOSABLE_KEYS,
    END_COMMAND,
    OBJECT_KEYMAP,
    composable_id,
    load_object_keymap,
    make_composable,
    register_composables,
)
from .containment import Containment, clip
from .mark_mode import MarkModeInterceptor
from .pairs import DEFAULT_PAIRS, PairingTable, default_pairing_table
from .repeat import RepeatArming, RepeatBinding
from .state_machine import OBJECT_FLAG, Composer, CompositionRequest, CompositionState

__all__ = [
    "AnchorTracker",
    "BEGIN_COMMAND",
    "Composer",
    "CompositionRequest",
    "CompositionState",
    "Containment",
    "DEFAULT_COMPOSABLE_KEYS",
    "DEFAULT_PAIRS",
    "END_COMMAND",
    "MarkModeInterceptor",
    "OBJECT_FLAG",
    "OBJECT_KEYMAP",
    "PairingTable",
    "RepeatArming",
    "RepeatBinding",
    "clip",
    "composable_id",
    "default_pairing_table",
    "load_object_keymap",
    "make_composable",
    "register_composables",
]
