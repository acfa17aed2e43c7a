"""Composable commands, containment commands, and the object keymap layer."""

from __future__ import annotations

from typing import Iterable, Mapping, Optional, Sequence

from composable.host.base import EditorContext
from composable.host.defaults import QUIT_COMMAND
from composable.host.protocol import Action
from composable.keymaps import (
    Binding,
    CommandRef,
    KeymapRegistry,
    KeySequence,
    WhenClause,
)

from .containment import Containment
from .state_machine import OBJECT_FLAG, Composer

OBJECT_KEYMAP = "object"
BEGIN_COMMAND = "composable.begin_argument"
END_COMMAND = "composable.end_argument"

DEFAULT_COMPOSABLE_KEYS: Mapping[str, str] = {
    "kill_region": "ctrl+w",
    "copy_region": "alt+w",
    "upcase_region": "ctrl+x ctrl+u",
    "downcase_region": "ctrl+x ctrl+l",
    "capitalize_region": "alt+c",
    "comment_or_uncomment_region": "alt+;",
    "indent_region": "ctrl+alt+\\",
    "delete_region": "ctrl+x ctrl+d",
}

OBJECT_KEYS: tuple[tuple[str, str], ...] = (
    *((digit, "core.digit_argument") for digit in "0123456789"),
    ("-", "core.negative_argument"),
    (",", BEGIN_COMMAND),
    (".", END_COMMAND),
    ("f", "motion.forward_word"),
    ("b", "motion.backward_word"),
    ("n", "motion.next_line"),
    ("p", "motion.previous_line"),
    ("a", "motion.beginning_of_line"),
    ("e", "motion.end_of_line"),
    ("m", "motion.back_to_indentation"),
    ("}", "motion.forward_paragraph"),
    ("{", "motion.backward_paragraph"),
    ("]", "motion.forward_sentence"),
    ("[", "motion.backward_sentence"),
    ("l", "composable.mark_line"),
    ("w", "composable.mark_word"),
    ("h", "composable.mark_paragraph"),
    ("g", QUIT_COMMAND),
)


def composable_id(action: Action) -> str:
    return f"composable.{action.id}"


def make_composable(action: Action, composer: Composer) -> CommandRef:
    """Wrap ``action`` so it applies to the selection or waits for an object."""

    def handler(context: EditorContext, arg: Optional[int]) -> object:
        del context
        return composer.activate(action, arg, command_id=composable_id(action))

    return CommandRef(
        id=composable_id(action),
        handler=handler,
        description=f"Composable {action.id.replace('_', ' ')}",
        metadata={"action": action.id},
    )


def _containment_command(
    command_id: str, containment: Containment, composer: Composer
) -> CommandRef:
    def handler(context: EditorContext, arg: Optional[int]) -> str:
        del context, arg
        composer.set_containment(containment)
        return containment.value

    return CommandRef(
        id=command_id,
        handler=handler,
        kind="argument",
        description=f"Keep only the part of the object at the {containment.value}",
    )


def register_composables(
    registry: KeymapRegistry,
    composer: Composer,
    actions: Iterable[Action],
    *,
    keys: Mapping[str, str] = DEFAULT_COMPOSABLE_KEYS,
    keymap: str = "global",
    replace: bool = False,
) -> list[CommandRef]:
    """Register ``composable.<action>`` commands and bind those named in ``keys``."""

    commands: list[CommandRef] = []
    for action in actions:
        command = registry.register_command(
            make_composable(action, composer), replace=replace
        )
        commands.append(command)
        spec = keys.get(action.id)
        if spec is None:
            continue
        registry.register_binding(
            Binding(
                id=f"{keymap}.{command.id}",
                keymap=keymap,
                sequence=KeySequence.parse(spec),
                command_id=command.id,
                description=command.description,
                tags=("composable",),
            ),
            replace=replace,
        )
    return commands


def load_object_keymap(
    registry: KeymapRegistry,
    composer: Composer,
    *,
    keys: Sequence[tuple[str, str]] = OBJECT_KEYS,
    replace: bool = False,
) -> None:
    """Register the containment commands and the object layer.

    Object bindings only apply while a composition awaits its object.
    """

    for command_id, containment in (
        (BEGIN_COMMAND, Containment.BEGIN),
        (END_COMMAND, Containment.END),
    ):
        registry.register_command(
            _containment_command(command_id, containment, composer), replace=replace
        )

    for key, command_id in keys:
        if not registry.has_command(command_id):
            continue
        registry.register_binding(
            Binding(
                id=f"{OBJECT_KEYMAP}.{key}",
                keymap=OBJECT_KEYMAP,
                sequence=KeySequence.from_strings(key),
                command_id=command_id,
                when=(WhenClause(OBJECT_FLAG),),
                tags=("object",),
            ),
            replace=replace,
        )


__all__ = [
    "BEGIN_COMMAND",
    "DEFAULT_COMPOSABLE_KEYS",
    "END_COMMAND",
    "OBJECT_KEYMAP",
    "OBJECT_KEYS",
    "composable_id",
    "load_object_keymap",
    "make_composable",
    "register_composables",
]
