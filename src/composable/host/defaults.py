"""Built-in host commands and the global keymap layer."""

from __future__ import annotations

from typing import Iterable, Sequence

from composable import objects
from composable.actions import core as core_actions
from composable.actions.regions import DEFAULT_REGION_ACTIONS, region_command
from composable.keymaps import Binding, CommandRef, KeymapRegistry, KeySequence

GLOBAL_KEYMAP = "global"
UNDEFINED_COMMAND = "core.undefined"
QUIT_COMMAND = "core.keyboard_quit"
SET_MARK_COMMAND = "core.set_mark"

ARGUMENT_COMMANDS: frozenset[str] = frozenset(
    {"core.digit_argument", "core.negative_argument", "core.universal_argument"}
)

_MOTIONS: tuple[tuple[str, object, str], ...] = (
    ("motion.forward_char", objects.forward_char, "Move forward a character"),
    ("motion.backward_char", objects.backward_char, "Move backward a character"),
    ("motion.forward_word", objects.forward_word, "Move forward a word"),
    ("motion.backward_word", objects.backward_word, "Move backward a word"),
    ("motion.next_line", objects.next_line, "Move to the next line"),
    ("motion.previous_line", objects.previous_line, "Move to the previous line"),
    ("motion.beginning_of_line", objects.move_beginning_of_line, "Move to line start"),
    ("motion.end_of_line", objects.move_end_of_line, "Move to line end"),
    (
        "motion.back_to_indentation",
        objects.back_to_indentation,
        "Move to the first non-blank character of the line",
    ),
    ("motion.forward_paragraph", objects.forward_paragraph, "Move past the paragraph"),
    ("motion.backward_paragraph", objects.backward_paragraph, "Move before the paragraph"),
    ("motion.forward_sentence", objects.forward_sentence, "Move past the sentence"),
    ("motion.backward_sentence", objects.backward_sentence, "Move before the sentence"),
    ("motion.beginning_of_buffer", objects.beginning_of_buffer, "Move to buffer start"),
    ("motion.end_of_buffer", objects.end_of_buffer, "Move to buffer end"),
    ("composable.mark_line", objects.mark_line, "Select whole lines"),
    ("composable.mark_word", objects.mark_word, "Select the word at point"),
    ("composable.mark_paragraph", objects.mark_paragraph, "Select the paragraph at point"),
)

DEFAULT_COMMANDS: tuple[CommandRef, ...] = (
    CommandRef(
        id=UNDEFINED_COMMAND,
        handler=core_actions.undefined,
        description="Report an unbound key sequence",
    ),
    CommandRef(
        id=QUIT_COMMAND,
        handler=core_actions.keyboard_quit,
        description="Cancel the prefix argument and deactivate the mark",
    ),
    CommandRef(
        id=SET_MARK_COMMAND,
        handler=core_actions.set_mark_command,
        description="Set the mark at point and activate it",
    ),
    CommandRef(
        id="core.exchange_point_and_mark",
        handler=core_actions.exchange_point_and_mark,
        description="Swap point and mark",
    ),
    CommandRef(
        id="core.digit_argument",
        handler=core_actions.digit_argument,
        kind="argument",
        description="Append a digit to the prefix argument",
    ),
    CommandRef(
        id="core.negative_argument",
        handler=core_actions.negative_argument,
        kind="argument",
        description="Negate the prefix argument",
    ),
    CommandRef(
        id="core.universal_argument",
        handler=core_actions.universal_argument,
        kind="argument",
        description="Multiply the prefix argument by four",
    ),
    *(
        CommandRef(id=command_id, handler=handler, kind="motion", description=text)
        for command_id, handler, text in _MOTIONS
    ),
    *(
        CommandRef(
            id=f"region.{action.id}",
            handler=region_command(action),
            description=action.description,
        )
        for action in DEFAULT_REGION_ACTIONS
    ),
)


def _global(binding_id: str, keys: str, command_id: str, description: str = "") -> Binding:
    return Binding(
        id=f"global.{binding_id}",
        keymap=GLOBAL_KEYMAP,
        sequence=KeySequence.parse(keys),
        command_id=command_id,
        description=description,
    )


DEFAULT_BINDINGS: tuple[Binding, ...] = (
    _global("forward_char", "ctrl+f", "motion.forward_char"),
    _global("backward_char", "ctrl+b", "motion.backward_char"),
    _global("forward_word", "alt+f", "motion.forward_word"),
    _global("backward_word", "alt+b", "motion.backward_word"),
    _global("next_line", "ctrl+n", "motion.next_line"),
    _global("previous_line", "ctrl+p", "motion.previous_line"),
    _global("beginning_of_line", "ctrl+a", "motion.beginning_of_line"),
    _global("end_of_line", "ctrl+e", "motion.end_of_line"),
    _global("back_to_indentation", "alt+m", "motion.back_to_indentation"),
    _global("forward_paragraph", "alt+}", "motion.forward_paragraph"),
    _global("backward_paragraph", "alt+{", "motion.backward_paragraph"),
    _global("forward_sentence", "alt+e", "motion.forward_sentence"),
    _global("backward_sentence", "alt+a", "motion.backward_sentence"),
    _global("beginning_of_buffer", "alt+<", "motion.beginning_of_buffer"),
    _global("end_of_buffer", "alt+>", "motion.end_of_buffer"),
    _global("set_mark", "ctrl+space", SET_MARK_COMMAND, "Set mark"),
    _global("exchange", "ctrl+x ctrl+x", "core.exchange_point_and_mark"),
    _global("quit", "ctrl+g", QUIT_COMMAND, "Quit"),
    _global("universal_argument", "ctrl+u", "core.universal_argument"),
    _global("negative_argument", "alt+-", "core.negative_argument"),
    *(
        _global(f"digit_{digit}", f"alt+{digit}", "core.digit_argument")
        for digit in "0123456789"
    ),
)


def load_default_keymaps(
    registry: KeymapRegistry,
    *,
    replace: bool = False,
    extra_bindings: Iterable[Binding] | None = None,
    include_commands: Sequence[str] | None = None,
    exclude_commands: Sequence[str] | None = None,
    include_bindings: Sequence[str] | None = None,
    exclude_bindings: Sequence[str] | None = None,
) -> None:
    """Register the host commands and the global keymap layer."""

    allowed_commands = _build_filters(include_commands, exclude_commands)
    allowed_bindings = _build_filters(include_bindings, exclude_bindings)

    for command in DEFAULT_COMMANDS:
        if not _selected(command.id, allowed_commands):
            continue
        registry.register_command(command, replace=replace)

    for binding in DEFAULT_BINDINGS:
        if not _selected(binding.id, allowed_bindings):
            continue
        if not registry.has_command(binding.command_id):
            continue
        registry.register_binding(binding, replace=replace)

    if extra_bindings:
        for binding in extra_bindings:
            registry.register_binding(binding, replace=replace)


def _build_filters(
    include: Sequence[str] | None, exclude: Sequence[str] | None
) -> tuple[set[str] | None, set[str]]:
    include_set = set(include) if include else None
    exclude_set = set(exclude or ())
    return include_set, exclude_set


def _selected(item_id: str, filters: tuple[set[str] | None, set[str]]) -> bool:
    include, exclude = filters
    if include is not None and item_id not in include:
        return False
    if item_id in exclude:
        return False
    return True


__all__ = [
    "ARGUMENT_COMMANDS",
    "DEFAULT_BINDINGS",
    "DEFAULT_COMMANDS",
    "GLOBAL_KEYMAP",
    "QUIT_COMMAND",
    "SET_MARK_COMMAND",
    "UNDEFINED_COMMAND",
    "load_default_keymaps",
]
