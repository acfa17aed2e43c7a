from __future__ import annotations

from typing import List, Optional

from composable.buffer import TextBuffer
from composable.host import CommandEvent, CommandLoop, EditorContext, KeyInput
from composable.host.prefix_arg import PrefixArgument, direction_of
from composable.keymaps import KeyStroke
from composable.runtime.events import EventBus

TEXT = "alpha beta gamma delta\nsecond line"


def make_loop(text: str = TEXT, point: int = 0) -> CommandLoop:
    bus = EventBus()
    buffer = TextBuffer(text, bus=bus)
    buffer.goto(point)
    return CommandLoop(EditorContext(buffer=buffer, bus=bus), keymaps=("global",))


def press(loop: CommandLoop, *tokens: str):
    results = []
    for token in tokens:
        stroke = KeyStroke.parse(token)
        results.append(loop.handle_key(KeyInput(stroke.key, stroke.modifiers)))
    return results


def test_motion_runs_with_prefix_argument() -> None:
    loop = make_loop()

    press(loop, "alt+3", "alt+f")

    assert loop.context.buffer.point == len("alpha beta gamma")
    assert not loop.prefix.active


def test_universal_argument_multiplies_by_four() -> None:
    loop = make_loop()
    seen: List[Optional[int]] = []
    loop.add_post_command_hook(lambda event: seen.append(event.arg))

    press(loop, "ctrl+u", "ctrl+u", "ctrl+f")

    assert loop.context.buffer.point == 16
    assert seen[-1] == 16


def test_argument_commands_keep_last_command() -> None:
    loop = make_loop()
    events: List[CommandEvent] = []
    loop.add_post_command_hook(events.append)

    press(loop, "alt+f", "alt+-")

    assert loop.last_command == "motion.forward_word"
    assert events[-1].kind == "argument"
    assert loop.prefix.value == -1

    press(loop, "alt+f")

    assert loop.context.buffer.point == 0
    assert events[-1].arg == -1


def test_multi_key_sequence_reports_pending() -> None:
    loop = make_loop(point=6)
    loop.context.buffer.set_mark(0)

    first, second = press(loop, "ctrl+x", "ctrl+x")

    assert first.status == "pending"
    assert first.next_expected == ("ctrl+x",)
    assert second.command_id == "core.exchange_point_and_mark"
    assert loop.context.buffer.point == 0
    assert loop.context.buffer.mark == 6


def test_unbound_key_runs_undefined_command() -> None:
    loop = make_loop()
    messages: List[object] = []
    loop.context.bus.subscribe("keyboard.undefined", messages.append)
    events: List[CommandEvent] = []
    loop.add_post_command_hook(events.append)

    (result,) = press(loop, "ctrl+z")

    assert result.command_id == "core.undefined"
    assert messages == ["ctrl+z is undefined"]
    assert events[-1].keys == ("ctrl+z",)


def test_quit_cancels_pending_sequence() -> None:
    loop = make_loop()
    loop.context.buffer.push_mark(activate=True)

    _, result = press(loop, "ctrl+x", "ctrl+g")

    assert result.command_id == "core.keyboard_quit"
    assert loop.pending_keys == ()
    assert not loop.context.buffer.mark_active


def test_invoke_skips_post_command_hooks() -> None:
    loop = make_loop()
    events: List[CommandEvent] = []
    loop.add_post_command_hook(events.append)

    loop.invoke("motion.forward_word", 2)

    assert loop.context.buffer.point == len("alpha beta")
    assert events == []


def test_removed_hook_is_not_called() -> None:
    loop = make_loop()
    events: List[CommandEvent] = []
    remove = loop.add_post_command_hook(events.append)

    remove()
    press(loop, "ctrl+f")

    assert events == []


def test_transient_binding_persists_while_used() -> None:
    loop = make_loop()
    fired: List[Optional[int]] = []
    expired: List[bool] = []

    handle = loop.arm_once("z", fired.append, lambda: expired.append(True))
    press(loop, "z", "alt+-", "z")

    assert fired == [None, -1]
    assert not handle.disposed
    assert loop.active_keymaps()[0] == "transient"

    press(loop, "ctrl+f")

    assert handle.disposed
    assert expired == [True]
    assert not loop.keymap_registry.has_command(handle.command_id)
    assert loop.transient is None


def test_arming_again_expires_previous_binding() -> None:
    loop = make_loop()
    expired: List[str] = []

    first = loop.arm_once("z", lambda arg: None, lambda: expired.append("first"))
    second = loop.arm_once("y", lambda arg: None, lambda: expired.append("second"))

    assert first.disposed
    assert not second.disposed
    assert expired == ["first"]

    second.dispose()
    second.dispose()

    assert expired == ["first", "second"]


def test_prefix_argument_values() -> None:
    prefix = PrefixArgument()
    assert prefix.value is None

    prefix.add_digit("1")
    prefix.add_digit("2")
    prefix.negate()
    assert prefix.value == -12
    assert prefix.describe() == "- 12"

    prefix.reset()
    prefix.multiply()
    prefix.multiply()
    assert prefix.value == 16


def test_direction_of() -> None:
    assert direction_of(None) == 1
    assert direction_of(0) == 1
    assert direction_of(7) == 1
    assert direction_of(-3) == -1
