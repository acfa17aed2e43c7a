from __future__ import annotations

from dataclasses import replace
from typing import Any, List

import pytest

from composable.composition import OBJECT_FLAG, CompositionState, make_composable
from composable.config import ComposableSettings
from composable.session import EditorSession, create_session

LINE = "0123456789" + "abcdefghij" * 4
WORDS = "hello world again"


def make_session(text: str, point: int = 0, **settings: Any) -> EditorSession:
    session = create_session(text, settings=ComposableSettings(**settings))
    session.buffer.goto(point)
    return session


def record(session: EditorSession, name: str) -> List[object]:
    seen: List[object] = []
    session.bus.subscribe(name, seen.append)
    return seen


def test_action_without_selection_awaits_object() -> None:
    session = make_session(WORDS, point=6)

    session.press("ctrl+w")

    assert session.state is CompositionState.AWAITING_OBJECT
    assert session.buffer.mark_active
    assert session.buffer.mark == 6
    assert session.context.extras["keymap_flags"][OBJECT_FLAG] is True
    assert session.cursor_style() == "hbar"
    assert session.indicator == ("OBJECT", "#6EACDA")


def test_kill_to_end_of_line_restores_cursor() -> None:
    session = make_session(LINE + "\nnext", point=10)

    session.press("ctrl+w", "e")

    assert session.text == "0123456789\nnext"
    assert session.point == 10
    assert session.buffer.kill_ring.yank_text() == "abcdefghij" * 4
    assert not session.buffer.mark_active
    assert session.state is CompositionState.REPEATING


def test_composition_exit_reverts_affordances_and_releases_start() -> None:
    session = make_session(LINE, point=10)

    session.press("ctrl+w")
    start = session.composer.anchors.start
    session.press("e")

    assert start is not None and start.released
    assert session.composer.anchors.start is None
    assert session.cursor_style() == "block"
    assert session.indicator == (None, None)
    assert session.context.extras["keymap_flags"][OBJECT_FLAG] is False
    # excursion and origin stay with the repeat binding
    assert len(session.composer.anchors.live) == 2


def test_action_twice_uses_line_object() -> None:
    session = make_session(LINE + "\nnext line", point=10)

    session.press("ctrl+w", "ctrl+w")

    assert session.text == "next line"
    assert session.point == 0
    assert session.state is CompositionState.IDLE


def test_twice_disabled_restarts_composition() -> None:
    session = make_session(LINE + "\nnext line", point=10, twice=False)

    session.press("ctrl+w", "ctrl+w")

    assert session.state is CompositionState.AWAITING_OBJECT
    assert session.buffer.mark == 10
    assert session.text == LINE + "\nnext line"


def test_different_action_restarts_at_point() -> None:
    session = make_session(WORDS, point=6)

    session.press("ctrl+w", "alt+w")
    request = session.composer.request

    assert request is not None
    assert request.action_id == "copy_region"

    session.press("f")

    assert session.text == WORDS
    assert session.buffer.kill_ring.entries()[0].source == "copy"
    assert session.buffer.kill_ring.yank_text() == "world"
    assert session.point == 6


def test_begin_containment_keeps_part_before_start() -> None:
    session = make_session(WORDS, point=8)

    session.press("ctrl+w", ",", "f")

    assert session.text == "hello rld again"
    assert session.point == 6


def test_end_containment_keeps_part_after_start() -> None:
    session = make_session(WORDS, point=8)

    session.press("ctrl+w", ".", "f")

    assert session.text == "hello wo again"
    assert session.point == 8


@pytest.mark.parametrize(
    ("motion", "paired"),
    [("f", "b"), ("e", "m"), ("}", "{")],
)
@pytest.mark.parametrize("delimiter", [",", "."])
def test_paired_motions_select_the_same_range(motion, paired, delimiter) -> None:
    text = "first line here\n    second line of text\nthird line\n\nlast"
    start = text.index("ine of")

    direct = make_session(text, point=start)
    direct.press("ctrl+w", delimiter, motion)
    opposite = make_session(text, point=start)
    opposite.press("ctrl+w", delimiter, paired)

    assert direct.text == opposite.text
    assert direct.buffer.kill_ring.yank_text() == opposite.buffer.kill_ring.yank_text()


@pytest.mark.parametrize(
    ("delimiter", "expected", "point"),
    [(",", "one wo three four", 4), (".", "one t four", 5)],
)
def test_delimiter_keeps_count_for_paired_motion(delimiter, expected, point) -> None:
    session = make_session("one two three four", point=5)

    session.press("ctrl+w", delimiter, "2", "f")

    assert session.text == expected
    assert session.point == point


def test_unpaired_motion_under_containment_is_clipped_directly() -> None:
    session = make_session(WORDS, point=8)

    session.press("ctrl+w", ",", "ctrl+f")

    # forward-char has no partner: the one-char range lies after the start
    assert session.text == WORDS
    assert session.point == 8


def test_prefix_digits_reach_the_motion() -> None:
    session = make_session("one two three four five", point=0)

    session.press("ctrl+w", "3", "f")

    assert session.text == " four five"
    assert session.point == 0


def test_negative_argument_reverses_motion() -> None:
    session = make_session("one two three", point=7)

    session.press("ctrl+w", "-", "f")

    assert session.text == "one  three"
    assert session.point == 4


def test_fast_path_applies_to_active_selection() -> None:
    session = make_session(WORDS, point=0)
    session.press("ctrl+space", "alt+f")
    deactivations = record(session, "mark.deactivated")

    session.press("ctrl+x ctrl+u")

    assert session.text == "HELLO world again"
    assert session.point == 5
    assert session.state is CompositionState.IDLE
    assert session.loop.transient is None
    assert deactivations == [0]


def test_quit_cancels_without_applying() -> None:
    session = make_session(WORDS, point=6)

    session.press("ctrl+w", "g")

    assert session.state is CompositionState.IDLE
    assert session.text == WORDS
    assert session.composer.anchors.live == ()
    assert session.cursor_style() == "block"


def test_deactivating_selection_cancels() -> None:
    session = make_session(WORDS, point=6)
    session.press("ctrl+w")

    session.buffer.deactivate_mark()

    assert session.state is CompositionState.IDLE
    assert session.composer.request is None

    session.press("f")

    assert session.text == WORDS
    assert session.point == 6


def test_unbound_key_resolves_as_empty_object() -> None:
    session = make_session(WORDS, point=6)

    session.press("ctrl+w", "ctrl+z")

    assert session.text == WORDS
    assert session.state is CompositionState.IDLE
    assert session.loop.transient is None


def test_upcase_and_comment_compose_with_objects() -> None:
    session = make_session("def f():\n    return 1\n", point=0)

    session.press("ctrl+x ctrl+u", "f")
    session.press("alt+;", "n")

    assert session.text == "# DEF f():\n    return 1\n"
    assert session.point == 0


def test_indent_keeps_cursor_on_its_text() -> None:
    session = make_session("alpha\nbeta\n", point=2)

    session.press("ctrl+alt+\\", "l")

    assert session.text == "    alpha\nbeta\n"
    assert session.point == 6


def test_invoked_composable_takes_next_command_as_object() -> None:
    session = make_session(WORDS, point=6)

    session.invoke("composable.kill_region")
    session.press("f")

    assert session.text == "hello  again"
    assert session.point == 6
    assert session.state is CompositionState.REPEATING


def test_invoked_composable_then_key_applies_twice_rule() -> None:
    session = make_session(LINE + "\nnext line", point=10)

    session.invoke("composable.kill_region")
    session.press("ctrl+w")

    assert session.text == "next line"
    assert session.state is CompositionState.IDLE


def test_keep_point_action_leaves_cursor_after_object() -> None:
    session = make_session(WORDS, point=0)
    moving = replace(session.action("upcase_region"), keep_point=True)
    session.registry.register_command(
        make_composable(moving, session.composer), replace=True
    )

    session.press("ctrl+x ctrl+u", "f")

    assert session.text == "HELLO world again"
    assert session.point == 5


def test_composition_events_are_logged(monkeypatch) -> None:
    from composable.runtime import telemetry

    events: List[str] = []
    monkeypatch.setattr(
        telemetry, "record_event", lambda name, **kwargs: events.append(name)
    )
    session = make_session(WORDS, point=0)

    session.press("ctrl+w", "f")
    session.press("ctrl+w", "g")

    assert [name for name in events if name.startswith("composition.")] == [
        "composition.enter",
        "composition.resolve",
        "composition.enter",
        "composition.cancel",
    ]
    assert "repeat.arm" in events
    assert "repeat.expire" in events


def test_close_releases_everything() -> None:
    session = make_session(WORDS, point=0)
    session.press("ctrl+w", "f")
    session.press("ctrl+w")

    session.close()

    assert session.closed
    assert session.composer.anchors.live == ()
    assert session.loop.transient is None
    with pytest.raises(RuntimeError):
        session.press("f")
