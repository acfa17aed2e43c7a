from __future__ import annotations

from typing import Any

import pytest

from composable.composition import CompositionState
from composable.config import ComposableSettings
from composable.session import EditorSession, create_session

TEXT = "one two three four five"


def make_session(text: str = TEXT, point: int = 0, **settings: Any) -> EditorSession:
    session = create_session(text, settings=ComposableSettings(**settings))
    session.buffer.goto(point)
    return session


@pytest.mark.parametrize("repeats", [1, 2, 3])
def test_repeating_equals_a_larger_count(repeats: int) -> None:
    repeated = make_session()
    repeated.press("ctrl+w", "f", *["f"] * repeats)
    counted = make_session()
    counted.press("ctrl+w", str(repeats + 1), "f")

    assert repeated.text == counted.text
    assert repeated.point == counted.point == 0
    assert repeated.buffer.kill_ring.yank_text() == counted.buffer.kill_ring.yank_text()


def test_repeated_kills_append_to_one_entry() -> None:
    session = make_session()

    session.press("ctrl+w", "f", "f")

    assert session.buffer.kill_ring.yank_text() == "one two"
    assert len(session.buffer.kill_ring) == 1
    assert session.composer.repeat.binding is not None
    assert session.composer.repeat.binding.fired == 1


def test_negative_argument_repeats_backwards() -> None:
    session = make_session("one two three", point=4)

    session.press("ctrl+w", "f")
    assert session.text == "one  three"

    session.press("alt+-", "f")

    assert session.text == " three"
    assert session.point == 0
    assert session.buffer.kill_ring.yank_text() == "one two"
    assert session.state is CompositionState.REPEATING


def test_unrelated_command_expires_repeat() -> None:
    session = make_session()
    session.press("ctrl+w", "f")
    assert session.loop.transient is not None

    session.press("ctrl+f")

    assert session.state is CompositionState.IDLE
    assert session.loop.transient is None
    assert session.composer.anchors.live == ()


def test_repeat_disabled_arms_nothing() -> None:
    session = make_session(repeat=False)

    session.press("ctrl+w", "f")

    assert session.state is CompositionState.IDLE
    assert session.loop.transient is None
    assert session.composer.anchors.live == ()


def test_repeat_returns_to_origin_after_each_press() -> None:
    session = make_session("keep alpha beta gamma", point=5)

    session.press("ctrl+w", "f")
    assert (session.text, session.point) == ("keep  beta gamma", 5)

    session.press("f")

    assert (session.text, session.point) == ("keep  gamma", 5)
    assert session.buffer.kill_ring.yank_text() == "alpha beta"


def test_twice_does_not_arm_repeat() -> None:
    session = make_session("first\nsecond\n")

    session.press("ctrl+w", "ctrl+w")

    assert session.text == "second\n"
    assert session.loop.transient is None
