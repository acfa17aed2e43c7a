from __future__ import annotations

from typing import List

import pytest

from composable.buffer import (
    KillRing,
    MarkerReleasedError,
    PositionError,
    TextBuffer,
)


def make_buffer(text: str = "alpha beta gamma", point: int = 0) -> TextBuffer:
    buffer = TextBuffer(text)
    buffer.goto(point)
    return buffer


def test_markers_follow_edits_before_them() -> None:
    buffer = make_buffer()
    marker = buffer.make_marker(6, label="beta")

    buffer.insert("new ", at=0)

    assert marker.position == 10
    assert buffer.substring(marker.position, marker.position + 4) == "beta"


def test_insertion_at_marker_goes_after_it() -> None:
    buffer = make_buffer()
    marker = buffer.make_marker(6)

    buffer.insert("big ", at=6)

    assert marker.position == 6


def test_deletion_around_marker_collapses_it() -> None:
    buffer = make_buffer()
    inside = buffer.make_marker(8)
    after = buffer.make_marker(12)

    buffer.delete_range(6, 11)

    assert inside.position == 6
    assert after.position == 7
    assert buffer.text == "alpha gamma"


def test_released_marker_cannot_be_read() -> None:
    buffer = make_buffer()
    marker = buffer.make_marker(3)
    count = buffer.marker_count

    marker.release()

    assert marker.released
    assert buffer.marker_count == count - 1
    with pytest.raises(MarkerReleasedError):
        _ = marker.position


def test_point_and_mark_move_with_edits() -> None:
    buffer = make_buffer(point=11)
    buffer.set_mark(6)

    buffer.delete_range(0, 6)

    assert buffer.point == 5
    assert buffer.mark == 0
    assert buffer.region() is not None
    assert buffer.substring(0, 5) == "beta "


def test_replace_range_rejects_out_of_range_positions() -> None:
    buffer = make_buffer()

    with pytest.raises(PositionError) as excinfo:
        buffer.replace_range(0, 99, "", label="bad")

    assert excinfo.value.position == 99


def test_mark_deactivation_is_announced_once() -> None:
    buffer = make_buffer()
    seen: List[object] = []
    buffer.bus.subscribe("mark.deactivated", seen.append)

    buffer.push_mark(activate=True)
    buffer.deactivate_mark()
    buffer.deactivate_mark()

    assert seen == [0]
    assert not buffer.mark_active


def test_push_and_pop_mark_ring() -> None:
    buffer = make_buffer(point=3)
    buffer.push_mark()
    buffer.goto(9)
    buffer.push_mark()

    assert buffer.mark == 9
    assert buffer.pop_mark() == 3
    assert buffer.mark == 3


def test_buffer_changed_event_carries_delta() -> None:
    buffer = make_buffer()
    deltas: List[object] = []
    buffer.bus.subscribe("buffer.changed", deltas.append)

    delta = buffer.replace_range(0, 5, "omega", label="rename")

    assert deltas == [delta]
    assert delta.removed == "alpha"
    assert delta.version == buffer.version == 1


def test_line_geometry() -> None:
    buffer = make_buffer("one\ntwo\nthree")

    assert buffer.line_start(5) == 4
    assert buffer.line_end(5) == 7
    assert buffer.next_line_start(5) == 8
    assert buffer.next_line_start(10) == len("one\ntwo\nthree")


def test_kill_ring_append_and_bound() -> None:
    ring = KillRing(max_entries=2)
    ring.push("one")
    ring.append(" two")
    ring.push("three")
    ring.push("four")

    assert len(ring) == 2
    assert ring.yank_text() == "four"
    assert ring.yank_text(1) == "three"


def test_kill_ring_requires_positive_size() -> None:
    with pytest.raises(ValueError):
        KillRing(max_entries=0)
