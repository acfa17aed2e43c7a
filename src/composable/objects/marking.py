"""Objects that select a whole unit around point.

Called with an inactive or empty selection they select the unit at point;
called again while their own selection is live they extend it by ``arg``
more units, which is what the repeat key relies on.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from .motions import forward_line_position, paragraph_position, word_position

if TYPE_CHECKING:  # pragma: no cover
    from composable.host.base import EditorContext


def _extending(context: "EditorContext") -> bool:
    buffer = context.buffer
    return buffer.mark_active and buffer.mark is not None and buffer.mark != buffer.point


def mark_line(context: "EditorContext", arg: Optional[int]) -> None:
    buffer = context.buffer
    n = 1 if arg is None else arg
    if _extending(context):
        buffer.goto(forward_line_position(buffer.text, buffer.point, n))
        return
    if n >= 0:
        buffer.set_mark(buffer.line_start(buffer.point))
        buffer.goto(forward_line_position(buffer.text, buffer.point, n))
    else:
        buffer.set_mark(buffer.next_line_start(buffer.point))
        buffer.goto(forward_line_position(buffer.text, buffer.point, n + 1))


def mark_word(context: "EditorContext", arg: Optional[int]) -> None:
    buffer = context.buffer
    n = 1 if arg is None else arg
    text = buffer.text
    if _extending(context):
        buffer.goto(word_position(text, buffer.point, n))
        return
    if n >= 0:
        start = buffer.point
        while start > 0 and text[start - 1].isalnum():
            start -= 1
        buffer.set_mark(start)
        buffer.goto(word_position(text, start, n))
    else:
        end = buffer.point
        while end < len(text) and text[end].isalnum():
            end += 1
        buffer.set_mark(end)
        buffer.goto(word_position(text, end, n))


def mark_paragraph(context: "EditorContext", arg: Optional[int]) -> None:
    buffer = context.buffer
    n = 1 if arg is None else arg
    text = buffer.text
    if _extending(context):
        buffer.goto(paragraph_position(text, buffer.point, n))
        return
    if n >= 0:
        start = paragraph_position(text, paragraph_position(text, buffer.point, 1), -1)
        buffer.set_mark(start)
        buffer.goto(paragraph_position(text, start, n))
    else:
        end = paragraph_position(text, paragraph_position(text, buffer.point, -1), 1)
        buffer.set_mark(end)
        buffer.goto(paragraph_position(text, end, n))


__all__ = ["mark_line", "mark_paragraph", "mark_word"]
