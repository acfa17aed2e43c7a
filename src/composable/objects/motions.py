"""Point-moving commands used as composition objects.

Each ``*_position`` function is pure: it takes the buffer text and a start
position and returns where the motion lands. The command handlers below wrap
them with the ``handler(context, arg)`` signature the command loop expects.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Callable, List, Optional, Tuple

if TYPE_CHECKING:  # pragma: no cover
    from composable.host.base import EditorContext

_SENTENCE_END = re.compile(r"[.?!][\"')\]]*(?=\s|$)")


def _count(arg: Optional[int]) -> int:
    return 1 if arg is None else arg


def _is_word(ch: str) -> bool:
    return ch.isalnum()


def _lines(text: str) -> List[Tuple[int, int]]:
    spans: List[Tuple[int, int]] = []
    start = 0
    for line in text.split("\n"):
        spans.append((start, start + len(line)))
        start += len(line) + 1
    return spans


def _line_index(spans: List[Tuple[int, int]], position: int) -> int:
    for index, (start, end) in enumerate(spans):
        if start <= position <= end:
            return index
    return len(spans) - 1


def _blank(text: str, span: Tuple[int, int]) -> bool:
    return not text[span[0] : span[1]].strip()


# characters and words


def char_position(text: str, position: int, n: int) -> int:
    return max(0, min(len(text), position + n))


def word_position(text: str, position: int, n: int) -> int:
    pos = position
    if n >= 0:
        for _ in range(n):
            while pos < len(text) and not _is_word(text[pos]):
                pos += 1
            while pos < len(text) and _is_word(text[pos]):
                pos += 1
    else:
        for _ in range(-n):
            while pos > 0 and not _is_word(text[pos - 1]):
                pos -= 1
            while pos > 0 and _is_word(text[pos - 1]):
                pos -= 1
    return pos


# lines


def line_position(text: str, position: int, n: int) -> int:
    """Move ``n`` lines keeping the column where the target line allows."""

    spans = _lines(text)
    index = _line_index(spans, position)
    column = position - spans[index][0]
    target = max(0, min(len(spans) - 1, index + n))
    start, end = spans[target]
    return min(start + column, end)


def line_boundary_position(text: str, position: int, n: int, *, end: bool) -> int:
    """Beginning (or end) of the line ``n - 1`` lines away."""

    spans = _lines(text)
    index = max(0, min(len(spans) - 1, _line_index(spans, position) + n - 1))
    return spans[index][1] if end else spans[index][0]


def indentation_position(text: str, position: int) -> int:
    spans = _lines(text)
    start, end = spans[_line_index(spans, position)]
    pos = start
    while pos < end and text[pos] in " \t":
        pos += 1
    return pos


def forward_line_position(text: str, position: int, n: int) -> int:
    """Start of the line ``n`` lines away; past the last line means end of text."""

    spans = _lines(text)
    target = _line_index(spans, position) + n
    if target >= len(spans):
        return len(text)
    return spans[max(0, target)][0]


# paragraphs and sentences


def paragraph_position(text: str, position: int, n: int) -> int:
    if n == 0:
        return position
    spans = _lines(text)
    index = _line_index(spans, position)
    if n > 0:
        for _ in range(n):
            while index < len(spans) and _blank(text, spans[index]):
                index += 1
            while index < len(spans) and not _blank(text, spans[index]):
                index += 1
            if index >= len(spans):
                return len(text)
        return spans[index][0]

    if position == spans[index][0] or _blank(text, spans[index]):
        index -= 1
    for _ in range(-n):
        while index >= 0 and _blank(text, spans[index]):
            index -= 1
        while index >= 0 and not _blank(text, spans[index]):
            index -= 1
        if index < 0:
            return 0
    return spans[index][0]


def sentence_position(text: str, position: int, n: int) -> int:
    pos = position
    if n >= 0:
        for _ in range(n):
            match = _SENTENCE_END.search(text, pos)
            pos = len(text) if match is None else match.end()
        return pos

    starts = [0]
    for match in _SENTENCE_END.finditer(text):
        start = match.end()
        while start < len(text) and text[start].isspace():
            start += 1
        starts.append(start)
    for _ in range(-n):
        earlier = [start for start in starts if start < pos]
        pos = max(earlier) if earlier else 0
    return pos


# command handlers


def _motion(
    compute: Callable[[str, int, int], int],
) -> Callable[["EditorContext", Optional[int]], None]:
    def handler(context: "EditorContext", arg: Optional[int]) -> None:
        buffer = context.buffer
        buffer.goto(compute(buffer.text, buffer.point, _count(arg)))

    return handler


def _reverse(
    compute: Callable[[str, int, int], int],
) -> Callable[[str, int, int], int]:
    return lambda text, position, n: compute(text, position, -n)


forward_char = _motion(char_position)
backward_char = _motion(_reverse(char_position))
forward_word = _motion(word_position)
backward_word = _motion(_reverse(word_position))
next_line = _motion(line_position)
previous_line = _motion(_reverse(line_position))
forward_paragraph = _motion(paragraph_position)
backward_paragraph = _motion(_reverse(paragraph_position))
forward_sentence = _motion(sentence_position)
backward_sentence = _motion(_reverse(sentence_position))


def move_beginning_of_line(context: "EditorContext", arg: Optional[int]) -> None:
    buffer = context.buffer
    buffer.goto(line_boundary_position(buffer.text, buffer.point, _count(arg), end=False))


def move_end_of_line(context: "EditorContext", arg: Optional[int]) -> None:
    buffer = context.buffer
    buffer.goto(line_boundary_position(buffer.text, buffer.point, _count(arg), end=True))


def back_to_indentation(context: "EditorContext", arg: Optional[int]) -> None:
    del arg
    buffer = context.buffer
    buffer.goto(indentation_position(buffer.text, buffer.point))


def beginning_of_buffer(context: "EditorContext", arg: Optional[int]) -> None:
    del arg
    context.buffer.goto(0)


def end_of_buffer(context: "EditorContext", arg: Optional[int]) -> None:
    del arg
    context.buffer.goto(len(context.buffer))


__all__ = [
    "back_to_indentation",
    "backward_char",
    "backward_paragraph",
    "backward_sentence",
    "backward_word",
    "beginning_of_buffer",
    "char_position",
    "end_of_buffer",
    "forward_char",
    "forward_line_position",
    "forward_paragraph",
    "forward_sentence",
    "forward_word",
    "indentation_position",
    "line_boundary_position",
    "line_position",
    "move_beginning_of_line",
    "move_end_of_line",
    "next_line",
    "paragraph_position",
    "previous_line",
    "sentence_position",
    "word_position",
]
