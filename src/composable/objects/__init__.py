"""Motions and unit-selecting objects supplied by the reference host."""

from .marking import mark_line, mark_paragraph, mark_word
from .motions import (
    back_to_indentation,
    backward_char,
    backward_paragraph,
    backward_sentence,
    backward_word,
    beginning_of_buffer,
    end_of_buffer,
    forward_char,
    forward_paragraph,
    forward_sentence,
    forward_word,
    move_beginning_of_line,
    move_end_of_line,
    next_line,
    previous_line,
)

__all__ = [
    "back_to_indentation",
    "backward_char",
    "backward_paragraph",
    "backward_sentence",
    "backward_word",
    "beginning_of_buffer",
    "end_of_buffer",
    "forward_char",
    "forward_paragraph",
    "forward_sentence",
    "forward_word",
    "mark_line",
    "mark_paragraph",
    "mark_word",
    "move_beginning_of_line",
    "move_end_of_line",
    "next_line",
    "previous_line",
]
