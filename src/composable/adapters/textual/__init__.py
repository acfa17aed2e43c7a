"""Textual front end for composable editing sessions."""

from .controller import TextualComposableAdapter, TextualUIHooks

__all__ = ["TextualComposableAdapter", "TextualUIHooks"]
