"""Composable editing: an action, then the object it acts on."""

__all__ = [
    "actions",
    "adapters",
    "buffer",
    "composition",
    "config",
    "host",
    "keymaps",
    "objects",
    "runtime",
    "session",
]

__version__ = "0.1.0"
