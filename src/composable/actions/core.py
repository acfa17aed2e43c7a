"""Core commands every host keymap carries."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, cast

if TYPE_CHECKING:  # pragma: no cover
    from composable.host.base import EditorContext
    from composable.host.command_loop import CommandLoop


def _loop(context: "EditorContext") -> "CommandLoop":
    loop = context.extras.get("command_loop")
    if loop is None:
        raise RuntimeError("EditorContext.extras missing 'command_loop'")
    return cast("CommandLoop", loop)


def _last_key(context: "EditorContext") -> str:
    keys = cast(tuple, context.extras.get("this_command_keys", ()))
    if not keys:
        return ""
    token = str(keys[-1])
    return token.rsplit("+", 1)[-1] if len(token) > 1 else token


def digit_argument(context: "EditorContext", arg: Optional[int]) -> str:
    del arg
    prefix = _loop(context).prefix
    digit = _last_key(context)
    prefix.add_digit(digit)
    return f"arg {prefix.describe()}"


def negative_argument(context: "EditorContext", arg: Optional[int]) -> str:
    del arg
    prefix = _loop(context).prefix
    prefix.negate()
    return f"arg {prefix.describe()}"


def universal_argument(context: "EditorContext", arg: Optional[int]) -> str:
    del arg
    prefix = _loop(context).prefix
    prefix.multiply()
    return f"arg {prefix.describe()}"


def set_mark_command(context: "EditorContext", arg: Optional[int]) -> str:
    buffer = context.buffer
    if arg is not None:
        target = buffer.mark
        buffer.deactivate_mark()
        buffer.pop_mark()
        if target is not None:
            buffer.goto(target)
        return "mark_popped"
    buffer.push_mark(activate=True)
    return "mark_set"


def exchange_point_and_mark(context: "EditorContext", arg: Optional[int]) -> None:
    del arg
    context.buffer.exchange_point_and_mark()
    context.buffer.activate_mark()


def keyboard_quit(context: "EditorContext", arg: Optional[int]) -> str:
    del arg
    _loop(context).prefix.reset()
    context.buffer.deactivate_mark()
    context.bus.emit("keyboard.quit", None)
    return "quit"


def undefined(context: "EditorContext", arg: Optional[int]) -> str:
    del arg
    keys = cast(tuple, context.extras.get("this_command_keys", ()))
    message = f"{' '.join(keys)} is undefined"
    context.bus.emit("keyboard.undefined", message)
    return message


__all__ = [
    "digit_argument",
    "exchange_point_and_mark",
    "keyboard_quit",
    "negative_argument",
    "set_mark_command",
    "undefined",
    "universal_argument",
]
