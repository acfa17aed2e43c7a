"""Range-consuming editing actions.

Every handler has the signature ``handler(context, start, end, arg)`` and
works on ``[start, end)`` of the context's buffer. ``RegionAction`` ties a
handler to a context so the composer can call ``apply(start, end, arg)``
without knowing anything about the buffer.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Callable, List, Optional

if TYPE_CHECKING:  # pragma: no cover
    from composable.host.base import EditorContext

RegionHandler = Callable[["EditorContext", int, int, Optional[int]], object]


@dataclass(frozen=True, slots=True)
class RegionAction:
    id: str
    handler: RegionHandler
    description: str = ""
    keep_point: bool = False
    context: Optional["EditorContext"] = None

    def bind(self, context: "EditorContext") -> "RegionAction":
        return replace(self, context=context)

    def apply(self, start: int, end: int, arg: Optional[int]) -> object:
        if self.context is None:
            raise RuntimeError(f"Action '{self.id}' is not bound to an editor context")
        if start > end:
            start, end = end, start
        return self.handler(self.context, start, end, arg)


def kill_region(
    context: "EditorContext", start: int, end: int, arg: Optional[int]
) -> str:
    del arg
    buffer = context.buffer
    text = buffer.substring(start, end)
    tail = context.extras.get("kill_tail")
    if tail == (start, buffer.version):
        buffer.kill_ring.append(text)
    elif tail == (end, buffer.version):
        buffer.kill_ring.append(text, before=True)
    else:
        buffer.kill_ring.push(text)
    buffer.delete_range(start, end)
    context.extras["kill_tail"] = (start, buffer.version)
    buffer.deactivate_mark()
    context.bus.emit("action.kill", {"text": text, "range": (start, end)})
    return text


def copy_region(
    context: "EditorContext", start: int, end: int, arg: Optional[int]
) -> str:
    del arg
    buffer = context.buffer
    text = buffer.substring(start, end)
    buffer.kill_ring.push(text, source="copy")
    buffer.deactivate_mark()
    context.bus.emit("action.copy", {"text": text, "range": (start, end)})
    return text


def delete_region(
    context: "EditorContext", start: int, end: int, arg: Optional[int]
) -> str:
    del arg
    buffer = context.buffer
    text = buffer.substring(start, end)
    buffer.delete_range(start, end)
    buffer.deactivate_mark()
    return text


def _transform(
    context: "EditorContext", start: int, end: int, transform: Callable[[str], str], label: str
) -> str:
    buffer = context.buffer
    original = buffer.substring(start, end)
    updated = transform(original)
    if updated != original:
        lead, trail = _changed_span(original, updated)
        buffer.replace_range(
            start + lead,
            end - trail,
            updated[lead : len(updated) - trail],
            label=label,
        )
    buffer.deactivate_mark()
    return updated


def _changed_span(original: str, updated: str) -> tuple[int, int]:
    """Lengths of the common head and tail; only the middle gets replaced."""

    limit = min(len(original), len(updated))
    lead = 0
    while lead < limit and original[lead] == updated[lead]:
        lead += 1
    trail = 0
    while (
        trail < limit - lead
        and original[len(original) - 1 - trail] == updated[len(updated) - 1 - trail]
    ):
        trail += 1
    return lead, trail


def upcase_region(
    context: "EditorContext", start: int, end: int, arg: Optional[int]
) -> str:
    del arg
    return _transform(context, start, end, str.upper, "upcase_region")


def downcase_region(
    context: "EditorContext", start: int, end: int, arg: Optional[int]
) -> str:
    del arg
    return _transform(context, start, end, str.lower, "downcase_region")


def _capitalize_words(text: str) -> str:
    out: List[str] = []
    in_word = False
    for ch in text:
        if ch.isalnum():
            out.append(ch.lower() if in_word else ch.upper())
            in_word = True
        else:
            out.append(ch)
            in_word = False
    return "".join(out)


def capitalize_region(
    context: "EditorContext", start: int, end: int, arg: Optional[int]
) -> str:
    del arg
    return _transform(context, start, end, _capitalize_words, "capitalize_region")


def _line_block(context: "EditorContext", start: int, end: int) -> tuple[int, int]:
    """Whole lines touched by ``[start, end)``; a trailing line start is excluded."""

    buffer = context.buffer
    if end > start and end == buffer.line_start(end):
        end -= 1
    return buffer.line_start(start), buffer.line_end(end)


def _indent_of(line: str) -> int:
    return len(line) - len(line.lstrip(" \t"))


def comment_or_uncomment_region(
    context: "EditorContext", start: int, end: int, arg: Optional[int]
) -> str:
    del arg
    prefix = context.settings.comment_prefix
    marker = prefix.rstrip() or prefix
    block_start, block_end = _line_block(context, start, end)
    lines = context.buffer.substring(block_start, block_end).split("\n")
    filled = [line for line in lines if line.strip()]
    commented = bool(filled) and all(
        line[_indent_of(line) :].startswith(marker) for line in filled
    )

    result: List[str] = []
    for line in lines:
        if not line.strip():
            result.append(line)
            continue
        indent = _indent_of(line)
        body = line[indent:]
        if commented:
            body = body[len(prefix) :] if body.startswith(prefix) else body[len(marker) :]
        else:
            body = prefix + body
        result.append(line[:indent] + body)
    return _transform(
        context,
        block_start,
        block_end,
        lambda _text: "\n".join(result),
        "uncomment_region" if commented else "comment_region",
    )


def indent_region(
    context: "EditorContext", start: int, end: int, arg: Optional[int]
) -> str:
    width = context.settings.indent_width if arg is None else arg
    block_start, block_end = _line_block(context, start, end)
    lines = context.buffer.substring(block_start, block_end).split("\n")

    result: List[str] = []
    for line in lines:
        if not line.strip():
            result.append(line)
        elif width >= 0:
            result.append(" " * width + line)
        else:
            strip = min(-width, _indent_of(line))
            result.append(line[strip:])
    return _transform(
        context, block_start, block_end, lambda _text: "\n".join(result), "indent_region"
    )


DEFAULT_REGION_ACTIONS: tuple[RegionAction, ...] = (
    RegionAction("kill_region", kill_region, "Kill the text in range"),
    RegionAction("copy_region", copy_region, "Copy the text in range to the kill ring"),
    RegionAction("delete_region", delete_region, "Delete the text in range"),
    RegionAction("upcase_region", upcase_region, "Upcase the text in range"),
    RegionAction("downcase_region", downcase_region, "Downcase the text in range"),
    RegionAction("capitalize_region", capitalize_region, "Capitalize words in range"),
    RegionAction(
        "comment_or_uncomment_region",
        comment_or_uncomment_region,
        "Toggle line comments on the lines in range",
    ),
    RegionAction("indent_region", indent_region, "Indent the lines in range"),
)


def region_command(action: RegionAction) -> Callable[["EditorContext", Optional[int]], object]:
    """Adapt a region action into a plain command acting on the active region."""

    def handler(context: "EditorContext", arg: Optional[int]) -> object:
        region = context.buffer.region()
        if region is None:
            return "no_region"
        return action.handler(context, region.start, region.end, arg)

    return handler


__all__ = [
    "DEFAULT_REGION_ACTIONS",
    "RegionAction",
    "RegionHandler",
    "capitalize_region",
    "comment_or_uncomment_region",
    "copy_region",
    "delete_region",
    "downcase_region",
    "indent_region",
    "kill_region",
    "region_command",
    "upcase_region",
]
