"""Composition state machine: action first, then the object it acts on.

A composable command either applies its action to the active selection right
away, or starts a selection at point and waits. The next command the host
dispatches is taken as the object: once it has run, the selection it produced
(optionally clipped to one side of the start) is handed to the action, the
cursor goes back to where the composition began, and the motion's key is
armed to repeat the whole thing.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, List, Optional

from composable.config import ComposableSettings
from composable.host.base import CommandEvent
from composable.host.protocol import Action, Anchor, EditorHost
from composable.runtime import telemetry

from .anchors import AnchorTracker
from .containment import Containment, clip
from .pairs import PairingTable
from .repeat import RepeatArming

OBJECT_FLAG = "composable_object"


class CompositionState(str, Enum):
    IDLE = "idle"
    AWAITING_OBJECT = "awaiting_object"
    REPEATING = "repeating"


@dataclass(slots=True)
class CompositionRequest:
    """A pending composition, alive only while an object is awaited."""

    action: Optional[Action]
    start_anchor: Anchor
    arg: Optional[int] = None
    containment: Containment = Containment.NONE
    default_object: Optional[str] = None
    expand: bool = False
    entry_command: Optional[str] = None
    skip_first: bool = True

    @property
    def action_id(self) -> Optional[str]:
        return self.action.id if self.action is not None else None


class Composer:
    """Owns the single composition request and repeat binding of a session."""

    def __init__(
        self,
        host: EditorHost,
        pairs: PairingTable,
        *,
        settings: Optional[ComposableSettings] = None,
        logger_name: str = "composable.composition",
    ) -> None:
        self.host = host
        self.pairs = pairs
        self.settings = settings or ComposableSettings()
        self.anchors = AnchorTracker(host)
        self.repeat = RepeatArming(host, self.anchors, logger_name=logger_name)
        self.logger = telemetry.get_logger(logger_name)
        self._logger_name = logger_name
        self._request: Optional[CompositionRequest] = None
        self._resolving = False
        self._saved_cursor: Optional[str] = None
        self._removers: List[Callable[[], None]] = [
            host.add_post_command_hook(self.on_command),
            host.add_deactivate_hook(self.on_deactivate),
        ]

    # state

    @property
    def request(self) -> Optional[CompositionRequest]:
        return self._request

    @property
    def state(self) -> CompositionState:
        if self._request is not None:
            return CompositionState.AWAITING_OBJECT
        if self.repeat.armed:
            return CompositionState.REPEATING
        return CompositionState.IDLE

    @property
    def awaiting(self) -> bool:
        return self._request is not None

    # entry points

    def activate(
        self,
        action: Action,
        arg: Optional[int] = None,
        *,
        command_id: Optional[str] = None,
    ) -> str:
        """Run ``action`` as a composable command.

        ``command_id`` names the host command doing the call; only its own
        post-command notification is skipped, so a call through ``invoke``
        leaves the next dispatched command to be the object.
        """

        request = self._request
        if request is not None:
            if (
                self.settings.twice
                and not request.expand
                and request.action_id == action.id
            ):
                return self._apply_twice(request, arg)
            self.cancel(reason="restart")

        if self.host.selection_active():
            return self._fast_path(action, arg)

        self._enter(action, arg, expand=False, command_id=command_id)
        return "awaiting_object"

    def begin_expand(
        self, arg: Optional[int] = None, *, command_id: Optional[str] = None
    ) -> str:
        """Start a composition with no action; the object only grows the selection."""

        if self._request is not None:
            return "awaiting_object"
        self._enter(None, arg, expand=True, command_id=command_id)
        return "awaiting_object"

    def set_containment(self, containment: Containment) -> None:
        if self._request is None:
            return
        self._request.containment = containment
        telemetry.record_event(
            "composition.containment",
            data={"containment": containment.value},
            logger_name=self._logger_name,
        )

    def cancel(self, *, reason: str = "cancel") -> None:
        request = self._request
        if request is None:
            return
        with self._resolution():
            self.host.deactivate_selection()
        self._exit()
        telemetry.record_event(
            "composition.cancel",
            level="info",
            data={"action": request.action_id, "reason": reason},
            logger_name=self._logger_name,
        )

    def close(self) -> None:
        self.cancel(reason="close")
        self.repeat.expire()
        self.anchors.release_all()
        for remove in self._removers:
            remove()
        self._removers.clear()

    # host observers

    def on_command(self, event: CommandEvent) -> None:
        if self._resolving or self.repeat.replaying:
            return
        request = self._request
        if request is None:
            return
        if request.skip_first:
            request.skip_first = False
            if request.entry_command in (None, event.command_id):
                return
        if not self.host.selection_active():
            self.cancel(reason="deactivated")
            return
        if event.kind == "argument":
            return
        self._resolve(request, event)

    def on_deactivate(self) -> None:
        if self._resolving or self.repeat.replaying:
            return
        if self._request is not None:
            self.cancel(reason="deactivated")
        self.repeat.expire()

    # transitions

    def _enter(
        self,
        action: Optional[Action],
        arg: Optional[int],
        *,
        expand: bool,
        command_id: Optional[str] = None,
    ) -> None:
        host = self.host
        position = host.current_position()
        start = self.anchors.mark_start(position)
        self._request = CompositionRequest(
            action=action,
            start_anchor=start,
            arg=arg,
            expand=expand,
            entry_command=command_id,
        )
        with self._resolution():
            host.push_anchor(position)
        self._saved_cursor = host.cursor_style()
        host.set_cursor_style(self.settings.object_cursor)
        host.set_indicator(self.settings.indicator_label, self.settings.indicator_color)
        host.set_keymap_flag(OBJECT_FLAG, True)
        telemetry.record_event(
            "composition.enter",
            level="info",
            data={
                "action": action.id if action is not None else None,
                "start": position,
                "expand": expand,
            },
            logger_name=self._logger_name,
        )

    def _exit(self) -> None:
        self._request = None
        self.anchors.release_start()
        host = self.host
        if self._saved_cursor is not None:
            host.set_cursor_style(self._saved_cursor)
            self._saved_cursor = None
        host.set_indicator(None)
        host.set_keymap_flag(OBJECT_FLAG, False)

    def _fast_path(self, action: Action, arg: Optional[int]) -> str:
        host = self.host
        anchor = host.selection_anchor()
        cursor = host.current_position()
        if anchor is None:
            anchor = cursor
        with self._resolution():
            action.apply(min(anchor, cursor), max(anchor, cursor), arg)
            host.deactivate_selection()
        telemetry.record_event(
            "composition.fast_path",
            data={"action": action.id, "range": (min(anchor, cursor), max(anchor, cursor))},
            logger_name=self._logger_name,
        )
        return "applied"

    def _apply_twice(self, request: CompositionRequest, arg: Optional[int]) -> str:
        default_object = self.settings.default_object
        request.default_object = default_object
        request.skip_first = False
        with self._resolution():
            self.host.invoke(default_object, arg)
        return "default_object"

    def _resolve(self, request: CompositionRequest, event: CommandEvent) -> None:
        host = self.host
        motion = request.default_object or event.command_id
        with self._resolution(), telemetry.span(
            "composition::resolve",
            logger_name=self._logger_name,
            component="composition",
            metadata={"action": request.action_id, "motion": motion},
        ) as span:
            if request.containment is not Containment.NONE:
                paired = self.pairs.get(motion)
                if paired is not None:
                    host.set_selection_anchor(host.current_position())
                    host.invoke(paired, event.arg)
                    span.add_metadata("paired", paired)

            start = request.start_anchor.position
            anchor = host.selection_anchor()
            if anchor is None:
                anchor = start
            anchor, cursor = clip(
                anchor, host.current_position(), start, request.containment
            )
            host.set_selection_anchor(anchor)
            host.set_position(cursor)

            repeatable = (
                self.settings.repeat
                and event.kind == "motion"
                and event.last_key is not None
            )
            if repeatable:
                self.anchors.track_excursion(cursor)

            low, high = min(anchor, cursor), max(anchor, cursor)
            if request.action is not None:
                request.action.apply(low, high, request.arg)
                if not request.action.keep_point:
                    host.set_position(request.start_anchor.position)
                host.deactivate_selection()

            if repeatable:
                self.repeat.arm(
                    key=event.last_key or "",
                    motion=motion,
                    action=request.action,
                    arg=request.arg,
                    expand=request.expand,
                )

        self._exit()
        telemetry.record_event(
            "composition.resolve",
            level="info",
            data={
                "action": request.action_id,
                "motion": motion,
                "containment": request.containment.value,
                "range": (low, high),
            },
            logger_name=self._logger_name,
        )

    @contextmanager
    def _resolution(self) -> Iterator[None]:
        previous = self._resolving
        self._resolving = True
        try:
            yield
        finally:
            self._resolving = previous


__all__ = [
    "Composer",
    "CompositionRequest",
    "CompositionState",
    "OBJECT_FLAG",
]
