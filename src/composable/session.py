"""Editing session wiring the reference host to the composer."""

from __future__ import annotations

from typing import Callable, List, Optional, Tuple

from composable.actions.regions import DEFAULT_REGION_ACTIONS, RegionAction
from composable.buffer import KillRing, Marker, TextBuffer
from composable.composition import (
    Composer,
    CompositionState,
    MarkModeInterceptor,
    OBJECT_KEYMAP,
    PairingTable,
    default_pairing_table,
    load_object_keymap,
    register_composables,
)
from composable.config import ComposableSettings, load_settings
from composable.host.base import CommandEvent, DispatchResult, EditorContext, KeyInput
from composable.host.command_loop import CommandLoop, TransientHandle
from composable.host.defaults import GLOBAL_KEYMAP, load_default_keymaps
from composable.host.keymap_helpers import update_flag
from composable.keymaps import KeymapRegistry, KeymapResolver, KeyStroke
from composable.runtime import telemetry
from composable.runtime.events import EventBus

DEFAULT_CURSOR = "block"


class EditorSession:
    """One buffer, its keymaps, command loop, and composer.

    The session is the ``EditorHost`` the composer drives: every host
    primitive maps onto the buffer or the command loop.
    """

    def __init__(
        self,
        text: str = "",
        *,
        settings: Optional[ComposableSettings] = None,
        pairs: Optional[PairingTable] = None,
        name: str = "default",
    ) -> None:
        self.settings = settings or load_settings()
        self.logger = telemetry.get_logger("composable.session")
        self.bus = EventBus()
        self.buffer = TextBuffer(
            text,
            name=name,
            bus=self.bus,
            kill_ring=KillRing(max_entries=self.settings.kill_ring_max),
        )
        self.context = EditorContext(
            buffer=self.buffer, bus=self.bus, settings=self.settings
        )
        self.registry = KeymapRegistry(logger_name="composable.keymaps")
        load_default_keymaps(self.registry)
        self.resolver = KeymapResolver(self.registry, logger_name="composable.keymaps")
        self.loop = CommandLoop(
            self.context,
            keymap_registry=self.registry,
            keymap_resolver=self.resolver,
            keymaps=(OBJECT_KEYMAP, GLOBAL_KEYMAP),
        )

        self._cursor_style = DEFAULT_CURSOR
        self.indicator: Tuple[Optional[str], Optional[str]] = (None, None)
        self._deactivate_hooks: List[Callable[[], None]] = []
        self._unsubscribe = self.bus.subscribe("mark.deactivated", self._mark_deactivated)
        self._closed = False

        self.pairs = pairs if pairs is not None else default_pairing_table()
        self.composer = Composer(self, self.pairs, settings=self.settings)
        self.actions: Tuple[RegionAction, ...] = tuple(
            action.bind(self.context) for action in DEFAULT_REGION_ACTIONS
        )
        register_composables(self.registry, self.composer, self.actions)
        load_object_keymap(self.registry, self.composer)
        self.mark_mode = MarkModeInterceptor(self.composer, self.registry)
        if self.settings.mark_mode:
            self.mark_mode.enable()

        telemetry.record_event(
            "session.start",
            level="info",
            data={"buffer": name, "length": len(self.buffer)},
            logger_name="composable.session",
        )

    # convenience

    @property
    def text(self) -> str:
        return self.buffer.text

    @property
    def point(self) -> int:
        return self.buffer.point

    @property
    def state(self) -> CompositionState:
        return self.composer.state

    @property
    def closed(self) -> bool:
        return self._closed

    def action(self, action_id: str) -> RegionAction:
        for action in self.actions:
            if action.id == action_id:
                return action
        raise KeyError(action_id)

    def handle_key(self, key: KeyInput) -> DispatchResult:
        if self._closed:
            raise RuntimeError("Session is closed")
        return self.loop.handle_key(key)

    def press(self, *specs: str) -> List[DispatchResult]:
        """Feed keys such as ``press("ctrl+w", "e")`` or ``press("ctrl+x ctrl+u")``."""

        results: List[DispatchResult] = []
        for spec in specs:
            for token in spec.split():
                stroke = KeyStroke.parse(token)
                text = stroke.key if not stroke.modifiers and len(stroke.key) == 1 else None
                results.append(
                    self.handle_key(KeyInput(stroke.key, stroke.modifiers, text))
                )
        return results

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.mark_mode.disable()
        self.composer.close()
        self.loop.close()
        self._unsubscribe()
        self._deactivate_hooks.clear()
        telemetry.record_event(
            "session.close", level="info", logger_name="composable.session"
        )

    def __enter__(self) -> "EditorSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False

    # EditorHost

    def current_position(self) -> int:
        return self.buffer.point

    def set_position(self, position: int) -> None:
        self.buffer.goto(position)

    def selection_active(self) -> bool:
        return self.buffer.mark_active

    def selection_anchor(self) -> Optional[int]:
        return self.buffer.mark

    def set_selection_anchor(self, position: int) -> None:
        self.buffer.set_mark(self.buffer.clamp(position), activate=False)

    def push_anchor(self, position: int) -> None:
        self.buffer.push_mark(self.buffer.clamp(position), activate=True)

    def deactivate_selection(self) -> None:
        self.buffer.deactivate_mark()

    def make_marker(self, position: int, *, label: str = "") -> Marker:
        return self.buffer.make_marker(position, label=label)

    def invoke(self, command_id: str, arg: Optional[int] = None) -> object:
        return self.loop.invoke(command_id, arg)

    def arm_once(
        self,
        key: str,
        handler: Callable[[Optional[int]], object],
        on_expire: Optional[Callable[[], None]] = None,
    ) -> TransientHandle:
        return self.loop.arm_once(key, handler, on_expire, description="Repeat")

    def add_post_command_hook(
        self, hook: Callable[[CommandEvent], None]
    ) -> Callable[[], None]:
        return self.loop.add_post_command_hook(hook)

    def add_deactivate_hook(self, hook: Callable[[], None]) -> Callable[[], None]:
        self._deactivate_hooks.append(hook)

        def remove() -> None:
            if hook in self._deactivate_hooks:
                self._deactivate_hooks.remove(hook)

        return remove

    def set_keymap_flag(self, name: str, value: bool) -> None:
        update_flag(self.context, name, value)

    def cursor_style(self) -> str:
        return self._cursor_style

    def set_cursor_style(self, style: str) -> None:
        self._cursor_style = style
        self.bus.emit("ui.cursor_style", style)

    def set_indicator(self, label: Optional[str], color: Optional[str] = None) -> None:
        self.indicator = (label, color)
        self.bus.emit("ui.indicator", self.indicator)

    def _mark_deactivated(self, _payload: object) -> None:
        for hook in list(self._deactivate_hooks):
            hook()


def create_session(
    text: str = "", *, settings: Optional[ComposableSettings] = None
) -> EditorSession:
    return EditorSession(text, settings=settings)


__all__ = ["DEFAULT_CURSOR", "EditorSession", "create_session"]
