"""Minimal Textual adapter that wires an editing session into UI callbacks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional

from composable.buffer import BufferView
from composable.host import DispatchResult, KeyInput
from composable.keymaps import KeyStroke
from composable.session import EditorSession


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    update_buffer: Callable[[BufferView], None]
    update_status: Callable[[str], None] = _noop
    show_keys: Callable[[str], None] = _noop
    set_cursor_style: Callable[[str], None] = _noop
    set_indicator: Callable[[Optional[str], Optional[str]], None] = _noop
    handle_event: Callable[[str, object | None], None] = _noop
    log: Callable[[str], None] = _noop


RELAYED_EVENTS = (
    "action.kill",
    "action.copy",
    "keyboard.quit",
    "keyboard.undefined",
    "mark.activated",
    "mark.deactivated",
)


class TextualComposableAdapter:
    """Bridges an ``EditorSession`` and its bus events to a Textual-friendly surface."""

    def __init__(self, session: EditorSession, hooks: TextualUIHooks) -> None:
        self.session = session
        self.hooks = hooks
        self._unsubscribers: list[Callable[[], None]] = []
        self._subscribe_events()
        self._refresh_buffer()
        self.hooks.set_cursor_style(session.cursor_style())

    def handle_textual_key(
        self,
        key: str,
        *,
        text: Optional[str] = None,
        modifiers: Iterable[str] = (),
    ) -> DispatchResult:
        """Translate a Textual key event into a KeyInput and dispatch it."""

        stroke = KeyStroke(key, tuple(str(mod).lower() for mod in modifiers))
        self._log_state("key ->", key=stroke.token, text=text)
        result = self.session.handle_key(
            KeyInput(key=stroke.key, modifiers=stroke.modifiers, text=text)
        )
        self._after_dispatch(result)
        self._log_state(
            "result <-",
            consumed=result.consumed,
            status=result.status,
            command=result.command_id,
            message=result.message,
        )
        return result

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

    def _after_dispatch(self, result: DispatchResult) -> None:
        if result.status == "pending":
            self.hooks.show_keys(result.message or "")
        else:
            self.hooks.show_keys("")
            status = result.message or result.command_id or result.status
            if status:
                self.hooks.update_status(status)
        self._refresh_buffer()

    def _subscribe_events(self) -> None:
        bus = self.session.bus
        self._unsubscribers.append(
            bus.subscribe("ui.cursor_style", self._cursor_style_changed)
        )
        self._unsubscribers.append(bus.subscribe("ui.indicator", self._indicator_changed))
        for event in RELAYED_EVENTS:
            self._unsubscribers.append(
                bus.subscribe(
                    event, lambda payload, name=event: self._handle_event(name, payload)
                )
            )

    def _cursor_style_changed(self, payload: object) -> None:
        self.hooks.set_cursor_style(str(payload))

    def _indicator_changed(self, payload: object) -> None:
        label, color = payload if isinstance(payload, tuple) else (None, None)
        self.hooks.set_indicator(label, color)

    def _handle_event(self, name: str, payload: object | None) -> None:
        self._log_state("event ->", event=name, payload=payload)
        self.hooks.handle_event(name, payload)
        if name == "keyboard.undefined" and isinstance(payload, str):
            self.hooks.update_status(payload)

    def _refresh_buffer(self) -> None:
        self.hooks.update_buffer(self.session.buffer.snapshot())

    def _log_state(self, prefix: str, **fields: object) -> None:
        snapshot = self._state_metadata()
        snapshot.update({k: v for k, v in fields.items() if v is not None})
        parts = [prefix]
        for key, value in snapshot.items():
            parts.append(f"{key}={value!r}")
        self.hooks.log(" ".join(parts))

    def _state_metadata(self) -> Dict[str, object]:
        session = self.session
        buffer = session.buffer
        transient = session.loop.transient
        return {
            "state": session.state.value,
            "point": buffer.point,
            "mark": buffer.mark if buffer.mark_active else None,
            "pending": " ".join(session.loop.pending_keys),
            "repeat_key": transient.key if transient is not None else None,
            "buffer_version": buffer.version,
        }


__all__ = ["RELAYED_EVENTS", "TextualComposableAdapter", "TextualUIHooks"]
