"""Executable Textual app that hosts a composable editing session."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Tuple

try:  # pragma: no cover - imported only when demo is run
    from textual import events
    from textual.app import App, ComposeResult
    from textual.containers import Vertical
    from textual.widgets import Footer, Header, Static
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use composable.adapters.textual.app"
    ) from exc

from composable.buffer import BufferView
from composable.config import ComposableSettings, load_settings
from composable.runtime import telemetry
from composable.runtime.telemetry import env_value
from composable.session import EditorSession, create_session

from .controller import TextualComposableAdapter, TextualUIHooks

SAMPLE_TEXT = """\
Composable editing pairs an action with an object. Press an action key
first, then a motion: ctrl+w then f kills to the end of the word.

Press the motion key again to repeat. A comma or period before the motion
keeps only the part before or after the starting point.
    Indented lines work with alt+m and back-to-indentation too.
"""

CURSOR_GLYPHS = {"block": "█", "hbar": "▁", "bar": "▏"}

# Textual reports a few keys by name; map them onto the tokens keymaps use.
TEXTUAL_KEY_NAMES = {
    "ctrl+@": ("space", ("ctrl",)),
    "ctrl+space": ("space", ("ctrl",)),
}


def render_view(view: BufferView, cursor_style: str = "block") -> str:
    """Return buffer text with the cursor drawn at point."""

    glyph = CURSOR_GLYPHS.get(cursor_style, CURSOR_GLYPHS["block"])
    text = view.text
    return f"{text[: view.point]}{glyph}{text[view.point :]}"


@dataclass
class UIState:
    buffer_text: str = ""
    status_text: str = ""
    keys_text: str = ""
    cursor_style: str = "block"
    indicator: Optional[str] = None


class ComposableDemoApp(App[None]):
    """Minimal Textual UI embedding a composable editing session."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#buffer-view {
		height: 1fr;
		border: round $accent;
		padding: 1 1;
		content-align: left top;
		overflow: auto;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}

	#keys-line {
		height: 1;
		background: $surface-darken-2;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        ("ctrl+c", "quit", "Quit"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        *,
        text: str = SAMPLE_TEXT,
        settings: Optional[ComposableSettings] = None,
    ) -> None:
        super().__init__()
        self._state = UIState()
        self._text = text
        self._settings = settings
        self.session: EditorSession | None = None
        self.adapter: TextualComposableAdapter | None = None
        self._last_view: BufferView | None = None
        self._buffer_widget: Static | None = None
        self._status_widget: Static | None = None
        self._keys_widget: Static | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Vertical(id="buffer-area"):
            self._buffer_widget = Static("", id="buffer-view", markup=False)
            yield self._buffer_widget
        self._status_widget = Static("", id="status-line", markup=False)
        self._keys_widget = Static("", id="keys-line", markup=False)
        yield self._status_widget
        yield self._keys_widget
        yield Footer()

    async def on_mount(self) -> None:
        self.session = create_session(self._text, settings=self._settings)
        hooks = TextualUIHooks(
            update_buffer=self._update_buffer,
            update_status=self._update_status,
            show_keys=self._show_keys,
            set_cursor_style=self._set_cursor_style,
            set_indicator=self._set_indicator,
        )
        self.adapter = TextualComposableAdapter(self.session, hooks)

    async def on_unmount(self) -> None:
        if self.adapter:
            self.adapter.close()
            self.adapter = None
        if self.session:
            self.session.close()
            self.session = None

    async def on_key(self, event: events.Key) -> None:
        if not self.adapter:
            return
        normalized = self._normalize_key(event)
        if normalized is None:
            return
        key, text, modifiers = normalized
        self.adapter.handle_textual_key(key, text=text, modifiers=modifiers)
        event.stop()

    def _update_buffer(self, view: BufferView) -> None:
        self._last_view = view
        self._redraw_buffer()

    def _redraw_buffer(self) -> None:
        if self._last_view is None:
            return
        self._state.buffer_text = render_view(self._last_view, self._state.cursor_style)
        if self._buffer_widget:
            self._buffer_widget.update(self._state.buffer_text)

    def _update_status(self, status: str) -> None:
        self._state.status_text = status
        self._redraw_status()

    def _redraw_status(self) -> None:
        status = self._state.status_text
        if self._state.indicator:
            status = f"[{self._state.indicator}] {status}"
        if self._status_widget:
            self._status_widget.update(status)

    def _show_keys(self, keys: str) -> None:
        self._state.keys_text = keys
        if self._keys_widget:
            self._keys_widget.update(f"{keys}-" if keys else "")

    def _set_cursor_style(self, style: str) -> None:
        self._state.cursor_style = style
        self._redraw_buffer()

    def _set_indicator(self, label: Optional[str], color: Optional[str]) -> None:
        self._state.indicator = label
        if self._status_widget:
            self._status_widget.styles.background = color if label and color else None
        self._redraw_status()

    @staticmethod
    def _normalize_key(
        event: events.Key,
    ) -> Optional[Tuple[str, Optional[str], Tuple[str, ...]]]:
        key = event.key
        if key in {"ctrl+c", "ctrl+q"}:
            return None
        if key in TEXTUAL_KEY_NAMES:
            name, modifiers = TEXTUAL_KEY_NAMES[key]
            return (name, None, modifiers)
        if "+" in key and len(key) > 1:
            *modifiers, name = key.split("+")
            if name in {"", "plus"}:
                name = "+"
            character = event.character
            if character and len(character) == 1 and character.isprintable():
                name = character
            return (name, None, tuple(modifiers))
        if event.character and event.character.isprintable():
            return (event.character, event.character, ())
        return (key, None, ())


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the composable editing Textual demo.")
    parser.add_argument(
        "path",
        nargs="?",
        default=env_value("DEMO_FILE"),
        help="File to load into the demo buffer (default: built-in sample)",
    )
    parser.add_argument(
        "--mark-mode",
        action="store_true",
        help="Make set-mark wait for an object to select",
    )
    parser.add_argument(
        "--no-repeat",
        action="store_true",
        help="Do not arm the repeat key after a composed action",
    )
    parser.add_argument(
        "--log-preset",
        choices=telemetry.PRESETS,
        default=env_value("LOG_PRESET"),
        help="telelog preset; 'file' keeps log lines off the terminal",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    if args.log_preset:
        telemetry.configure(preset=args.log_preset)
    text = Path(args.path).read_text(encoding="utf-8") if args.path else SAMPLE_TEXT
    overrides = {}
    if args.mark_mode:
        overrides["mark_mode"] = True
    if args.no_repeat:
        overrides["repeat"] = False
    app = ComposableDemoApp(text=text, settings=load_settings(**overrides))
    app.run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()
