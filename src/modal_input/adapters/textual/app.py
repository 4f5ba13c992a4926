"""Executable Textual app that shows resolved operations as keys are typed."""

from __future__ import annotations

import argparse
import json
import os
from collections import deque
from typing import Deque, Optional, Sequence

try:  # pragma: no cover - imported only when demo is run
    from textual import events
    from textual.app import App, ComposeResult
    from textual.containers import Vertical
    from textual.widgets import Footer, Header, Static
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use modal_input.adapters.textual.app"
    ) from exc

from modal_input.keymaps import default_registry, load_keymap_config
from modal_input.modes import CommandResolver, CursorSet, Output
from modal_input.runtime import telemetry

from .controller import TextualKeyAdapter, TextualUIHooks


def create_default_resolver(*, cursors: int = 1) -> CommandResolver:
    """Build a resolver over the built-in keymaps with ``cursors`` demo cursors."""

    return CommandResolver.from_registry(
        default_registry(),
        cursors=CursorSet(range(cursors)),
    )


class ModalInputApp(App[None]):
    """Minimal Textual UI listing what each key resolves to."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#output-view {
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

	#pending-line {
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
        self, *, resolver: Optional[CommandResolver] = None, history: int = 200
    ) -> None:
        super().__init__()
        self.resolver = resolver or create_default_resolver()
        self.adapter: TextualKeyAdapter | None = None
        self._lines: Deque[str] = deque(maxlen=history)
        self._output_widget: Static | None = None
        self._status_widget: Static | None = None
        self._pending_widget: Static | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Vertical(id="output-area"):
            self._output_widget = Static("", id="output-view")
            yield self._output_widget
        self._status_widget = Static("", id="status-line")
        self._pending_widget = Static("", id="pending-line")
        yield self._status_widget
        yield self._pending_widget
        yield Footer()

    def on_mount(self) -> None:
        hooks = TextualUIHooks(
            handle_output=self._handle_output,
            update_status=self._update_status,
            show_pending=self._show_pending,
        )
        self.adapter = TextualKeyAdapter(self.resolver, hooks)
        self._update_status(self.resolver.modes.active_id)

    async def on_key(self, event: events.Key) -> None:
        if not self.adapter or event.key in {"ctrl+c", "ctrl+q"}:
            return
        self.adapter.handle_textual_key(event.key, character=event.character)
        event.stop()

    def _handle_output(self, output: Output) -> None:
        self._lines.append(repr(output))
        if self._output_widget:
            self._output_widget.update("\n".join(self._lines))

    def _update_status(self, status: str) -> None:
        if self._status_widget:
            self._status_widget.update(status)

    def _show_pending(self, pending: str) -> None:
        if self._pending_widget:
            self._pending_widget.update(pending)


def _env_int(key: str, fallback: int) -> int:
    value = os.environ.get(key)
    if value is None:
        return fallback
    try:
        return int(value)
    except ValueError:
        return fallback


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the modal input Textual demo.")
    parser.add_argument(
        "--cursors",
        type=int,
        default=_env_int("MODAL_INPUT_CURSORS", 3),
        help="Number of demo cursors for the next-cursor command (default: 3)",
    )
    parser.add_argument(
        "--keymap",
        help="JSON file with a keymap configuration replacing the defaults",
    )
    parser.add_argument(
        "--log-preset",
        choices=("development", "production", "quiet"),
        default=os.environ.get("MODAL_INPUT_LOG_PRESET", "quiet"),
        help="Telemetry preset (default: quiet, so logs do not garble the UI)",
    )
    return parser.parse_args(argv)


def _load_resolver(path: Optional[str], cursors: int) -> CommandResolver:
    if not path:
        return create_default_resolver(cursors=cursors)
    with open(path, encoding="utf-8") as handle:
        registry = load_keymap_config(json.load(handle))
    return CommandResolver.from_registry(registry, cursors=CursorSet(range(cursors)))


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    telemetry.configure(preset=args.log_preset)
    app = ModalInputApp(resolver=_load_resolver(args.keymap, args.cursors))
    app.run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()
