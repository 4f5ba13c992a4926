"""Adapter turning Textual key names into resolver input and UI callbacks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from modal_input.keymaps import KeyEvent
from modal_input.modes import CommandResolver, Output, Resolution, ResolverSnapshot

_CHORD_MODIFIERS = {"ctrl", "control", "alt", "meta"}

# Textual spells some punctuation out; the resolver wants the character.
_TEXTUAL_NAMES = {
    "plus": "+",
    "minus": "-",
    "dollar_sign": "$",
    "circumflex_accent": "^",
    "full_stop": ".",
    "comma": ",",
    "colon": ":",
    "semicolon": ";",
    "slash": "/",
    "question_mark": "?",
}


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


def key_event_from_textual(key: str, character: Optional[str] = None) -> Optional[KeyEvent]:
    """Translate a Textual ``events.Key`` (``key``/``character``) pair.

    Shift is folded into printable characters (``J`` rather than
    ``shift+j``) except for space, where it is a distinct chord.
    """

    if not key:
        return None
    *modifiers, name = key.split("+")
    lowered = [modifier.lower() for modifier in modifiers]
    printable = (
        character is not None
        and len(character) == 1
        and character.isprintable()
        and character != " "
    )
    if printable and character:
        lowered = [modifier for modifier in lowered if modifier != "shift"]
        if not _CHORD_MODIFIERS.intersection(lowered):
            return KeyEvent(character)
    try:
        return KeyEvent(_TEXTUAL_NAMES.get(name, name), tuple(lowered))
    except ValueError:
        return None


def describe_pending(snapshot: ResolverSnapshot) -> str:
    """Short preview such as ``"3"`` or ``"2delete"`` for a status line."""

    parts = []
    if snapshot.pending_numeral is not None:
        parts.append(str(snapshot.pending_numeral))
    if snapshot.pending_command:
        parts.append(snapshot.pending_command)
    return "".join(parts)


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    handle_output: Callable[[Output], None]
    update_status: Callable[[str], None] = _noop
    show_pending: Callable[[str], None] = _noop
    log: Callable[[str], None] = _noop


class TextualKeyAdapter:
    """Bridges Textual key events to a ``CommandResolver``."""

    def __init__(self, resolver: CommandResolver, hooks: TextualUIHooks) -> None:
        self.resolver = resolver
        self.hooks = hooks
        self._refresh()

    def handle_textual_key(
        self, key: str, *, character: Optional[str] = None
    ) -> Optional[Resolution]:
        event = key_event_from_textual(key, character)
        if event is None:
            self._log_state("key dropped", key=key, character=character)
            return None

        self._log_state("key ->", token=event.token)
        resolution = self.resolver.process(event)
        for output in resolution.outputs:
            self.hooks.handle_output(output)
        self.hooks.update_status(self._status_line(resolution))
        self._refresh()
        self._log_state(
            "result <-",
            status=resolution.status,
            outputs=len(resolution.outputs),
        )
        return resolution

    def _status_line(self, resolution: Resolution) -> str:
        snapshot = self.resolver.snapshot()
        return f"{snapshot.mode} | {resolution.status}"

    def _refresh(self) -> None:
        self.hooks.show_pending(describe_pending(self.resolver.snapshot()))

    def _log_state(self, prefix: str, **fields: object) -> None:
        snapshot = self._state_metadata()
        snapshot.update({k: v for k, v in fields.items() if v is not None})
        parts = [prefix]
        for key, value in snapshot.items():
            parts.append(f"{key}={value!r}")
        self.hooks.log(" ".join(parts))

    def _state_metadata(self) -> Dict[str, object]:
        snapshot = self.resolver.snapshot()
        return {
            "mode": snapshot.mode,
            "state": snapshot.state.value,
            "numeral": snapshot.pending_numeral,
            "pending": snapshot.pending_command,
            "cursor": self.resolver.cursors.index,
        }


__all__ = [
    "TextualKeyAdapter",
    "TextualUIHooks",
    "describe_pending",
    "key_event_from_textual",
]
