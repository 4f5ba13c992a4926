"""Textual integration: key translation and a demo application."""

from .controller import (
    TextualKeyAdapter,
    TextualUIHooks,
    describe_pending,
    key_event_from_textual,
)

__all__ = [
    "TextualKeyAdapter",
    "TextualUIHooks",
    "describe_pending",
    "key_event_from_textual",
]
