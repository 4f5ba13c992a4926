"""Built-in keymaps: a Normal command mode, an Insert primitive mode and globals."""

from __future__ import annotations

from typing import Mapping, Sequence

from .models import CommandDescriptor, ModeKind
from .registry import GLOBAL_TABLE, KeymapRegistry

NORMAL = "normal"
INSERT = "insert"

NEXT_CURSOR = "next_cursor"
MOVE = "move"
RETURN_TO_NORMAL = "return_to_normal"

DEFAULT_MOTIONS: Mapping[str, str] = {
    "h": "left",
    "j": "down",
    "k": "up",
    "l": "right",
    "left": "left",
    "down": "down",
    "up": "up",
    "right": "right",
    "w": "next_word",
    "b": "previous_word",
    "e": "word_end",
    "$": "line_end",
    "^": "line_start",
}

DEFAULT_NAMESPACES: Mapping[str, Mapping[str, str]] = {
    "g": {
        "g": "buffer_start",
        "e": "previous_word_end",
        "u": "lowercase",
        "U": "uppercase",
    },
}

DEFAULT_NORMAL_BINDINGS: Mapping[str, CommandDescriptor] = {
    "h": CommandDescriptor.standalone("left", "Move left"),
    "j": CommandDescriptor.standalone("down", "Move down"),
    "k": CommandDescriptor.standalone("up", "Move up"),
    "l": CommandDescriptor.standalone("right", "Move right"),
    "left": CommandDescriptor.standalone("left", "Move left"),
    "down": CommandDescriptor.standalone("down", "Move down"),
    "up": CommandDescriptor.standalone("up", "Move up"),
    "right": CommandDescriptor.standalone("right", "Move right"),
    "w": CommandDescriptor.standalone("next_word", "Next word"),
    "b": CommandDescriptor.standalone("previous_word", "Previous word"),
    "e": CommandDescriptor.standalone("word_end", "End of word"),
    "$": CommandDescriptor.standalone("line_end", "End of line"),
    "^": CommandDescriptor.standalone("line_start", "Start of line"),
    "x": CommandDescriptor.standalone("delete_char", "Delete character"),
    "backspace": CommandDescriptor.standalone("delete_back", "Delete previous character"),
    "p": CommandDescriptor.standalone("paste", "Paste after cursor"),
    "d": CommandDescriptor.motion("delete", "Delete over a motion"),
    "y": CommandDescriptor.motion("yank", "Yank over a motion"),
    "c": CommandDescriptor.motion("change", "Change over a motion"),
    "g": CommandDescriptor.opens("goto", "g", "Open the g namespace"),
    "i": CommandDescriptor.switch("insert", INSERT, "Enter insert mode"),
    "a": CommandDescriptor.switch("append", INSERT, "Append after cursor"),
}

DEFAULT_GLOBAL_BINDINGS: Mapping[str, CommandDescriptor] = {
    "alt+space": CommandDescriptor.standalone(NEXT_CURSOR, "Go to the next cursor"),
    "alt": CommandDescriptor.motion(MOVE, "Move the cursor by a motion"),
    "shift+space": CommandDescriptor.switch(RETURN_TO_NORMAL, NORMAL, "Return to normal mode"),
}


def load_default_keymaps(
    registry: KeymapRegistry,
    *,
    replace: bool = False,
    exclude_bindings: Sequence[str] | None = None,
) -> KeymapRegistry:
    """Register the built-in modes, namespaces and bindings, then validate.

    ``exclude_bindings`` holds ``"<table>.<key>"`` identifiers to skip,
    e.g. ``"global.alt"``.
    """

    excluded = set(exclude_bindings or ())

    for namespace_id, entries in DEFAULT_NAMESPACES.items():
        registry.register_namespace(namespace_id, entries, replace=replace)

    registry.register_mode(NORMAL, ModeKind.COMMAND, description="Normal", initial=True)
    registry.register_mode(INSERT, ModeKind.PRIMITIVE, description="Insert")

    for key, descriptor in DEFAULT_NORMAL_BINDINGS.items():
        if f"{NORMAL}.{key}" in excluded:
            continue
        registry.register_binding(NORMAL, key, descriptor, replace=replace)
    for key, motion_id in DEFAULT_MOTIONS.items():
        registry.register_motion(NORMAL, key, motion_id, replace=replace)

    for key, descriptor in DEFAULT_GLOBAL_BINDINGS.items():
        if f"{GLOBAL_TABLE}.{key}" in excluded:
            continue
        registry.register_binding(GLOBAL_TABLE, key, descriptor, replace=replace)

    registry.validate()
    return registry


def default_registry(*, logger_name: str | None = None) -> KeymapRegistry:
    return load_default_keymaps(KeymapRegistry(logger_name=logger_name))


__all__ = [
    "NORMAL",
    "INSERT",
    "NEXT_CURSOR",
    "MOVE",
    "RETURN_TO_NORMAL",
    "DEFAULT_MOTIONS",
    "DEFAULT_NAMESPACES",
    "DEFAULT_NORMAL_BINDINGS",
    "DEFAULT_GLOBAL_BINDINGS",
    "load_default_keymaps",
    "default_registry",
]
