"""Key events, command tables, namespaces and the keymap registry."""

from .models import (
    Arity,
    CommandDescriptor,
    CommandTable,
    KeyEvent,
    ModeKind,
    ModeSpec,
    Namespace,
    normalize_token,
)
from .registry import GLOBAL_TABLE, Keymap, KeymapRegistry, RegistryStats
from .loader import load_keymap_config, parse_descriptor
from .defaults import default_registry, load_default_keymaps

__all__ = [
    "Arity",
    "CommandDescriptor",
    "CommandTable",
    "KeyEvent",
    "ModeKind",
    "ModeSpec",
    "Namespace",
    "normalize_token",
    "GLOBAL_TABLE",
    "Keymap",
    "KeymapRegistry",
    "RegistryStats",
    "load_keymap_config",
    "parse_descriptor",
    "default_registry",
    "load_default_keymaps",
]
