"""Build a registry from plain mapping data (parsed TOML/JSON/YAML)."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from modal_input.errors import ConfigurationError

from .models import Arity, CommandDescriptor, ModeKind
from .registry import GLOBAL_TABLE, KeymapRegistry

_ARITY_ALIASES = {
    "standalone": Arity.STANDALONE,
    "motion": Arity.MOTION,
    "motion_consuming": Arity.MOTION,
    "namespace": Arity.NAMESPACE,
    "namespace_opening": Arity.NAMESPACE,
    "mode_switch": Arity.MODE_SWITCH,
    "switch": Arity.MODE_SWITCH,
}


def parse_descriptor(raw: Any, *, where: str) -> CommandDescriptor:
    """Turn ``"cmd"`` or ``{"command": ..., "arity": ...}`` into a descriptor."""

    if isinstance(raw, str):
        return CommandDescriptor.standalone(raw)
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"{where}: expected a string or a table, got {type(raw).__name__}")

    command_id = raw.get("command")
    if not isinstance(command_id, str) or not command_id:
        raise ConfigurationError(f"{where}: missing 'command'")

    arity_name = str(raw.get("arity", "standalone")).lower()
    try:
        arity = _ARITY_ALIASES[arity_name]
    except KeyError:
        raise ConfigurationError(f"{where}: unknown arity '{arity_name}'") from None

    try:
        return CommandDescriptor(
            command_id=command_id,
            arity=arity,
            namespace=raw.get("namespace"),
            target_mode=raw.get("target"),
            description=str(raw.get("description", "")),
        )
    except ValueError as exc:
        raise ConfigurationError(f"{where}: {exc}") from exc


def load_keymap_config(
    data: Mapping[str, Any],
    *,
    registry: Optional[KeymapRegistry] = None,
    logger_name: str | None = None,
) -> KeymapRegistry:
    """Populate (or create) a registry from ``data`` and validate it.

    Expected shape::

        {"initial_mode": "normal",
         "modes": {"normal": {"kind": "command", "bindings": {...}, "motions": {...}}},
         "global": {"alt+space": {"command": "next_cursor"}},
         "namespaces": {"g": {"g": "top"}}}
    """

    target = registry or KeymapRegistry(logger_name=logger_name)

    modes = data.get("modes")
    if not isinstance(modes, Mapping) or not modes:
        raise ConfigurationError("configuration needs a non-empty 'modes' table")

    for namespace_id, entries in (data.get("namespaces") or {}).items():
        if not isinstance(entries, Mapping):
            raise ConfigurationError(f"namespaces.{namespace_id}: expected a table")
        target.register_namespace(namespace_id, {k: str(v) for k, v in entries.items()})

    for mode_id, spec in modes.items():
        if not isinstance(spec, Mapping):
            raise ConfigurationError(f"modes.{mode_id}: expected a table")
        kind_name = str(spec.get("kind", "command")).lower()
        try:
            kind = ModeKind(kind_name)
        except ValueError:
            raise ConfigurationError(f"modes.{mode_id}: unknown kind '{kind_name}'") from None
        target.register_mode(mode_id, kind, description=str(spec.get("description", "")))

        for key, raw in (spec.get("bindings") or {}).items():
            descriptor = parse_descriptor(raw, where=f"modes.{mode_id}.bindings[{key}]")
            target.register_binding(mode_id, key, descriptor)
        for key, motion_id in (spec.get("motions") or {}).items():
            target.register_motion(mode_id, key, str(motion_id))

    for key, raw in (data.get("global") or {}).items():
        descriptor = parse_descriptor(raw, where=f"global[{key}]")
        target.register_binding(GLOBAL_TABLE, key, descriptor)

    initial = data.get("initial_mode")
    if initial is not None:
        target.set_initial_mode(str(initial))

    target.validate()
    return target


__all__ = ["load_keymap_config", "parse_descriptor"]
