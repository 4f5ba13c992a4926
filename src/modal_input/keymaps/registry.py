"""Keymap registry collecting modes, tables and namespaces before use."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional

from modal_input.errors import ConfigurationError, KeymapConflictError
from modal_input.runtime.telemetry import span

from .models import (
    Arity,
    CommandDescriptor,
    CommandTable,
    KeyEvent,
    ModeKind,
    ModeSpec,
    Namespace,
    SPECIAL_KEYS,
)

GLOBAL_TABLE = "global"


@dataclass(slots=True)
class RegistryStats:
    """Lightweight snapshot describing registry state."""

    mode_count: int
    binding_count: int
    namespace_count: int
    modes: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class Keymap:
    """Validated, read-only configuration handed to the resolver."""

    modes: Mapping[str, ModeSpec]
    global_table: CommandTable
    namespaces: Mapping[str, Namespace]
    initial_mode: str


@dataclass(slots=True)
class _ModeDraft:
    kind: ModeKind
    description: str = ""
    bindings: Dict[str, CommandDescriptor] = field(default_factory=dict)
    motions: Dict[str, str] = field(default_factory=dict)


class KeymapRegistry:
    """Mutable builder for every table the resolver consults.

    Bindings are collected per table (a mode id or ``GLOBAL_TABLE``),
    checked eagerly by ``validate`` and frozen into a ``Keymap`` by
    ``build``.
    """

    def __init__(self, *, logger_name: str | None = None) -> None:
        self._modes: Dict[str, _ModeDraft] = {}
        self._global: Dict[str, CommandDescriptor] = {}
        self._namespaces: Dict[str, Dict[str, str]] = {}
        self._initial_mode: Optional[str] = None
        self._logger_name = logger_name
        self._revision = 0

    def revision(self) -> int:
        return self._revision

    @property
    def initial_mode(self) -> Optional[str]:
        return self._initial_mode

    def set_initial_mode(self, mode_id: str) -> None:
        self._initial_mode = mode_id
        self._touch()

    def register_mode(
        self,
        mode_id: str,
        kind: ModeKind | str,
        *,
        description: str = "",
        initial: bool = False,
    ) -> None:
        with span(
            "keymaps::register_mode",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"mode": mode_id},
        ):
            if not mode_id:
                raise ConfigurationError("mode id cannot be empty")
            if mode_id == GLOBAL_TABLE:
                raise ConfigurationError(f"'{GLOBAL_TABLE}' is reserved for the global table")
            if mode_id in self._modes:
                raise ConfigurationError(f"Mode '{mode_id}' already registered")
            self._modes[mode_id] = _ModeDraft(kind=ModeKind(kind), description=description)
            if initial or self._initial_mode is None:
                self._initial_mode = mode_id
            self._touch()

    def register_binding(
        self,
        table: str,
        key: str | KeyEvent,
        descriptor: CommandDescriptor,
        *,
        replace: bool = False,
    ) -> CommandDescriptor:
        token = _token(key)
        with span(
            "keymaps::register_binding",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"table": table, "key": token, "command": descriptor.command_id},
        ) as handle:
            bindings = self._bindings_for(table)
            existing = bindings.get(token)
            if existing is not None and not replace:
                handle.add_metadata("conflict", existing.command_id)
                raise KeymapConflictError(
                    table, token, existing.command_id, descriptor.command_id
                )
            bindings[token] = descriptor
            self._touch()
            return descriptor

    def unregister_binding(
        self, table: str, key: str | KeyEvent
    ) -> Optional[CommandDescriptor]:
        removed = self._bindings_for(table).pop(_token(key), None)
        if removed is not None:
            self._touch()
        return removed

    def register_motion(
        self,
        mode_id: str,
        key: str | KeyEvent,
        motion_id: str,
        *,
        replace: bool = False,
    ) -> None:
        if not motion_id:
            raise ConfigurationError("motion id cannot be empty")
        draft = self._draft(mode_id)
        token = _token(key)
        existing = draft.motions.get(token)
        if existing is not None and not replace:
            raise KeymapConflictError(f"{mode_id}.motions", token, existing, motion_id)
        draft.motions[token] = motion_id
        self._touch()

    def register_namespace(
        self,
        namespace_id: str,
        entries: Mapping[str, str] | None = None,
        *,
        replace: bool = False,
    ) -> None:
        if not namespace_id:
            raise ConfigurationError("namespace id cannot be empty")
        if namespace_id in self._namespaces and not replace:
            raise ConfigurationError(f"Namespace '{namespace_id}' already registered")
        table: Dict[str, str] = {}
        for key, selector in (entries or {}).items():
            table[_token(key)] = selector
        self._namespaces[namespace_id] = table
        self._touch()

    def register_namespace_key(
        self, namespace_id: str, key: str | KeyEvent, selector: str
    ) -> None:
        if namespace_id not in self._namespaces:
            raise ConfigurationError(f"Namespace '{namespace_id}' is not registered")
        token = _token(key)
        existing = self._namespaces[namespace_id].get(token)
        if existing is not None:
            raise KeymapConflictError(namespace_id, token, existing, selector)
        self._namespaces[namespace_id][token] = selector
        self._touch()

    def iter_bindings(
        self, table: Optional[str] = None
    ) -> Iterator[tuple[str, str, CommandDescriptor]]:
        """Yield ``(table, token, descriptor)`` triples."""

        tables = [table] if table is not None else [GLOBAL_TABLE, *self._modes]
        for name in tables:
            for token, descriptor in self._bindings_for(name).items():
                yield name, token, descriptor

    def stats(self) -> RegistryStats:
        return RegistryStats(
            mode_count=len(self._modes),
            binding_count=sum(1 for _ in self.iter_bindings()),
            namespace_count=len(self._namespaces),
            modes=tuple(sorted(self._modes)),
        )

    def validate(self) -> None:
        """Check cross references; raise ``ConfigurationError`` listing problems."""

        with span(
            "keymaps::validate",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"revision": self._revision},
        ) as handle:
            problems = list(self._problems())
            if problems:
                handle.add_metadata("problems", len(problems))
                raise ConfigurationError("Invalid keymap configuration", problems=problems)

    def build(self) -> Keymap:
        self.validate()
        assert self._initial_mode is not None
        modes = {
            mode_id: ModeSpec(
                id=mode_id,
                kind=draft.kind,
                table=CommandTable(mode_id, dict(draft.bindings)),
                motions=dict(draft.motions),
                description=draft.description,
            )
            for mode_id, draft in self._modes.items()
        }
        namespaces = {
            namespace_id: Namespace(namespace_id, dict(entries))
            for namespace_id, entries in self._namespaces.items()
        }
        return Keymap(
            modes=MappingProxyType(modes),
            global_table=CommandTable(GLOBAL_TABLE, dict(self._global)),
            namespaces=MappingProxyType(namespaces),
            initial_mode=self._initial_mode,
        )

    def _problems(self) -> Iterator[str]:
        if not self._modes:
            yield "no modes registered"
        if self._initial_mode is None:
            yield "no initial mode"
        elif self._initial_mode not in self._modes:
            yield f"initial mode '{self._initial_mode}' is not registered"

        for table, token, descriptor in self.iter_bindings():
            where = f"{table}[{token}]"
            if descriptor.arity is Arity.NAMESPACE and descriptor.namespace not in self._namespaces:
                yield f"{where} opens unknown namespace '{descriptor.namespace}'"
            if (
                descriptor.arity is Arity.MODE_SWITCH
                and descriptor.target_mode not in self._modes
            ):
                yield f"{where} switches to unknown mode '{descriptor.target_mode}'"

        for mode_id, draft in self._modes.items():
            if draft.kind is ModeKind.PRIMITIVE and draft.bindings:
                yield (
                    f"primitive mode '{mode_id}' cannot have a command table "
                    f"({', '.join(sorted(draft.bindings))})"
                )

        for namespace_id, entries in self._namespaces.items():
            if not entries:
                yield f"namespace '{namespace_id}' is empty"

    def _bindings_for(self, table: str) -> Dict[str, CommandDescriptor]:
        if table == GLOBAL_TABLE:
            return self._global
        return self._draft(table).bindings

    def _draft(self, mode_id: str) -> _ModeDraft:
        try:
            return self._modes[mode_id]
        except KeyError:
            raise ConfigurationError(f"Mode '{mode_id}' is not registered") from None

    def _touch(self) -> None:
        self._revision += 1


def _token(key: str | KeyEvent) -> str:
    try:
        event = key if isinstance(key, KeyEvent) else KeyEvent.parse(key)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid key '{key}': {exc}") from exc
    if len(event.symbol) > 1 and event.symbol not in SPECIAL_KEYS:
        raise ConfigurationError(
            f"Invalid key '{key}': unknown key name '{event.symbol}'"
        )
    return event.token


__all__ = [
    "GLOBAL_TABLE",
    "Keymap",
    "KeymapRegistry",
    "RegistryStats",
]
