"""Dataclasses describing key events, command descriptors and tables."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

_MODIFIER_ALIASES = {
    "alt": "alt",
    "meta": "alt",
    "ctrl": "ctrl",
    "control": "ctrl",
    "shift": "shift",
}

# Named keys understood in tokens next to single printable characters.
SPECIAL_KEYS: frozenset[str] = frozenset(
    {
        "backspace",
        "escape",
        "left",
        "right",
        "up",
        "down",
        "tab",
        "space",
        "enter",
        "alt",
        "ctrl",
        "shift",
    }
)

_KEY_ALIASES = {
    "esc": "escape",
    "<esc>": "escape",
    "return": "enter",
    " ": "space",
    "control": "ctrl",
    "meta": "alt",
}


def _normalize_modifiers(modifiers: Iterable[str]) -> tuple[str, ...]:
    values = []
    for raw in modifiers:
        cleaned = raw.strip().lower()
        if not cleaned:
            continue
        try:
            values.append(_MODIFIER_ALIASES[cleaned])
        except KeyError:
            raise ValueError(f"Unknown modifier '{raw}'") from None
    return tuple(sorted(dict.fromkeys(values)))


def _normalize_symbol(symbol: str) -> str:
    if len(symbol) == 1:
        return _KEY_ALIASES.get(symbol, symbol)
    lowered = symbol.strip().lower()
    return _KEY_ALIASES.get(lowered, lowered)


@dataclass(frozen=True, slots=True)
class KeyEvent:
    """Single key press: a symbol plus its modifier flags."""

    symbol: str
    modifiers: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.symbol:
            raise ValueError("symbol cannot be empty")
        object.__setattr__(self, "symbol", _normalize_symbol(self.symbol))
        object.__setattr__(self, "modifiers", _normalize_modifiers(self.modifiers))

    @property
    def token(self) -> str:
        if self.modifiers:
            return "+".join(self.modifiers + (self.symbol,))
        return self.symbol

    @property
    def is_digit(self) -> bool:
        return not self.modifiers and len(self.symbol) == 1 and self.symbol in "0123456789"

    @property
    def modifier_token(self) -> Optional[str]:
        """Token naming the modifiers alone, e.g. ``"alt"`` for ``alt+j``."""

        if not self.modifiers:
            return None
        return "+".join(self.modifiers)

    def has(self, modifier: str) -> bool:
        return _MODIFIER_ALIASES.get(modifier.lower(), modifier) in self.modifiers

    def without_modifiers(self) -> "KeyEvent":
        return KeyEvent(self.symbol)

    @classmethod
    def parse(cls, token: str) -> "KeyEvent":
        """Build an event from ``"alt+shift+x"`` style notation.

        A literal ``+`` key is written as the last segment (``"ctrl++"``).
        """

        if not token:
            raise ValueError("token cannot be empty")
        if token == "+":
            return cls("+")
        if token.endswith("++"):
            head, symbol = token[:-2], "+"
            parts = [part for part in head.split("+") if part]
        else:
            *parts, symbol = token.split("+")
        return cls(symbol, tuple(parts))


def normalize_token(token: str | KeyEvent) -> str:
    if isinstance(token, KeyEvent):
        return token.token
    return KeyEvent.parse(token).token


class ModeKind(str, Enum):
    """Parsing discipline a mode applies to incoming keys."""

    COMMAND = "command"
    PRIMITIVE = "primitive"


class Arity(str, Enum):
    """How a command consumes further input."""

    STANDALONE = "standalone"
    MOTION = "motion"
    NAMESPACE = "namespace"
    MODE_SWITCH = "mode_switch"


@dataclass(frozen=True, slots=True)
class CommandDescriptor:
    """What a key means: a command id and its arity class."""

    command_id: str
    arity: Arity = Arity.STANDALONE
    namespace: Optional[str] = None
    target_mode: Optional[str] = None
    description: str = ""

    def __post_init__(self) -> None:
        if not self.command_id:
            raise ValueError("command_id cannot be empty")
        object.__setattr__(self, "arity", Arity(self.arity))
        if self.arity is Arity.NAMESPACE and not self.namespace:
            raise ValueError(f"Command '{self.command_id}' opens no namespace")
        if self.arity is not Arity.NAMESPACE and self.namespace:
            raise ValueError(
                f"Command '{self.command_id}' names a namespace but is {self.arity.value}"
            )
        if self.arity is Arity.MODE_SWITCH and not self.target_mode:
            raise ValueError(f"Command '{self.command_id}' has no target mode")
        if self.arity is not Arity.MODE_SWITCH and self.target_mode:
            raise ValueError(
                f"Command '{self.command_id}' names a target mode but is {self.arity.value}"
            )

    @classmethod
    def standalone(cls, command_id: str, description: str = "") -> "CommandDescriptor":
        return cls(command_id, Arity.STANDALONE, description=description)

    @classmethod
    def motion(cls, command_id: str, description: str = "") -> "CommandDescriptor":
        return cls(command_id, Arity.MOTION, description=description)

    @classmethod
    def opens(
        cls, command_id: str, namespace: str, description: str = ""
    ) -> "CommandDescriptor":
        return cls(command_id, Arity.NAMESPACE, namespace=namespace, description=description)

    @classmethod
    def switch(
        cls, command_id: str, target_mode: str, description: str = ""
    ) -> "CommandDescriptor":
        return cls(
            command_id, Arity.MODE_SWITCH, target_mode=target_mode, description=description
        )


def _freeze_tokens(entries: Mapping[str, object]) -> Mapping[str, object]:
    return MappingProxyType({normalize_token(key): value for key, value in entries.items()})


@dataclass(frozen=True, slots=True)
class CommandTable:
    """Immutable key token to descriptor mapping."""

    name: str
    entries: Mapping[str, CommandDescriptor] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", _freeze_tokens(self.entries))

    def lookup(self, key: KeyEvent | str) -> Optional[CommandDescriptor]:
        token = key.token if isinstance(key, KeyEvent) else normalize_token(key)
        return self.entries.get(token)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, (KeyEvent, str)):
            return False
        return self.lookup(key) is not None

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True, slots=True)
class Namespace:
    """Secondary table consulted for the key right after its opener."""

    id: str
    entries: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("namespace id cannot be empty")
        object.__setattr__(self, "entries", _freeze_tokens(self.entries))

    def lookup(self, key: KeyEvent | str) -> Optional[str]:
        token = key.token if isinstance(key, KeyEvent) else normalize_token(key)
        return self.entries.get(token)


@dataclass(frozen=True, slots=True)
class ModeSpec:
    """Static description of one mode: kind, command table, motions."""

    id: str
    kind: ModeKind
    table: CommandTable = field(default_factory=lambda: CommandTable("anonymous"))
    motions: Mapping[str, str] = field(default_factory=dict)
    description: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("mode id cannot be empty")
        object.__setattr__(self, "kind", ModeKind(self.kind))
        object.__setattr__(self, "motions", _freeze_tokens(self.motions))

    def motion_for(self, key: KeyEvent) -> Optional[str]:
        return self.motions.get(key.token)


__all__ = [
    "SPECIAL_KEYS",
    "KeyEvent",
    "normalize_token",
    "ModeKind",
    "Arity",
    "CommandDescriptor",
    "CommandTable",
    "Namespace",
    "ModeSpec",
]
