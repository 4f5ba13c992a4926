"""Values the resolver hands to the editing engine, plus the bus carrying them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, ClassVar, Dict, Optional, Union

from modal_input.keymaps import KeyEvent
from modal_input.runtime import telemetry


@dataclass(frozen=True, slots=True)
class Operation:
    """A fully resolved command ready for execution."""

    channel: ClassVar[str] = "operation"

    command_id: str
    count: int = 1
    motion_id: Optional[str] = None
    namespace_selector: Optional[str] = None


@dataclass(frozen=True, slots=True)
class PrimitiveInput:
    """Raw key forwarded untouched while a primitive mode is active."""

    channel: ClassVar[str] = "primitive"

    symbol: str
    modifiers: tuple[str, ...] = ()

    @classmethod
    def from_key(cls, key: KeyEvent) -> "PrimitiveInput":
        return cls(symbol=key.symbol, modifiers=key.modifiers)


@dataclass(frozen=True, slots=True)
class ModeSwitch:
    channel: ClassVar[str] = "mode_switch"

    target_mode: str
    previous_mode: Optional[str] = None


@dataclass(frozen=True, slots=True)
class UnboundKey:
    """Informational: the key had no binding in the active mode."""

    channel: ClassVar[str] = "unbound_key"

    key: KeyEvent
    mode: str


@dataclass(frozen=True, slots=True)
class AbortedPendingCommand:
    """Informational: a motion or namespace continuation did not match."""

    channel: ClassVar[str] = "aborted"

    command_id: str
    key: KeyEvent
    reason: str


Output = Union[Operation, PrimitiveInput, ModeSwitch, UnboundKey, AbortedPendingCommand]

ALL_CHANNELS = "*"


class OutputBus:
    """Minimal event bus fanning resolver outputs out to subscribers."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, list[Callable[[Output], None]]] = {}

    def subscribe(self, channel: str, callback: Callable[[Output], None]) -> None:
        self._subscribers.setdefault(channel, []).append(callback)

    def unsubscribe(self, channel: str, callback: Callable[[Output], None]) -> None:
        callbacks = self._subscribers.get(channel, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def emit(self, output: Output) -> None:
        """Deliver ``output`` to its channel, then to ``*`` subscribers.

        A failing subscriber is logged and skipped; the remaining callbacks
        still receive the output.
        """

        callbacks = [
            *self._subscribers.get(output.channel, []),
            *self._subscribers.get(ALL_CHANNELS, []),
        ]
        for callback in callbacks:
            try:
                callback(output)
            except Exception as exc:
                telemetry.record_event(
                    "bus.subscriber_failed",
                    level="error",
                    data={"channel": output.channel, "error": repr(exc)},
                    logger_name="modal_input.bus",
                )


__all__ = [
    "Operation",
    "PrimitiveInput",
    "ModeSwitch",
    "UnboundKey",
    "AbortedPendingCommand",
    "Output",
    "OutputBus",
    "ALL_CHANNELS",
]
