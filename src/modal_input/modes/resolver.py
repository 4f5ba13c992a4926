"""Key-by-key command resolution state machine.

The resolver consumes one ``KeyEvent`` at a time and decides, using the
global table, the active mode's table, the numeral accumulator and the
namespace tables, whether the key completes an operation, starts or extends
a pending request, or is forwarded verbatim. Anomalies never raise: they
are reported as informational outputs and the machine returns to ``IDLE``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Literal, Optional

from modal_input.keymaps import (
    Arity,
    CommandDescriptor,
    Keymap,
    KeyEvent,
    KeymapRegistry,
    ModeKind,
)
from modal_input.keymaps.defaults import NEXT_CURSOR
from modal_input.runtime import telemetry

from .cursors import CursorSet
from .numeral import NumeralAccumulator
from .outputs import (
    AbortedPendingCommand,
    ModeSwitch,
    Operation,
    Output,
    OutputBus,
    PrimitiveInput,
    UnboundKey,
)
from .registry import ModeRegistry

LOGGER_NAME = "modal_input.resolver"


class ResolverState(str, Enum):
    IDLE = "idle"
    ACCUMULATING_NUMERAL = "accumulating_numeral"
    AWAITING_MOTION = "awaiting_motion"
    AWAITING_NAMESPACE_KEY = "awaiting_namespace_key"


class GlobalPolicy(str, Enum):
    """Whether a pending continuation or a global binding sees a key first."""

    PENDING_FIRST = "pending_first"
    GLOBAL_FIRST = "global_first"


@dataclass(frozen=True, slots=True)
class ResolverPolicy:
    global_policy: GlobalPolicy = GlobalPolicy.PENDING_FIRST
    preserve_count_on_unbound: bool = False
    reprocess_after_namespace_abort: bool = False


Status = Literal[
    "operation",
    "primitive",
    "mode_switch",
    "numeral",
    "pending",
    "unbound",
    "aborted",
    "noop",
]


@dataclass(frozen=True, slots=True)
class Resolution:
    """Outcome of ``CommandResolver.process`` for a single key."""

    status: Status
    outputs: tuple[Output, ...] = ()
    state: ResolverState = ResolverState.IDLE

    @property
    def operations(self) -> tuple[Operation, ...]:
        return tuple(output for output in self.outputs if isinstance(output, Operation))


@dataclass(frozen=True, slots=True)
class ResolverSnapshot:
    """Read-only view for UI feedback (count preview, pending command)."""

    state: ResolverState
    mode: str
    mode_kind: ModeKind
    pending_numeral: Optional[int] = None
    pending_command: Optional[str] = None
    pending_namespace: Optional[str] = None


@dataclass(frozen=True, slots=True)
class _Pending:
    command_id: str
    count: int
    namespace: Optional[str] = None


class CommandResolver:
    """Owns the pending numeral, the pending request and the active mode."""

    def __init__(
        self,
        keymap: Keymap,
        *,
        bus: OutputBus | None = None,
        cursors: CursorSet | None = None,
        policy: ResolverPolicy | None = None,
        next_cursor_command: str = NEXT_CURSOR,
    ) -> None:
        self.keymap = keymap
        self.modes = ModeRegistry(keymap.modes.values(), keymap.initial_mode)
        self.numeral = NumeralAccumulator()
        self.cursors: CursorSet = cursors if cursors is not None else CursorSet()
        self.bus = bus or OutputBus()
        self.policy = policy or ResolverPolicy()
        self._next_cursor_command = next_cursor_command
        self._state = ResolverState.IDLE
        self._pending: Optional[_Pending] = None
        self.modes.subscribe(self._on_mode_activated)

    @classmethod
    def from_registry(
        cls, registry: KeymapRegistry, **kwargs: object
    ) -> "CommandResolver":
        return cls(registry.build(), **kwargs)  # type: ignore[arg-type]

    @property
    def state(self) -> ResolverState:
        return self._state

    def snapshot(self) -> ResolverSnapshot:
        pending = self._pending
        return ResolverSnapshot(
            state=self._state,
            mode=self.modes.active_id,
            mode_kind=self.modes.current_kind(),
            pending_numeral=self.numeral.peek(),
            pending_command=pending.command_id if pending else None,
            pending_namespace=pending.namespace if pending else None,
        )

    def process(self, key: KeyEvent) -> Resolution:
        with telemetry.span(
            "resolver::process",
            logger_name=LOGGER_NAME,
            component="resolver",
            metadata={
                "key": key.token,
                "mode": self.modes.active_id,
                "state": self._state.value,
            },
        ) as handle:
            outputs: List[Output] = []
            status = self._dispatch(key, outputs)
            handle.add_metadata("status", status)
            handle.add_metadata("next_state", self._state.value)

        for output in outputs:
            self.bus.emit(output)
        return Resolution(status=status, outputs=tuple(outputs), state=self._state)

    def feed(self, keys: Iterable[KeyEvent | str]) -> list[Resolution]:
        """Process several keys; strings are parsed with ``KeyEvent.parse``."""

        return [
            self.process(key if isinstance(key, KeyEvent) else KeyEvent.parse(key))
            for key in keys
        ]

    def switch_mode(self, mode_id: str) -> Resolution:
        """Activate ``mode_id`` from outside the key stream."""

        outputs: List[Output] = []
        status = self._switch_mode(mode_id, outputs)
        for output in outputs:
            self.bus.emit(output)
        return Resolution(status=status, outputs=tuple(outputs), state=self._state)

    def reset(self) -> None:
        """Drop the pending numeral and any pending request."""

        self._clear()

    def _dispatch(self, key: KeyEvent, outputs: List[Output]) -> Status:
        if self._pending is None:
            return self._resolve_top(key, outputs)

        if self.policy.global_policy is GlobalPolicy.GLOBAL_FIRST:
            match = self._lookup_global(key)
            if match is not None:
                descriptor, motion_id = match
                if self._is_next_cursor(descriptor) and not self.cursors:
                    return "noop"
                outputs.append(self._abort(key, "interrupted by global command"))
                return self._fire_global(descriptor, motion_id, outputs)

        if self._state is ResolverState.AWAITING_MOTION:
            return self._continue_motion(key, outputs)
        return self._continue_namespace(key, outputs)

    def _continue_motion(self, key: KeyEvent, outputs: List[Output]) -> Status:
        pending = self._pending
        assert pending is not None
        motion_id = self.modes.active.motion_for(key)
        if motion_id is not None:
            self._clear()
            outputs.append(
                Operation(pending.command_id, pending.count, motion_id=motion_id)
            )
            return "operation"

        outputs.append(self._abort(key, "not a motion"))
        return self._reprocess(key, outputs)

    def _continue_namespace(self, key: KeyEvent, outputs: List[Output]) -> Status:
        pending = self._pending
        assert pending is not None and pending.namespace is not None
        namespace = self.keymap.namespaces[pending.namespace]
        selector = namespace.lookup(key)
        if selector is not None:
            self._clear()
            outputs.append(
                Operation(pending.command_id, pending.count, namespace_selector=selector)
            )
            return "operation"

        outputs.append(self._abort(key, f"no binding in namespace '{namespace.id}'"))
        if self.policy.reprocess_after_namespace_abort:
            return self._reprocess(key, outputs)
        return "aborted"

    def _reprocess(self, key: KeyEvent, outputs: List[Output]) -> Status:
        status = self._resolve_top(key, outputs)
        # a rerun that does nothing still reports the abort
        return "aborted" if status == "noop" else status

    def _resolve_top(self, key: KeyEvent, outputs: List[Output]) -> Status:
        match = self._lookup_global(key)
        if match is not None:
            descriptor, motion_id = match
            return self._fire_global(descriptor, motion_id, outputs)

        mode = self.modes.active
        if mode.kind is ModeKind.PRIMITIVE:
            outputs.append(PrimitiveInput.from_key(key))
            return "primitive"

        if key.is_digit:
            self.numeral.accept_digit(key.symbol)
            self._state = ResolverState.ACCUMULATING_NUMERAL
            return "numeral"

        descriptor = mode.table.lookup(key)
        if descriptor is None:
            return self._unbound(key, outputs)
        return self._fire(descriptor, outputs)

    def _lookup_global(
        self, key: KeyEvent
    ) -> Optional[tuple[CommandDescriptor, Optional[str]]]:
        table = self.keymap.global_table
        descriptor = table.lookup(key)
        if descriptor is not None:
            return descriptor, None

        # A chord like alt+j resolves in one step when alt alone is a motion global.
        modifier_token = key.modifier_token
        if modifier_token is None:
            return None
        prefix = table.lookup(modifier_token)
        if prefix is None or prefix.arity is not Arity.MOTION:
            return None
        motion_id = self.modes.active.motion_for(key.without_modifiers())
        if motion_id is None:
            return None
        return prefix, motion_id

    def _fire_global(
        self,
        descriptor: CommandDescriptor,
        motion_id: Optional[str],
        outputs: List[Output],
    ) -> Status:
        if self._is_next_cursor(descriptor):
            if not self.cursors:
                return "noop"
            count = self.numeral.take_count()
            for _ in range(count % len(self.cursors)):
                self.cursors.next()
            self._state = ResolverState.IDLE
            outputs.append(Operation(descriptor.command_id, count))
            return "operation"
        return self._fire(descriptor, outputs, motion_id=motion_id)

    def _is_next_cursor(self, descriptor: CommandDescriptor) -> bool:
        return (
            descriptor.arity is Arity.STANDALONE
            and descriptor.command_id == self._next_cursor_command
        )

    def _fire(
        self,
        descriptor: CommandDescriptor,
        outputs: List[Output],
        *,
        motion_id: Optional[str] = None,
    ) -> Status:
        arity = descriptor.arity
        if arity is Arity.MODE_SWITCH:
            assert descriptor.target_mode is not None
            return self._switch_mode(descriptor.target_mode, outputs)

        count = self.numeral.take_count()
        if arity is Arity.STANDALONE or (arity is Arity.MOTION and motion_id is not None):
            self._state = ResolverState.IDLE
            outputs.append(Operation(descriptor.command_id, count, motion_id=motion_id))
            return "operation"

        if arity is Arity.MOTION:
            self._pending = _Pending(descriptor.command_id, count)
            self._state = ResolverState.AWAITING_MOTION
        else:
            self._pending = _Pending(descriptor.command_id, count, descriptor.namespace)
            self._state = ResolverState.AWAITING_NAMESPACE_KEY
        return "pending"

    def _switch_mode(self, target: str, outputs: List[Output]) -> Status:
        previous = self.modes.active_id
        self.modes.activate(target)
        outputs.append(ModeSwitch(target_mode=target, previous_mode=previous))
        return "mode_switch"

    def _unbound(self, key: KeyEvent, outputs: List[Output]) -> Status:
        mode_id = self.modes.active_id
        outputs.append(UnboundKey(key=key, mode=mode_id))
        if self.policy.preserve_count_on_unbound and self.numeral.pending:
            self._state = ResolverState.ACCUMULATING_NUMERAL
        else:
            self._clear()
        telemetry.record_event(
            "key.unbound",
            data={"key": key.token, "mode": mode_id},
            logger_name=LOGGER_NAME,
        )
        return "unbound"

    def _abort(self, key: KeyEvent, reason: str) -> AbortedPendingCommand:
        pending = self._pending
        assert pending is not None
        self._clear()
        telemetry.record_event(
            "command.aborted",
            data={"command": pending.command_id, "key": key.token, "reason": reason},
            logger_name=LOGGER_NAME,
        )
        return AbortedPendingCommand(command_id=pending.command_id, key=key, reason=reason)

    def _on_mode_activated(self, previous: Optional[str], target: str) -> None:
        del previous, target
        self._clear()

    def _clear(self) -> None:
        self.numeral.clear()
        self._pending = None
        self._state = ResolverState.IDLE


__all__ = [
    "CommandResolver",
    "GlobalPolicy",
    "Resolution",
    "ResolverPolicy",
    "ResolverSnapshot",
    "ResolverState",
]
