"""Mode registry tracking the single active mode."""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional

from modal_input.errors import UnknownModeError
from modal_input.keymaps import ModeKind, ModeSpec
from modal_input.runtime import telemetry

ActivationListener = Callable[[Optional[str], str], None]


class ModeRegistry:
    """Maps mode ids to their specs and owns the active-mode reference.

    Every ``activate`` call, including one targeting the mode that is
    already active, notifies listeners so pending input state is dropped.
    """

    def __init__(self, modes: Iterable[ModeSpec], initial: str) -> None:
        self._modes: Dict[str, ModeSpec] = {}
        for spec in modes:
            if spec.id in self._modes:
                raise ValueError(f"Mode '{spec.id}' already registered")
            self._modes[spec.id] = spec
        if initial not in self._modes:
            raise UnknownModeError(initial)
        self._active = initial
        self._listeners: List[ActivationListener] = []

    @property
    def active(self) -> ModeSpec:
        return self._modes[self._active]

    @property
    def active_id(self) -> str:
        return self._active

    def __contains__(self, mode_id: object) -> bool:
        return mode_id in self._modes

    def mode_ids(self) -> tuple[str, ...]:
        return tuple(self._modes)

    def get(self, mode_id: str) -> ModeSpec:
        try:
            return self._modes[mode_id]
        except KeyError:
            raise UnknownModeError(mode_id) from None

    def current_kind(self) -> ModeKind:
        return self.active.kind

    def subscribe(self, listener: ActivationListener) -> None:
        self._listeners.append(listener)

    def activate(self, mode_id: str) -> ModeSpec:
        if mode_id not in self._modes:
            raise UnknownModeError(mode_id)
        previous = self._active
        self._active = mode_id
        for listener in self._listeners:
            listener(previous, mode_id)
        telemetry.record_event(
            "mode.switch",
            data={"from": previous, "mode": mode_id},
            logger_name="modal_input.modes",
        )
        return self._modes[mode_id]


__all__ = ["ModeRegistry", "ActivationListener"]
