"""Exception hierarchy for configuration-time failures.

Runtime resolution problems (unbound keys, aborted continuations) are not
exceptions; they surface as informational outputs from the resolver.
"""

from __future__ import annotations

from typing import Iterable


class ModalInputError(RuntimeError):
    """Base class for every error raised by this package."""


class ConfigurationError(ModalInputError):
    """Raised when keymap configuration is malformed or inconsistent."""

    def __init__(self, message: str, *, problems: Iterable[str] = ()) -> None:
        self.problems = tuple(problems)
        if self.problems:
            message = f"{message}: " + "; ".join(self.problems)
        super().__init__(message)


class UnknownModeError(ConfigurationError, KeyError):
    """Raised when activating a mode that was never registered."""

    def __init__(self, mode_id: str) -> None:
        super().__init__(f"Unknown mode '{mode_id}'")
        self.mode_id = mode_id

    def __str__(self) -> str:
        return RuntimeError.__str__(self)


class KeymapConflictError(ConfigurationError):
    """Raised when a key is bound twice in the same table."""

    def __init__(self, table: str, token: str, existing: str, incoming: str) -> None:
        super().__init__(
            f"Key '{token}' in table '{table}' is bound to '{existing}', "
            f"cannot bind '{incoming}'"
        )
        self.table = table
        self.token = token
        self.existing = existing
        self.incoming = incoming


__all__ = [
    "ModalInputError",
    "ConfigurationError",
    "UnknownModeError",
    "KeymapConflictError",
]
