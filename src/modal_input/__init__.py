"""Input-interpretation core for keyboard-driven modal editors."""

__all__ = [
    "adapters",
    "errors",
    "keymaps",
    "modes",
    "runtime",
]

__version__ = "0.1.0"
