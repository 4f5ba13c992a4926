"""Numeral prefix accumulation ("3" then "j" moves three lines)."""

from __future__ import annotations

from typing import Optional

# Outbound counts are unsigned 32-bit; accumulation saturates here.
COUNT_LIMIT = 2**32 - 1


class NumeralAccumulator:
    """Collects consecutive digit keys into a repeat count."""

    def __init__(self, *, limit: int = COUNT_LIMIT) -> None:
        self._value: Optional[int] = None
        self._limit = limit

    @property
    def pending(self) -> bool:
        return self._value is not None

    def peek(self) -> Optional[int]:
        return self._value

    def accept_digit(self, digit: int | str) -> int:
        value = int(digit)
        if not 0 <= value <= 9 or (isinstance(digit, str) and len(digit) != 1):
            raise ValueError(f"'{digit}' is not a single decimal digit")
        previous = self._value or 0
        self._value = min(previous * 10 + value, self._limit)
        return self._value

    def take(self) -> Optional[int]:
        value, self._value = self._value, None
        return value

    def take_count(self) -> int:
        """Like ``take`` but applies the default count of 1."""

        value = self.take()
        return 1 if value is None else value

    def clear(self) -> None:
        self._value = None

    def __repr__(self) -> str:
        return f"NumeralAccumulator(value={self._value!r})"


__all__ = ["COUNT_LIMIT", "NumeralAccumulator"]
