from __future__ import annotations

from typing import List, Optional, Tuple

import pytest

from modal_input.errors import UnknownModeError
from modal_input.keymaps import ModeKind, ModeSpec
from modal_input.modes import (
    COUNT_LIMIT,
    CursorSet,
    ModeRegistry,
    NumeralAccumulator,
    Operation,
    OutputBus,
)


def test_numeral_accumulates_base_ten() -> None:
    numeral = NumeralAccumulator()

    assert numeral.accept_digit("1") == 1
    assert numeral.accept_digit(2) == 12
    assert numeral.accept_digit("0") == 120
    assert numeral.take() == 120
    assert numeral.take() is None


def test_numeral_leading_zero_keeps_accumulating() -> None:
    numeral = NumeralAccumulator()

    numeral.accept_digit("0")
    numeral.accept_digit("0")
    numeral.accept_digit("7")

    assert numeral.peek() == 7
    assert numeral.pending


def test_numeral_take_count_defaults_to_one() -> None:
    numeral = NumeralAccumulator()

    assert numeral.take_count() == 1
    numeral.accept_digit("4")
    assert numeral.take_count() == 4
    assert not numeral.pending


def test_numeral_saturates_at_limit() -> None:
    numeral = NumeralAccumulator()
    for digit in "99999999999":
        numeral.accept_digit(digit)

    assert numeral.peek() == COUNT_LIMIT


def test_numeral_rejects_non_digits() -> None:
    numeral = NumeralAccumulator()

    with pytest.raises(ValueError):
        numeral.accept_digit("12")
    with pytest.raises(ValueError):
        numeral.accept_digit(10)


def test_cursor_set_cycles_and_wraps() -> None:
    cursors = CursorSet(["a", "b", "c"])

    assert cursors.current() == "a"
    assert cursors.next() == "b"
    assert cursors.next() == "c"
    assert cursors.next() == "a"
    assert cursors.index == 0


def test_cursor_set_empty_is_noop() -> None:
    cursors: CursorSet[str] = CursorSet()

    assert cursors.next() is None
    assert cursors.current() is None
    assert cursors.index is None
    assert not cursors


def test_cursor_set_remove_keeps_index_valid() -> None:
    cursors = CursorSet(["a", "b", "c"])
    cursors.next()
    cursors.next()

    cursors.remove("c")
    assert cursors.current() == "a"

    cursors.next()
    cursors.remove("a")
    assert cursors.current() == "b"

    cursors.remove("b")
    assert cursors.index is None

    cursors.add("z")
    assert cursors.current() == "z"


def make_modes() -> ModeRegistry:
    return ModeRegistry(
        [
            ModeSpec("normal", ModeKind.COMMAND),
            ModeSpec("insert", ModeKind.PRIMITIVE),
        ],
        initial="normal",
    )


def test_mode_registry_activate_and_kind() -> None:
    modes = make_modes()
    seen: List[Tuple[Optional[str], str]] = []
    modes.subscribe(lambda previous, target: seen.append((previous, target)))

    assert modes.current_kind() is ModeKind.COMMAND
    modes.activate("insert")
    assert modes.current_kind() is ModeKind.PRIMITIVE
    modes.activate("insert")

    assert seen == [("normal", "insert"), ("insert", "insert")]


def test_mode_registry_unknown_mode() -> None:
    modes = make_modes()

    with pytest.raises(UnknownModeError):
        modes.activate("visual")
    with pytest.raises(UnknownModeError):
        ModeRegistry([ModeSpec("normal", ModeKind.COMMAND)], initial="visual")

    assert modes.active_id == "normal"


def test_output_bus_routes_by_channel() -> None:
    bus = OutputBus()
    operations: List[object] = []
    everything: List[object] = []
    bus.subscribe("operation", operations.append)
    bus.subscribe("*", everything.append)

    bus.emit(Operation("j", 3))

    assert operations == [Operation("j", 3)]
    assert everything == [Operation("j", 3)]

    bus.unsubscribe("operation", operations.append)
    bus.emit(Operation("k"))
    assert len(operations) == 1
