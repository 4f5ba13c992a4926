from __future__ import annotations

import pytest

from modal_input.keymaps import (
    Arity,
    CommandDescriptor,
    CommandTable,
    KeyEvent,
    ModeKind,
    ModeSpec,
    Namespace,
    normalize_token,
)


def test_key_event_normalizes_modifiers() -> None:
    key = KeyEvent("x", ("Shift", "control", "alt", "shift"))

    assert key.modifiers == ("alt", "ctrl", "shift")
    assert key.token == "alt+ctrl+shift+x"


def test_key_event_rejects_unknown_modifier() -> None:
    with pytest.raises(ValueError):
        KeyEvent("x", ("hyper",))


def test_key_event_parse_round_trips_tokens() -> None:
    assert KeyEvent.parse("alt+space") == KeyEvent("space", ("alt",))
    assert KeyEvent.parse("shift+space").token == "shift+space"
    assert KeyEvent.parse("ctrl++") == KeyEvent("+", ("ctrl",))
    assert KeyEvent.parse("+") == KeyEvent("+")


def test_key_event_symbol_aliases() -> None:
    assert KeyEvent("Esc").symbol == "escape"
    assert KeyEvent("RETURN").symbol == "enter"
    assert KeyEvent(" ").symbol == "space"
    assert KeyEvent("J").symbol == "J"


def test_is_digit_requires_unmodified_digit() -> None:
    assert KeyEvent("7").is_digit
    assert KeyEvent("0").is_digit
    assert not KeyEvent("7", ("ctrl",)).is_digit
    assert not KeyEvent("x").is_digit


def test_modifier_token_and_bare_key() -> None:
    chord = KeyEvent("j", ("alt",))

    assert chord.modifier_token == "alt"
    assert chord.without_modifiers() == KeyEvent("j")
    assert chord.has("meta")
    assert KeyEvent("j").modifier_token is None


def test_descriptor_validates_arity_payload() -> None:
    with pytest.raises(ValueError):
        CommandDescriptor("goto", Arity.NAMESPACE)
    with pytest.raises(ValueError):
        CommandDescriptor("insert", Arity.MODE_SWITCH)
    with pytest.raises(ValueError):
        CommandDescriptor("delete", Arity.MOTION, namespace="g")

    descriptor = CommandDescriptor.opens("goto", "g")
    assert descriptor.arity is Arity.NAMESPACE
    assert descriptor.namespace == "g"


def test_command_table_lookup_normalizes_keys() -> None:
    table = CommandTable("normal", {"Shift+Space": CommandDescriptor.standalone("wide")})

    assert table.lookup(KeyEvent("space", ("shift",))) is not None
    assert "shift+space" in table
    assert table.lookup("x") is None
    assert len(table) == 1


def test_namespace_and_mode_spec_lookup() -> None:
    namespace = Namespace("g", {"g": "buffer_start"})
    spec = ModeSpec("normal", ModeKind.COMMAND, motions={"j": "down"})

    assert namespace.lookup(KeyEvent("g")) == "buffer_start"
    assert namespace.lookup(KeyEvent("x")) is None
    assert spec.motion_for(KeyEvent("j")) == "down"
    assert spec.motion_for(KeyEvent("j", ("alt",))) is None


def test_normalize_token_accepts_events() -> None:
    assert normalize_token(KeyEvent("a", ("ctrl",))) == "ctrl+a"
    assert normalize_token("CTRL+a") == "ctrl+a"
