from __future__ import annotations

from typing import Any, Dict

import pytest

from modal_input.errors import ConfigurationError
from modal_input.keymaps import Arity, ModeKind, load_keymap_config, parse_descriptor


def make_config() -> Dict[str, Any]:
    return {
        "initial_mode": "normal",
        "modes": {
            "normal": {
                "kind": "command",
                "bindings": {
                    "x": "delete_char",
                    "d": {"command": "delete", "arity": "motion"},
                    "g": {"command": "goto", "arity": "namespace", "namespace": "g"},
                    "i": {"command": "insert", "arity": "mode_switch", "target": "insert"},
                },
                "motions": {"j": "down", "k": "up"},
            },
            "insert": {"kind": "primitive"},
        },
        "global": {
            "alt+space": "next_cursor",
            "alt": {"command": "move", "arity": "motion"},
            "shift+space": {"command": "home", "arity": "mode_switch", "target": "normal"},
        },
        "namespaces": {"g": {"g": "buffer_start"}},
    }


def test_load_keymap_config_builds_every_table() -> None:
    registry = load_keymap_config(make_config())
    keymap = registry.build()

    normal = keymap.modes["normal"]
    assert normal.kind is ModeKind.COMMAND
    delete = normal.table.lookup("d")
    assert delete is not None and delete.arity is Arity.MOTION
    assert normal.motions["j"] == "down"
    assert keymap.modes["insert"].kind is ModeKind.PRIMITIVE
    assert keymap.namespaces["g"].lookup("g") == "buffer_start"
    assert keymap.global_table.lookup("alt+space") is not None


def test_missing_modes_table_is_fatal() -> None:
    with pytest.raises(ConfigurationError):
        load_keymap_config({"modes": {}})


def test_unknown_kind_and_arity_are_fatal() -> None:
    config = make_config()
    config["modes"]["normal"]["kind"] = "visual-block"
    with pytest.raises(ConfigurationError, match="unknown kind"):
        load_keymap_config(config)

    with pytest.raises(ConfigurationError, match="unknown arity"):
        parse_descriptor({"command": "x", "arity": "binary"}, where="test")


def test_descriptor_missing_payload_is_fatal() -> None:
    with pytest.raises(ConfigurationError, match="missing 'command'"):
        parse_descriptor({"arity": "motion"}, where="test")
    with pytest.raises(ConfigurationError, match="opens no namespace"):
        parse_descriptor({"command": "goto", "arity": "namespace"}, where="test")
    with pytest.raises(ConfigurationError):
        parse_descriptor(42, where="test")


def test_dangling_namespace_reference_fails_at_load_time() -> None:
    config = make_config()
    config["namespaces"] = {}

    with pytest.raises(ConfigurationError, match="unknown namespace 'g'"):
        load_keymap_config(config)


def test_misspelled_key_names_fail_at_load_time() -> None:
    config = make_config()
    config["modes"]["normal"]["bindings"]["escpae"] = "leave"
    with pytest.raises(ConfigurationError, match="unknown key name 'escpae'"):
        load_keymap_config(config)

    config = make_config()
    config["global"]["ctrl+retrun"] = "submit"
    with pytest.raises(ConfigurationError, match="unknown key name 'retrun'"):
        load_keymap_config(config)


def test_named_keys_and_aliases_are_accepted() -> None:
    config = make_config()
    bindings = config["modes"]["normal"]["bindings"]
    bindings["esc"] = "leave"
    bindings["ctrl+return"] = "submit"
    bindings["backspace"] = "delete_back"

    normal = load_keymap_config(config).build().modes["normal"]

    assert normal.table.lookup("escape") is not None
    assert normal.table.lookup("ctrl+enter") is not None
    assert normal.table.lookup("backspace") is not None
