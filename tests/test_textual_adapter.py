from __future__ import annotations

from typing import List

from modal_input.adapters.textual import (
    TextualKeyAdapter,
    TextualUIHooks,
    describe_pending,
    key_event_from_textual,
)
from modal_input.keymaps import KeyEvent, default_registry
from modal_input.modes import CommandResolver, CursorSet, Operation, Output


def make_adapter(
    outputs: List[Output], statuses: List[str], pending: List[str]
) -> TextualKeyAdapter:
    resolver = CommandResolver.from_registry(
        default_registry(), cursors=CursorSet(["a", "b"])
    )
    hooks = TextualUIHooks(
        handle_output=outputs.append,
        update_status=statuses.append,
        show_pending=pending.append,
    )
    return TextualKeyAdapter(resolver, hooks)


def test_textual_key_names_translate_to_events() -> None:
    assert key_event_from_textual("j", "j") == KeyEvent("j")
    assert key_event_from_textual("J", "J") == KeyEvent("J")
    assert key_event_from_textual("shift+j", "J") == KeyEvent("J")
    assert key_event_from_textual("space", " ") == KeyEvent("space")
    assert key_event_from_textual("shift+space", " ") == KeyEvent("space", ("shift",))
    assert key_event_from_textual("alt+space", None) == KeyEvent("space", ("alt",))
    assert key_event_from_textual("ctrl+a", "\x01") == KeyEvent("a", ("ctrl",))
    assert key_event_from_textual("escape", "\x1b") == KeyEvent("escape")
    assert key_event_from_textual("dollar_sign", "$") == KeyEvent("$")
    assert key_event_from_textual("", None) is None
    assert key_event_from_textual("hyper+x", None) is None


def test_adapter_reports_pending_preview_and_outputs() -> None:
    outputs: List[Output] = []
    statuses: List[str] = []
    pending: List[str] = []
    adapter = make_adapter(outputs, statuses, pending)

    adapter.handle_textual_key("3", character="3")
    assert pending[-1] == "3"

    adapter.handle_textual_key("d", character="d")
    assert pending[-1] == "delete"

    adapter.handle_textual_key("j", character="j")
    assert pending[-1] == ""
    assert outputs == [Operation("delete", 3, motion_id="down")]
    assert statuses[-1] == "normal | operation"


def test_adapter_drops_untranslatable_keys() -> None:
    outputs: List[Output] = []
    adapter = make_adapter(outputs, [], [])
    lines: List[str] = []
    adapter.hooks.log = lines.append

    assert adapter.handle_textual_key("") is None
    assert outputs == []
    assert lines and lines[-1].startswith("key dropped")


def test_adapter_routes_global_chords() -> None:
    outputs: List[Output] = []
    statuses: List[str] = []
    adapter = make_adapter(outputs, statuses, [])

    adapter.handle_textual_key("i", character="i")
    adapter.handle_textual_key("alt+space")
    adapter.handle_textual_key("shift+space", character=" ")

    assert Operation("next_cursor", 1) in outputs
    assert adapter.resolver.cursors.current() == "b"
    assert adapter.resolver.modes.active_id == "normal"
    assert statuses[-1] == "normal | mode_switch"


def test_describe_pending_combines_count_and_command() -> None:
    resolver = CommandResolver.from_registry(default_registry())
    resolver.feed(["1", "2", "g"])

    # count was consumed by the namespace opener
    assert describe_pending(resolver.snapshot()) == "goto"

    resolver.reset()
    resolver.feed(["4"])
    assert describe_pending(resolver.snapshot()) == "4"


def test_demo_app_builds_resolver_from_arguments() -> None:
    from modal_input.adapters.textual.app import _parse_args, create_default_resolver

    args = _parse_args(["--cursors", "2", "--log-preset", "quiet"])
    resolver = create_default_resolver(cursors=args.cursors)

    assert args.keymap is None
    assert list(resolver.cursors) == [0, 1]
    assert resolver.modes.active_id == "normal"
