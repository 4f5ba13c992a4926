from __future__ import annotations

import pytest

from modal_input.runtime import telemetry


def test_configure_rejects_conflicting_arguments() -> None:
    with pytest.raises(ValueError):
        telemetry.configure(config=object(), preset="quiet")


def test_configure_rejects_unknown_preset() -> None:
    with pytest.raises(ValueError, match="Unknown preset"):
        telemetry.configure(preset="verbose")


def test_span_reraises_and_keeps_logger_usable() -> None:
    with pytest.raises(RuntimeError):
        with telemetry.span("test::boom", component="tests", metadata={"k": 1}):
            raise RuntimeError("boom")

    with telemetry.span("test::ok", metadata={"k": 2}) as handle:
        handle.add_metadata("status", "ok")

    assert handle.metadata == {"k": "2", "status": "ok"}
    telemetry.record_event("test.event", data={"value": 3})
