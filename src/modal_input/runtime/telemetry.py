"""telelog wiring for the keymap loader, the resolver and the output bus.

Settings come from ``MODAL_INPUT_*`` environment variables (``LOG_LEVEL``,
``LOG_FILE``, ``LOG_JSON``, ``LOG_BUFFERED``, ``LOG_BUFFER_SIZE``,
``DISABLE_CONSOLE``, ``NO_COLOR``) or from a named preset passed to
``configure``. Resolver code calls ``span`` around each key and
``record_event`` for anomalies such as aborted or unbound keys.
"""

from __future__ import annotations

import os
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, MutableMapping, Optional, Tuple, cast

import telelog  # type: ignore[import]

tl = cast(Any, telelog)

ENV_PREFIX = "MODAL_INPUT_"
DEFAULT_LOGGER_NAME = os.getenv(f"{ENV_PREFIX}LOGGER", "modal_input")

_LOGGERS: MutableMapping[str, Any] = {}
_CONFIG: Optional[Any] = None

_PRESETS: Dict[str, Dict[str, Any]] = {
    "development": {"level": "DEBUG", "console": True, "color": True},
    "production": {
        "level": "INFO",
        "console": False,
        "file": "modal_input.log",
        "buffered": True,
    },
    "quiet": {"level": "ERROR", "console": False},
}


def _env(name: str) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{name}")


def _env_flag(name: str) -> bool:
    return (_env(name) or "").lower() in {"1", "true", "yes", "on"}


def _text(value: Any) -> str:
    if isinstance(value, (dict, list, tuple, set)):
        return repr(value)
    return str(value)


def _pairs(data: Dict[str, Any]) -> list[tuple[str, str]]:
    return [(str(key), _text(value)) for key, value in data.items()]


def _settings_from_env() -> Dict[str, Any]:
    return {
        "level": (_env("LOG_LEVEL") or "INFO").upper(),
        "console": not _env_flag("DISABLE_CONSOLE"),
        "color": not _env_flag("NO_COLOR"),
        "json": _env_flag("LOG_JSON"),
        "file": _env("LOG_FILE") or None,
        "buffered": _env_flag("LOG_BUFFERED"),
        "buffer_size": int(_env("LOG_BUFFER_SIZE") or "2048"),
    }


def _build_config(settings: Dict[str, Any]) -> Any:
    config = tl.Config()
    config.with_min_level(settings["level"])
    console = settings.get("console", True)
    config.with_console_output(console)
    if console:
        config.with_colored_output(settings.get("color", False))
    config.with_json_format(settings.get("json", False))
    if settings.get("file"):
        config.with_file_output(settings["file"])
    if settings.get("buffered"):
        config.with_buffering(True)
        if "buffer_size" in settings:
            config.with_buffer_size(settings["buffer_size"])
    # spans rely on logger.profile
    config.with_profiling(True)
    return config


def _preset_settings(preset: str) -> Dict[str, Any]:
    try:
        settings = dict(_PRESETS[preset.lower()])
    except KeyError:
        raise ValueError(
            f"Unknown preset '{preset}'; expected one of {sorted(_PRESETS)}"
        ) from None
    if "file" in settings:
        settings["file"] = _env("LOG_FILE") or settings["file"]
    return settings


def configure(*, config: Optional[Any] = None, preset: Optional[str] = None) -> None:
    """Swap the telelog configuration used by every logger from now on.

    ``config`` adopts a ready ``telelog.Config``; ``preset`` is one of
    ``development``, ``production`` or ``quiet``. With neither, settings are
    re-read from the environment. Cached loggers are dropped.
    """

    global _CONFIG
    if config is not None and preset:
        raise ValueError("configure() takes `config` or `preset`, not both")

    if preset:
        config = _build_config(_preset_settings(preset))
    elif config is None:
        config = _build_config(_settings_from_env())

    _CONFIG = config
    _LOGGERS.clear()


def get_logger(name: Optional[str] = None) -> Any:
    global _CONFIG
    logger_name = name or DEFAULT_LOGGER_NAME
    logger = _LOGGERS.get(logger_name)
    if logger is None:
        if _CONFIG is None:
            _CONFIG = _build_config(_settings_from_env())
        logger = _LOGGERS[logger_name] = tl.Logger.with_config(logger_name, _CONFIG)
    return logger


def _writer(logger: Any, level: str) -> Tuple[Callable[..., Any], bool]:
    """Pick ``<level>_with`` when telelog offers it, else plain ``<level>``."""

    name = str(level).lower()
    structured = getattr(logger, f"{name}_with", None)
    if structured is not None:
        return structured, True
    plain = getattr(logger, name, None)
    if plain is None:
        raise ValueError(f"Unsupported log level '{level}'.")
    return plain, False


def _write(logger: Any, level: str, message: str, payload: Dict[str, Any]) -> None:
    method, structured = _writer(logger, level)
    if structured:
        method(message, _pairs(payload))
    else:
        method(f"{message} {payload}")


def record_event(
    name: str,
    *,
    level: str = "info",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    _write(get_logger(logger_name), level, f"event::{name}", {"event": name, **(data or {})})


@dataclass
class SpanHandle:
    logger: Any
    span_name: str
    component_name: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _text(value)

    def fail(self, reason: str) -> None:
        payload = {"span": self.span_name, **self.metadata, "reason": reason}
        if self.component_name:
            payload["component"] = self.component_name
        _write(self.logger, "error", "span::fail", payload)


@contextmanager
def span(
    name: str,
    *,
    logger_name: Optional[str] = None,
    component: Optional[str | bool] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[SpanHandle]:
    """Profile the block as ``name``; log ``span::fail`` if it raises.

    ``component`` turns on telelog component tracking (``True`` reuses
    ``name``). ``metadata`` entries are logger context while the block runs.
    """

    log = get_logger(logger_name)
    component_name = name if component is True else component or None
    context = {key: _text(value) for key, value in (metadata or {}).items()}

    with ExitStack() as stack:
        for key, value in context.items():
            log.add_context(key, value)
            stack.callback(log.remove_context, key)
        if component_name:
            stack.enter_context(log.track_component(component_name))
        stack.enter_context(log.profile(name))

        handle = SpanHandle(log, name, component_name, dict(context))
        try:
            yield handle
        except Exception as exc:
            handle.fail(str(exc))
            raise


configure()

__all__ = [
    "SpanHandle",
    "configure",
    "get_logger",
    "record_event",
    "span",
]
