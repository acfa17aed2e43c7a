"""Structured logging for the editing core, backed by telelog.

Components log through three calls: ``get_logger`` for a named logger,
``record_event`` for one ``event::<name>`` line with key/value data, and
``span`` to profile a block. ``configure`` swaps the telelog config, either
from a preset name or from ``COMPOSABLE_*`` environment variables.
"""

from __future__ import annotations

import os
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, cast

import telelog  # type: ignore[import]

tl = cast(Any, telelog)

ENV_PREFIX = "COMPOSABLE_"
ROOT_LOGGER = os.getenv(f"{ENV_PREFIX}LOGGER", "composable")
PRESETS = ("development", "quiet", "file")

_loggers: Dict[str, Any] = {}
_config: Optional[Any] = None


def env_value(name: str, default: Optional[str] = None) -> Optional[str]:
    """Read ``COMPOSABLE_<name>`` from the environment."""

    return os.getenv(ENV_PREFIX + name, default)


def env_flag(name: str, default: bool) -> bool:
    raw = env_value(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list, tuple, set)):
        return repr(value)
    return str(value)


def _pairs(data: Dict[str, Any]) -> List[Tuple[str, str]]:
    return [(str(key), _text(value)) for key, value in data.items()]


def _from_environment() -> Any:
    config = tl.Config()
    config.with_min_level((env_value("LOG_LEVEL") or "WARNING").upper())
    console = not env_flag("DISABLE_CONSOLE", False)
    config.with_console_output(console)
    if console:
        config.with_colored_output(not env_flag("NO_COLOR", False))
    if env_flag("LOG_JSON", False):
        config.with_json_format(True)
    log_file = env_value("LOG_FILE")
    if log_file:
        config.with_file_output(log_file)
    config.with_profiling(env_flag("PROFILE", True))
    return config


def _from_preset(preset: str) -> Any:
    name = preset.lower()
    if name not in PRESETS:
        raise ValueError(f"Unknown preset '{preset}'.")

    config = tl.Config()
    if name == "development":
        config.with_min_level("DEBUG")
        config.with_console_output(True)
        config.with_colored_output(True)
    elif name == "quiet":
        config.with_min_level("WARNING")
        config.with_console_output(False)
    else:
        # the demo owns the terminal, so this one writes JSON lines to disk
        config.with_min_level("DEBUG")
        config.with_console_output(False)
        config.with_json_format(True)
        config.with_file_output(env_value("LOG_FILE") or "composable.log")
    config.with_profiling(True)
    return config


def configure(*, config: Optional[Any] = None, preset: Optional[str] = None) -> Any:
    """Install a telelog config and drop cached loggers.

    Pass a ready ``telelog.Config`` or the name of one of ``PRESETS``; with
    neither, the config is rebuilt from the environment.
    """

    global _config
    if config is not None and preset is not None:
        raise ValueError("Provide either `config` or `preset`, not both.")
    if preset is not None:
        config = _from_preset(preset)
    _config = config if config is not None else _from_environment()
    _loggers.clear()
    return _config


def get_logger(name: Optional[str] = None) -> Any:
    """Return the cached ``telelog.Logger`` called ``name``."""

    key = name or ROOT_LOGGER
    logger = _loggers.get(key)
    if logger is None:
        config = _config if _config is not None else configure()
        logger = tl.Logger.with_config(key, config)
        _loggers[key] = logger
    return logger


def _emitter(logger: Any, level: str) -> Tuple[Callable[..., Any], bool]:
    """Pick ``<level>_with`` when telelog offers it, else the plain method."""

    name = str(level).lower()
    structured = getattr(logger, f"{name}_with", None)
    if structured is not None:
        return structured, True
    plain = getattr(logger, name, None)
    if plain is None:
        raise ValueError(f"Unsupported log level '{level}'.")
    return plain, False


def _emit(logger: Any, level: str, message: str, data: Dict[str, Any]) -> None:
    method, structured = _emitter(logger, level)
    if structured:
        method(message, _pairs(data))
    else:
        method(f"{message} {data}")


def record_event(
    name: str,
    *,
    level: str = "debug",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    """Log ``event::<name>``; ``data`` travels as key/value pairs."""

    payload = {"event": name}
    if data:
        payload.update(data)
    _emit(get_logger(logger_name), level, f"event::{name}", payload)


@dataclass
class SpanHandle:
    """Yielded by ``span``; metadata added here goes out with a failure."""

    logger: Any
    name: str
    component: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _text(value)

    def fail(self, reason: str) -> None:
        payload: Dict[str, Any] = {"span": self.name, **self.metadata, "reason": reason}
        if self.component:
            payload["component"] = self.component
        _emit(self.logger, "error", "span::fail", payload)


@contextmanager
def span(
    name: str,
    *,
    logger_name: Optional[str] = None,
    component: Optional[str | bool] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[SpanHandle]:
    """Profile the block under ``name``.

    ``metadata`` is pushed as logger context while the block runs. A truthy
    ``component`` also tracks the block as a telelog component, named after
    the span when ``True``.
    """

    logger = get_logger(logger_name)
    component_name = name if component is True else (component or None)
    context = {key: _text(value) for key, value in (metadata or {}).items()}
    for key, value in context.items():
        logger.add_context(key, value)

    handle = SpanHandle(logger, name, component_name, dict(context))
    try:
        with ExitStack() as stack:
            if component_name:
                stack.enter_context(logger.track_component(component_name))
            stack.enter_context(logger.profile(name))
            try:
                yield handle
            except Exception as exc:
                handle.fail(str(exc))
                raise
    finally:
        for key in context:
            logger.remove_context(key)


__all__ = [
    "PRESETS",
    "SpanHandle",
    "configure",
    "env_flag",
    "env_value",
    "get_logger",
    "record_event",
    "span",
]
