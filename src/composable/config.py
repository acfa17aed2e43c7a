"""Session settings for composable editing."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any

from composable.runtime import telemetry
from composable.runtime.telemetry import env_flag, env_value


@dataclass(frozen=True, slots=True)
class ComposableSettings:
    """Knobs read once when a session is created."""

    repeat: bool = True
    twice: bool = True
    mark_mode: bool = False
    object_cursor: str = "hbar"
    indicator_label: str = "OBJECT"
    indicator_color: str | None = "#6EACDA"
    default_object: str = "composable.mark_line"
    comment_prefix: str = "# "
    indent_width: int = 4
    kill_ring_max: int = 60

    def __post_init__(self) -> None:
        if self.indent_width < 0:
            raise ValueError("indent_width cannot be negative")
        if self.kill_ring_max <= 0:
            raise ValueError("kill_ring_max must be positive")
        if not self.default_object:
            raise ValueError("default_object cannot be empty")

    def with_overrides(self, **changes: Any) -> "ComposableSettings":
        return replace(self, **changes)


def _env_int(name: str, fallback: int) -> int:
    raw = env_value(name)
    if raw is None:
        return fallback
    try:
        return int(raw)
    except ValueError:
        telemetry.record_event(
            "config.invalid",
            level="warning",
            data={
                "variable": telemetry.ENV_PREFIX + name,
                "value": raw,
                "fallback": fallback,
            },
            logger_name="composable.config",
        )
        return fallback


def load_settings(**overrides: Any) -> ComposableSettings:
    """Build settings from ``COMPOSABLE_*`` variables, then apply overrides."""

    defaults = ComposableSettings()
    color = env_value("INDICATOR_COLOR", defaults.indicator_color or "")
    settings = ComposableSettings(
        repeat=env_flag("REPEAT", defaults.repeat),
        twice=env_flag("TWICE", defaults.twice),
        mark_mode=env_flag("MARK_MODE", defaults.mark_mode),
        object_cursor=env_value("OBJECT_CURSOR", defaults.object_cursor)
        or defaults.object_cursor,
        indicator_color=color or None,
        default_object=env_value("DEFAULT_OBJECT", defaults.default_object)
        or defaults.default_object,
        comment_prefix=env_value("COMMENT_PREFIX", defaults.comment_prefix)
        or defaults.comment_prefix,
        indent_width=_env_int("INDENT_WIDTH", defaults.indent_width),
        kill_ring_max=_env_int("KILL_RING_MAX", defaults.kill_ring_max),
    )
    known = {item.name for item in fields(ComposableSettings)}
    unknown = set(overrides) - known
    if unknown:
        raise TypeError(f"Unknown settings: {sorted(unknown)}")
    return settings.with_overrides(**overrides) if overrides else settings


__all__ = ["ComposableSettings", "load_settings"]
