from __future__ import annotations

import pytest

from composable.config import ComposableSettings, load_settings


def test_defaults() -> None:
    settings = ComposableSettings()

    assert settings.repeat and settings.twice
    assert not settings.mark_mode
    assert settings.default_object == "composable.mark_line"


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("COMPOSABLE_REPEAT", "off")
    monkeypatch.setenv("COMPOSABLE_MARK_MODE", "yes")
    monkeypatch.setenv("COMPOSABLE_INDENT_WIDTH", "2")
    monkeypatch.setenv("COMPOSABLE_KILL_RING_MAX", "not-a-number")

    settings = load_settings(object_cursor="bar")

    assert settings.repeat is False
    assert settings.mark_mode is True
    assert settings.indent_width == 2
    assert settings.kill_ring_max == 60
    assert settings.object_cursor == "bar"


def test_unknown_override_is_rejected() -> None:
    with pytest.raises(TypeError):
        load_settings(colour="red")


@pytest.mark.parametrize(
    "changes",
    [{"indent_width": -1}, {"kill_ring_max": 0}, {"default_object": ""}],
)
def test_invalid_values_raise(changes) -> None:
    with pytest.raises(ValueError):
        ComposableSettings(**changes)


def test_invalid_number_is_reported(monkeypatch) -> None:
    from composable.runtime import telemetry

    events = []
    monkeypatch.setattr(
        telemetry,
        "record_event",
        lambda name, **kwargs: events.append((name, kwargs["data"])),
    )
    monkeypatch.setenv("COMPOSABLE_INDENT_WIDTH", "wide")

    settings = load_settings()

    assert settings.indent_width == 4
    assert events == [
        (
            "config.invalid",
            {"variable": "COMPOSABLE_INDENT_WIDTH", "value": "wide", "fallback": 4},
        )
    ]
