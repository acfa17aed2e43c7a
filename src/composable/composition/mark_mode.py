"""Expand-on-set-mark: setting the mark waits for an object to select."""

from __future__ import annotations

from typing import Optional

from composable.host.base import EditorContext
from composable.host.defaults import SET_MARK_COMMAND
from composable.keymaps import CommandRef, KeymapRegistry
from composable.runtime import telemetry

from .state_machine import Composer


class MarkModeInterceptor:
    """Advises the host's set-mark command while enabled.

    With no selection and no pending composition, set-mark enters the
    awaiting state with no action; the object then only grows the selection.
    Every other call falls through to the original command.
    """

    def __init__(
        self,
        composer: Composer,
        registry: KeymapRegistry,
        *,
        command_id: str = SET_MARK_COMMAND,
    ) -> None:
        self._composer = composer
        self._registry = registry
        self._command_id = command_id
        self._original: Optional[CommandRef] = None

    @property
    def enabled(self) -> bool:
        return self._original is not None

    def enable(self) -> None:
        if self._original is not None:
            return
        original = self._registry.get_command(self._command_id)
        self._original = original
        self._registry.register_command(
            CommandRef(
                id=original.id,
                handler=self._advised,
                kind=original.kind,
                description=original.description,
                metadata={**original.metadata, "advised_by": "mark_mode"},
            ),
            replace=True,
        )
        telemetry.record_event(
            "mark_mode.enable", data={"command": self._command_id}, logger_name="composable.composition"
        )

    def disable(self) -> None:
        original = self._original
        if original is None:
            return
        self._original = None
        self._composer.cancel(reason="mark_mode_disabled")
        self._registry.register_command(original, replace=True)
        telemetry.record_event(
            "mark_mode.disable", data={"command": self._command_id}, logger_name="composable.composition"
        )

    def toggle(self) -> bool:
        if self.enabled:
            self.disable()
        else:
            self.enable()
        return self.enabled

    def _advised(self, context: EditorContext, arg: Optional[int]) -> object:
        composer = self._composer
        if (
            arg is None
            and not composer.awaiting
            and not composer.host.selection_active()
        ):
            return composer.begin_expand(arg, command_id=self._command_id)
        if self._original is None:
            raise RuntimeError("Mark mode is not enabled")
        return self._original(context, arg)


__all__ = ["MarkModeInterceptor"]
