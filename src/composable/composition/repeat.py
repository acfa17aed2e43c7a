"""One-key replay of the last motion and action."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from composable.host.prefix_arg import direction_of
from composable.host.protocol import Action, Disposable, EditorHost
from composable.runtime import telemetry

from .anchors import AnchorTracker


@dataclass(slots=True)
class RepeatBinding:
    """What a press of ``key`` replays while the binding is armed."""

    key: str
    motion: str
    action: Optional[Action]
    arg: Optional[int] = None
    expand: bool = False
    handle: Optional[Disposable] = None
    fired: int = 0


class RepeatArming:
    """Arms, replays, and expires the single live repeat binding.

    The excursion and origin anchors live in the shared ``AnchorTracker`` and
    are released whenever the binding expires.
    """

    def __init__(
        self,
        host: EditorHost,
        anchors: AnchorTracker,
        *,
        logger_name: str = "composable.repeat",
    ) -> None:
        self._host = host
        self._anchors = anchors
        self._logger_name = logger_name
        self._binding: Optional[RepeatBinding] = None
        self._replaying = False

    @property
    def binding(self) -> Optional[RepeatBinding]:
        return self._binding

    @property
    def armed(self) -> bool:
        return self._binding is not None

    @property
    def replaying(self) -> bool:
        return self._replaying

    def arm(
        self,
        *,
        key: str,
        motion: str,
        action: Optional[Action],
        arg: Optional[int] = None,
        expand: bool = False,
    ) -> RepeatBinding:
        """Bind ``key`` to replay ``motion`` then ``action``.

        The excursion must already be tracked; arming replaces any binding
        that is still live without releasing the new excursion.
        """

        self._discard_quietly()
        binding = RepeatBinding(
            key=key, motion=motion, action=action, arg=arg, expand=expand
        )
        self._binding = binding
        binding.handle = self._host.arm_once(
            key,
            lambda repeat_arg: self.fire(binding, repeat_arg),
            lambda: self._expired(binding),
        )
        telemetry.record_event(
            "repeat.arm",
            data={
                "key": key,
                "motion": motion,
                "action": action.id if action is not None else None,
                "expand": expand,
            },
            logger_name=self._logger_name,
        )
        return binding

    def fire(self, binding: RepeatBinding, arg: Optional[int]) -> None:
        if binding is not self._binding:
            return
        excursion = self._anchors.excursion
        origin = self._anchors.origin
        if excursion is None or origin is None:
            self.expire()
            return

        direction = direction_of(arg)
        host = self._host
        with self._replay(), telemetry.span(
            "repeat::fire",
            logger_name=self._logger_name,
            component="repeat",
            metadata={"motion": binding.motion, "direction": direction},
        ):
            host.set_position(excursion.position)
            if binding.expand and host.selection_anchor() is not None:
                host.push_anchor(host.selection_anchor())
            else:
                host.push_anchor(host.current_position())
            host.invoke(binding.motion, direction)
            self._anchors.advance_excursion(host.current_position())

            if binding.action is not None:
                anchor = host.selection_anchor()
                cursor = host.current_position()
                if anchor is None:
                    anchor = cursor
                binding.action.apply(min(anchor, cursor), max(anchor, cursor), binding.arg)
                if not binding.action.keep_point:
                    host.set_position(origin.position)
                host.deactivate_selection()

        binding.fired += 1
        telemetry.record_event(
            "repeat.fire",
            data={"key": binding.key, "direction": direction, "count": binding.fired},
            logger_name=self._logger_name,
        )

    def expire(self) -> None:
        binding = self._binding
        if binding is None:
            return
        if binding.handle is not None:
            # Disposing runs ``_expired`` which clears the binding and anchors.
            binding.handle.dispose()
        if self._binding is binding:
            self._expired(binding)

    def _expired(self, binding: RepeatBinding) -> None:
        if binding is not self._binding:
            return
        self._binding = None
        self._anchors.release_repeat()
        telemetry.record_event(
            "repeat.expire",
            data={"key": binding.key, "count": binding.fired},
            logger_name=self._logger_name,
        )

    def _discard_quietly(self) -> None:
        binding = self._binding
        if binding is None:
            return
        self._binding = None
        if binding.handle is not None:
            binding.handle.dispose()

    @contextmanager
    def _replay(self) -> Iterator[None]:
        self._replaying = True
        try:
            yield
        finally:
            self._replaying = False


__all__ = ["RepeatArming", "RepeatBinding"]
