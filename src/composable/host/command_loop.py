"""Command loop: resolves keys, runs commands, and notifies observers."""

from __future__ import annotations

from itertools import count
from typing import Callable, List, Optional, Sequence

from composable.keymaps import (
    Binding,
    CommandRef,
    KeymapRegistry,
    KeymapResolver,
    KeySequence,
)
from composable.runtime import telemetry

from .base import CommandEvent, DispatchResult, EditorContext, KeyInput
from .defaults import QUIT_COMMAND, UNDEFINED_COMMAND, load_default_keymaps
from .keymap_helpers import key_to_token, keymap_flag_context
from .prefix_arg import PrefixArgument

PostCommandHook = Callable[[CommandEvent], None]

TRANSIENT_KEYMAP = "transient"
QUIT_TOKEN = "ctrl+g"


class TransientHandle:
    """One live transient binding; ``dispose`` removes it exactly once."""

    def __init__(
        self,
        loop: "CommandLoop",
        *,
        key: str,
        binding_id: str,
        command_id: str,
        on_expire: Optional[Callable[[], None]],
    ) -> None:
        self.key = key
        self.binding_id = binding_id
        self.command_id = command_id
        self._loop = loop
        self._on_expire = on_expire
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._loop._drop_transient(self)
        if self._on_expire is not None:
            self._on_expire()

    def __enter__(self) -> "TransientHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.dispose()
        return False


class CommandLoop:
    """Owns key resolution state and runs one command per complete sequence.

    Keymap layers are consulted in order: the transient layer (when a
    transient binding is armed), then ``keymaps`` as given.
    """

    def __init__(
        self,
        context: EditorContext,
        *,
        keymap_registry: KeymapRegistry | None = None,
        keymap_resolver: KeymapResolver | None = None,
        keymaps: Sequence[str] = ("object", "global"),
        load_defaults: bool = True,
    ) -> None:
        self.context = context
        self.logger = telemetry.get_logger("composable.host")
        self.keymap_registry = keymap_registry or KeymapRegistry(
            logger_name="composable.keymaps"
        )
        if load_defaults and keymap_registry is None:
            load_default_keymaps(self.keymap_registry)
        self.keymap_resolver = keymap_resolver or KeymapResolver(
            self.keymap_registry, logger_name="composable.keymaps"
        )
        self.keymaps = tuple(keymaps)
        self.prefix = PrefixArgument()
        self.this_command: Optional[str] = None
        self.last_command: Optional[str] = None
        self._pending: List[str] = []
        self._post_hooks: List[PostCommandHook] = []
        self._transient: Optional[TransientHandle] = None
        self._transient_ids = count(1)
        self.context.extras.setdefault("keymap_registry", self.keymap_registry)
        self.context.extras.setdefault("keymap_resolver", self.keymap_resolver)
        self.context.extras.setdefault("keymap_flags", {})
        self.context.extras.setdefault("command_loop", self)

    @property
    def pending_keys(self) -> tuple[str, ...]:
        return tuple(self._pending)

    @property
    def transient(self) -> Optional[TransientHandle]:
        return self._transient

    def active_keymaps(self) -> tuple[str, ...]:
        if self._transient is not None:
            return (TRANSIENT_KEYMAP, *self.keymaps)
        return self.keymaps

    def handle_key(self, key: KeyInput) -> DispatchResult:
        token = key_to_token(key)
        self._pending.append(token)

        if token == QUIT_TOKEN and len(self._pending) > 1:
            keys = tuple(self._pending)
            self._pending.clear()
            return self._run(
                self.keymap_registry.get_command(QUIT_COMMAND), keys, None
            )

        result = self.keymap_resolver.resolve_layers(
            self.active_keymaps(),
            tuple(self._pending),
            context=keymap_flag_context(self.context),
        )

        if result.status == "match" and result.match:
            keys = tuple(self._pending)
            self._pending.clear()
            return self._run(result.match.command, keys, result.keymap)

        if result.status == "pending":
            return DispatchResult(
                consumed=True,
                status="pending",
                message=" ".join(self._pending),
                next_expected=result.next_expected,
            )

        keys = tuple(self._pending)
        self._pending.clear()
        if self.keymap_registry.has_command(UNDEFINED_COMMAND):
            return self._run(
                self.keymap_registry.get_command(UNDEFINED_COMMAND), keys, None
            )
        self._expire_transient()
        self.prefix.reset()
        return DispatchResult(consumed=False, status="miss", message=" ".join(keys))

    def invoke(self, command_id: str, arg: Optional[int] = None) -> object:
        """Run a command programmatically, without hooks or key bookkeeping."""

        command = self.keymap_registry.get_command(command_id)
        with telemetry.span(
            f"invoke::{command_id}",
            logger_name="composable.host",
            metadata={"arg": arg},
        ):
            return command(self.context, arg)

    def add_post_command_hook(self, hook: PostCommandHook) -> Callable[[], None]:
        self._post_hooks.append(hook)

        def remove() -> None:
            if hook in self._post_hooks:
                self._post_hooks.remove(hook)

        return remove

    def arm_once(
        self,
        key: str,
        handler: Callable[[Optional[int]], object],
        on_expire: Optional[Callable[[], None]] = None,
        *,
        description: str = "",
    ) -> TransientHandle:
        """Bind ``key`` in the transient layer until a foreign command runs.

        Only one transient binding exists at a time; arming a new one expires
        the previous one first.
        """

        self._expire_transient()
        serial = next(self._transient_ids)
        command_id = f"transient.{serial}"
        binding_id = f"transient.{serial}.{key}"
        self.keymap_registry.register_command(
            CommandRef(
                id=command_id,
                handler=lambda _context, arg: handler(arg),
                description=description,
            ),
            replace=True,
        )
        self.keymap_registry.register_binding(
            Binding(
                id=binding_id,
                keymap=TRANSIENT_KEYMAP,
                sequence=KeySequence.from_strings(key),
                command_id=command_id,
                description=description,
            ),
            replace=True,
        )
        handle = TransientHandle(
            self,
            key=key,
            binding_id=binding_id,
            command_id=command_id,
            on_expire=on_expire,
        )
        self._transient = handle
        telemetry.record_event(
            "transient.arm",
            data={"key": key, "command": command_id},
            logger_name="composable.host",
        )
        return handle

    def close(self) -> None:
        self._expire_transient()
        self._post_hooks.clear()
        self._pending.clear()
        self.prefix.reset()

    def _run(
        self, command: CommandRef, keys: tuple[str, ...], keymap: Optional[str]
    ) -> DispatchResult:
        if (
            self._transient is not None
            and keymap != TRANSIENT_KEYMAP
            and command.kind != "argument"
        ):
            self._expire_transient()

        arg = self.prefix.value
        if command.kind != "argument":
            self.prefix.reset()
        self.this_command = command.id
        self.context.extras["this_command"] = command.id
        self.context.extras["this_command_keys"] = keys

        with telemetry.span(
            f"command::{command.id}",
            logger_name="composable.host",
            component="dispatch",
            metadata={"keys": " ".join(keys), "arg": arg},
        ):
            outcome = command(self.context, arg)

        event = CommandEvent(
            command_id=command.id,
            kind=command.kind,
            arg=arg,
            keys=keys,
            keymap=keymap,
        )
        for hook in list(self._post_hooks):
            hook(event)

        if command.kind != "argument":
            self.last_command = command.id
            self.context.extras["last_command"] = command.id
        return DispatchResult(
            consumed=True,
            status=command.kind,
            command_id=command.id,
            message=outcome if isinstance(outcome, str) else None,
        )

    def _expire_transient(self) -> None:
        if self._transient is not None:
            self._transient.dispose()

    def _drop_transient(self, handle: TransientHandle) -> None:
        self.keymap_registry.unregister_binding(handle.binding_id)
        self.keymap_registry.unregister_command(handle.command_id)
        if self._transient is handle:
            self._transient = None
        telemetry.record_event(
            "transient.expire",
            data={"key": handle.key, "command": handle.command_id},
            logger_name="composable.host",
        )


__all__ = [
    "CommandLoop",
    "PostCommandHook",
    "QUIT_TOKEN",
    "TRANSIENT_KEYMAP",
    "TransientHandle",
]
