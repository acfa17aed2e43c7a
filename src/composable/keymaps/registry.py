"""Command and binding storage shared by every keymap layer."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Dict, Iterable, Iterator, Optional, Sequence, Set

from composable.runtime.telemetry import SpanHandle, span

from .models import Binding, CommandRef


@dataclass(slots=True)
class RegistryStats:
    command_count: int
    binding_count: int
    keymaps: tuple[str, ...]


class KeymapConflictError(RuntimeError):
    """A binding would shadow another one in the same layer and context."""

    def __init__(self, binding: Binding, conflicts: Iterable[Binding]):
        self.binding = binding
        self.conflicts = tuple(conflicts)
        names = ", ".join(conflict.id for conflict in self.conflicts)
        super().__init__(f"Binding '{binding.id}' conflicts with {names}")


class UnknownCommandError(KeyError):
    def __init__(self, command_id: str) -> None:
        super().__init__(f"Command '{command_id}' is not registered")
        self.command_id = command_id


class KeymapRegistry:
    """Commands by id, and bindings indexed by layer then key signature.

    ``revision`` counts binding changes so resolvers can drop their caches;
    the transient layer makes those changes frequent.
    """

    def __init__(self, *, logger_name: str | None = None) -> None:
        self._commands: Dict[str, CommandRef] = {}
        self._bindings: Dict[str, Binding] = {}
        self._layers: Dict[str, Dict[str, Set[str]]] = {}
        self._logger_name = logger_name
        self._revision = 0

    def revision(self) -> int:
        return self._revision

    # commands

    def has_command(self, command_id: str) -> bool:
        return command_id in self._commands

    def get_command(self, command_id: str) -> CommandRef:
        command = self._commands.get(command_id)
        if command is None:
            raise UnknownCommandError(command_id)
        return command

    def register_command(
        self, command: CommandRef, *, replace: bool = False
    ) -> CommandRef:
        """Store ``command``; with ``replace`` an existing id is overwritten.

        Replacing keeps every binding that points at the id, which is how a
        command gets advised without touching its keys.
        """

        with self._span("register_command", command_id=command.id):
            if command.id in self._commands and not replace:
                raise ValueError(f"Command '{command.id}' already registered")
            self._commands[command.id] = command
        return command

    def unregister_command(self, command_id: str) -> Optional[CommandRef]:
        command = self._commands.pop(command_id, None)
        if command is not None:
            for binding in self.bindings_for(command_id):
                self.unregister_binding(binding.id)
        return command

    # bindings

    def get_binding(self, binding_id: str) -> Binding:
        try:
            return self._bindings[binding_id]
        except KeyError as exc:
            raise KeyError(f"Binding '{binding_id}' is not registered") from exc

    def register_binding(self, binding: Binding, *, replace: bool = False) -> Binding:
        with self._span(
            "register_binding", binding_id=binding.id, keymap=binding.keymap
        ) as handle:
            self._require_command(binding, handle)
            conflicts = self.detect_conflicts(binding, ignore=(binding.id,))
            if not replace:
                if conflicts:
                    handle.add_metadata("conflicts", [c.id for c in conflicts])
                    raise KeymapConflictError(binding, conflicts)
                if binding.id in self._bindings:
                    raise ValueError(f"Binding id '{binding.id}' already registered")
            else:
                stale = list(conflicts)
                if binding.id in self._bindings:
                    stale.append(self._bindings[binding.id])
                for old in stale:
                    self._unindex(old)
                    self._bindings.pop(old.id, None)

            self._bindings[binding.id] = binding
            self._index(binding)
        return binding

    def unregister_binding(self, binding_id: str) -> Optional[Binding]:
        with self._span("unregister_binding", binding_id=binding_id):
            binding = self._bindings.pop(binding_id, None)
            if binding is not None:
                self._unindex(binding)
        return binding

    def update_binding(self, binding_id: str, **changes: object) -> Binding:
        with self._span("update_binding", binding_id=binding_id) as handle:
            current = self._bindings.get(binding_id)
            if current is None:
                handle.fail("missing_binding")
                raise KeyError(f"Binding '{binding_id}' not found")

            updated = replace(current, **changes)
            self._require_command(updated, handle)
            self._unindex(current)
            conflicts = self.detect_conflicts(updated, ignore=(binding_id,))
            if conflicts:
                self._index(current)
                handle.add_metadata("conflicts", [c.id for c in conflicts])
                raise KeymapConflictError(updated, conflicts)

            self._bindings[binding_id] = updated
            self._index(updated)
        return updated

    def iter_bindings(self, keymap: Optional[str] = None) -> Iterator[Binding]:
        if keymap is None:
            yield from self._bindings.values()
            return
        for ids in self._layers.get(keymap, {}).values():
            for binding_id in sorted(ids):
                yield self._bindings[binding_id]

    def bindings_for(self, command_id: str) -> list[Binding]:
        return [
            binding
            for binding in self._bindings.values()
            if binding.command_id == command_id
        ]

    def stats(self) -> RegistryStats:
        return RegistryStats(
            command_count=len(self._commands),
            binding_count=len(self._bindings),
            keymaps=tuple(sorted(self._layers)),
        )

    def detect_conflicts(
        self, binding: Binding, *, ignore: Sequence[str] | None = None
    ) -> list[Binding]:
        skipped = set(ignore or ())
        same_keys = self._layers.get(binding.keymap, {}).get(binding.key_signature, ())
        return [
            self._bindings[other_id]
            for other_id in sorted(same_keys)
            if other_id not in skipped
            and _contexts_overlap(binding, self._bindings[other_id])
        ]

    # internals

    def _require_command(self, binding: Binding, handle: SpanHandle) -> None:
        if binding.command_id not in self._commands:
            handle.add_metadata("missing_command", binding.command_id)
            raise UnknownCommandError(binding.command_id)

    def _index(self, binding: Binding) -> None:
        layer = self._layers.setdefault(binding.keymap, {})
        layer.setdefault(binding.key_signature, set()).add(binding.id)
        self._revision += 1

    def _unindex(self, binding: Binding) -> None:
        layer = self._layers.get(binding.keymap, {})
        ids = layer.get(binding.key_signature)
        if ids is not None:
            ids.discard(binding.id)
            if not ids:
                del layer[binding.key_signature]
        if not layer:
            self._layers.pop(binding.keymap, None)
        self._revision += 1

    @contextmanager
    def _span(self, operation: str, **metadata: object) -> Iterator[SpanHandle]:
        with span(
            f"keymaps::{operation}",
            logger_name=self._logger_name,
            component="keymaps",
            metadata=metadata,
        ) as handle:
            yield handle


def _contexts_overlap(left: Binding, right: Binding) -> bool:
    """Two bindings clash unless some flag is required with opposite values.

    A gated binding and an ungated one on the same keys do not clash: the
    gated one wins while its flag holds.
    """

    if not left.when and not right.when:
        return True
    if not left.when or not right.when:
        return False
    right_map = right.when_map
    for flag, expected in left.when_map.items():
        if flag in right_map and right_map[flag] != expected:
            return False
    return left.when_map == right_map


__all__ = [
    "KeymapConflictError",
    "KeymapRegistry",
    "RegistryStats",
    "UnknownCommandError",
]
