"""Trie-based keymap resolution across stacked keymap layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Literal, Mapping, Optional, Sequence

from composable.runtime.telemetry import span

from .models import Binding, CommandRef
from .registry import KeymapRegistry


@dataclass(slots=True)
class TrieNode:
    """Single trie node tracking bindings and child transitions."""

    bindings: list[str] = field(default_factory=list)
    children: Dict[str, "TrieNode"] = field(default_factory=dict)

    def child(self, token: str) -> "TrieNode":
        return self.children.setdefault(token, TrieNode())


@dataclass(slots=True)
class KeymapTrie:
    """Concrete trie built for one keymap layer."""

    keymap: str
    root: TrieNode = field(default_factory=TrieNode)

    def add_binding(self, binding: Binding) -> None:
        node = self.root
        for token in binding.sequence.tokens:
            node = node.child(token)
        node.bindings.append(binding.id)


@dataclass(frozen=True, slots=True)
class ResolutionMatch:
    """Resolved binding paired with its command."""

    binding: Binding
    command: CommandRef


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    """Outcome returned from the resolver."""

    status: Literal["match", "pending", "miss"]
    match: Optional[ResolutionMatch] = None
    consumed: int = 0
    next_expected: tuple[str, ...] = ()
    keymap: Optional[str] = None


class KeymapResolver:
    """Builds per-layer tries and resolves token sequences against them."""

    def __init__(
        self, registry: KeymapRegistry, *, logger_name: str | None = None
    ) -> None:
        self._registry = registry
        self._logger_name = logger_name
        self._cache: Dict[str, tuple[int, KeymapTrie]] = {}

    @property
    def registry(self) -> KeymapRegistry:
        return self._registry

    def resolve(
        self,
        keymap: str,
        tokens: Sequence[str],
        *,
        context: Optional[Mapping[str, bool]] = None,
    ) -> ResolutionResult:
        flags = context or {}
        keys = tuple(tokens)
        with span(
            "keymaps::resolve",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"keymap": keymap, "length": len(keys)},
        ) as handle:
            node = self._walk(self._ensure_trie(keymap).root, keys)
            match = self._select_match(node, flags) if node is not None else None
            expected = (
                self._live_children(node, flags)
                if node is not None and match is None
                else ()
            )
            if match is not None:
                handle.add_metadata("binding_id", match.binding.id)
                result = ResolutionResult(
                    status="match", match=match, consumed=len(keys), keymap=keymap
                )
            elif expected:
                result = ResolutionResult(
                    status="pending",
                    consumed=len(keys),
                    next_expected=expected,
                    keymap=keymap,
                )
            else:
                result = ResolutionResult(status="miss", keymap=keymap)
            handle.add_metadata("status", result.status)
            return result

    def resolve_layers(
        self,
        keymaps: Sequence[str],
        tokens: Sequence[str],
        *,
        context: Optional[Mapping[str, bool]] = None,
    ) -> ResolutionResult:
        """Resolve against ``keymaps`` in precedence order.

        The first layer that matches or holds a pending prefix decides.
        """

        for keymap in keymaps:
            result = self.resolve(keymap, tokens, context=context)
            if result.status != "miss":
                return result
        return ResolutionResult(status="miss")

    def reset(self, keymap: Optional[str] = None) -> None:
        if keymap is None:
            self._cache.clear()
        else:
            self._cache.pop(keymap, None)

    def _ensure_trie(self, keymap: str) -> KeymapTrie:
        revision = self._registry.revision()
        cached = self._cache.get(keymap)
        if cached and cached[0] == revision:
            return cached[1]

        trie = KeymapTrie(keymap=keymap)
        for binding in self._registry.iter_bindings(keymap):
            trie.add_binding(binding)
        self._cache[keymap] = (revision, trie)
        return trie

    @staticmethod
    def _walk(node: TrieNode, keys: Sequence[str]) -> Optional[TrieNode]:
        for key in keys:
            child = node.children.get(key)
            if child is None:
                return None
            node = child
        return node

    def _select_match(
        self, node: TrieNode, context: Mapping[str, bool]
    ) -> Optional[ResolutionMatch]:
        if not node.bindings:
            return None

        matches: list[ResolutionMatch] = []
        for binding_id in node.bindings:
            binding = self._registry.get_binding(binding_id)
            if not binding.allows(context):
                continue
            command = self._registry.get_command(binding.command_id)
            matches.append(ResolutionMatch(binding=binding, command=command))

        if not matches:
            return None

        matches.sort(key=lambda m: (-m.binding.priority, m.binding.id))
        return matches[0]

    def _live_children(
        self, node: TrieNode, context: Mapping[str, bool]
    ) -> tuple[str, ...]:
        """Next tokens that still lead to a binding allowed in ``context``."""

        live: list[str] = []
        for token, child in sorted(node.children.items()):
            stack = [child]
            while stack:
                current = stack.pop()
                if any(
                    self._registry.get_binding(binding_id).allows(context)
                    for binding_id in current.bindings
                ):
                    live.append(token)
                    break
                stack.extend(current.children.values())
        return tuple(live)


__all__ = [
    "KeymapResolver",
    "ResolutionMatch",
    "ResolutionResult",
]
