from __future__ import annotations

from composable.keymaps import (
    Binding,
    CommandRef,
    KeySequence,
    KeyStroke,
    KeymapRegistry,
    KeymapResolver,
    WhenClause,
)


def make_command(command_id: str) -> CommandRef:
    return CommandRef(id=command_id, handler=lambda *args, **kwargs: None)


def make_binding(
    binding_id: str,
    *,
    keymap: str = "global",
    keys: str = "ctrl+x ctrl+u",
    command_id: str = "core.test",
    when: tuple[WhenClause, ...] = (),
    priority: int = 0,
) -> Binding:
    return Binding(
        id=binding_id,
        keymap=keymap,
        sequence=KeySequence.parse(keys),
        command_id=command_id,
        when=when,
        priority=priority,
    )


def build_registry(bindings: list[Binding]) -> KeymapRegistry:
    registry = KeymapRegistry()
    command_ids = {binding.command_id for binding in bindings}
    for command_id in command_ids:
        registry.register_command(make_command(command_id))
    for binding in bindings:
        registry.register_binding(binding)
    return registry


def test_keystroke_tokens_are_normalized() -> None:
    assert KeyStroke("w", ("CTRL",)).token == "ctrl+w"
    assert KeyStroke.parse("ctrl+alt+\\").token == "alt+ctrl+\\"
    assert KeyStroke.parse("alt++").key == "+"
    assert KeyStroke.parse(",").token == ","


def test_resolver_matches_exact_sequence() -> None:
    binding = make_binding("global.upcase")
    registry = build_registry([binding])
    resolver = KeymapResolver(registry)

    result = resolver.resolve("global", ("ctrl+x", "ctrl+u"))

    assert result.status == "match"
    assert result.match is not None
    assert result.match.binding.id == binding.id


def test_resolver_reports_pending_for_prefix() -> None:
    registry = build_registry([make_binding("global.upcase")])
    resolver = KeymapResolver(registry)

    result = resolver.resolve("global", ("ctrl+x",))

    assert result.status == "pending"
    assert result.next_expected == ("ctrl+u",)


def test_resolver_honors_when_clauses() -> None:
    gating = make_binding(
        "object.f",
        keymap="object",
        keys="f",
        when=(WhenClause("composable_object"),),
        command_id="motion.forward_word",
    )
    registry = build_registry([gating])
    resolver = KeymapResolver(registry)

    miss = resolver.resolve("object", ("f",), context={})
    assert miss.status == "miss"

    hit = resolver.resolve("object", ("f",), context={"composable_object": True})
    assert hit.status == "match"
    assert hit.match is not None
    assert hit.match.binding.id == gating.id


def test_resolve_layers_first_layer_wins() -> None:
    registry = build_registry(
        [
            make_binding("object.f", keymap="object", keys="f", command_id="object.cmd"),
            make_binding("global.f", keymap="global", keys="f", command_id="global.cmd"),
            make_binding("global.g", keymap="global", keys="g", command_id="global.cmd"),
        ]
    )
    resolver = KeymapResolver(registry)

    shadowed = resolver.resolve_layers(("object", "global"), ("f",))
    fallthrough = resolver.resolve_layers(("object", "global"), ("g",))
    missing = resolver.resolve_layers(("object", "global"), ("q",))

    assert shadowed.match is not None and shadowed.match.command.id == "object.cmd"
    assert fallthrough.keymap == "global"
    assert missing.status == "miss"


def test_resolver_prefers_higher_priority() -> None:
    registry = build_registry(
        [
            make_binding("global.low", keys="f", command_id="low", when=(WhenClause("a"),)),
            make_binding(
                "global.high",
                keys="f",
                command_id="high",
                when=(WhenClause("b"),),
                priority=5,
            ),
        ]
    )
    resolver = KeymapResolver(registry)

    result = resolver.resolve("global", ("f",), context={"a": True, "b": True})

    assert result.match is not None
    assert result.match.command.id == "high"


def test_resolver_cache_refreshes_on_revision() -> None:
    registry = build_registry([])
    resolver = KeymapResolver(registry)

    miss = resolver.resolve("global", ("x",))
    assert miss.status == "miss"

    new_binding = make_binding("global.x", keys="x", command_id="core.x")
    registry.register_command(make_command("core.x"))
    registry.register_binding(new_binding)

    match = resolver.resolve("global", ("x",))
    assert match.status == "match"
    assert match.match is not None
    assert match.match.binding.id == new_binding.id
