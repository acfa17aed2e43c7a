import pytest

from composable.host.defaults import load_default_keymaps
from composable.keymaps import (
    Binding,
    CommandRef,
    KeySequence,
    KeymapConflictError,
    KeymapRegistry,
    UnknownCommandError,
    WhenClause,
)


def make_command(command_id: str = "core.test", kind: str = "command") -> CommandRef:
    return CommandRef(id=command_id, handler=lambda *args, **kwargs: None, kind=kind)


def make_binding(
    *,
    binding_id: str,
    keymap: str = "global",
    keys: str = "ctrl+x ctrl+s",
    command_id: str = "core.test",
    when: tuple[WhenClause, ...] = (),
) -> Binding:
    return Binding(
        id=binding_id,
        keymap=keymap,
        sequence=KeySequence.parse(keys),
        command_id=command_id,
        when=when,
    )


def test_register_binding_success() -> None:
    registry = KeymapRegistry()
    registry.register_command(make_command())
    binding = make_binding(binding_id="global.save")

    registry.register_binding(binding)

    assert registry.stats().binding_count == 1
    assert list(registry.iter_bindings(keymap="global")) == [binding]


def test_register_binding_requires_command() -> None:
    registry = KeymapRegistry()

    with pytest.raises(UnknownCommandError) as excinfo:
        registry.register_binding(make_binding(binding_id="global.save"))

    assert excinfo.value.command_id == "core.test"


def test_register_binding_conflict_detection() -> None:
    registry = KeymapRegistry()
    registry.register_command(make_command())
    registry.register_binding(make_binding(binding_id="global.save"))

    with pytest.raises(KeymapConflictError) as excinfo:
        registry.register_binding(make_binding(binding_id="global.save.duplicate"))

    assert [b.id for b in excinfo.value.conflicts] == ["global.save"]


def test_same_keys_in_other_keymap_do_not_conflict() -> None:
    registry = KeymapRegistry()
    registry.register_command(make_command())
    registry.register_binding(make_binding(binding_id="global.f", keys="f"))
    registry.register_binding(
        make_binding(binding_id="object.f", keymap="object", keys="f")
    )

    assert registry.stats().keymaps == ("global", "object")


def test_register_binding_non_overlapping_when() -> None:
    registry = KeymapRegistry()
    registry.register_command(make_command())

    registry.register_binding(
        make_binding(binding_id="awaiting", when=(WhenClause("composable_object"),))
    )
    registry.register_binding(
        make_binding(
            binding_id="idle", when=(WhenClause.parse("!composable_object"),)
        )
    )

    assert registry.stats().binding_count == 2


def test_register_binding_with_replace() -> None:
    registry = KeymapRegistry()
    registry.register_command(make_command())

    first = make_binding(binding_id="binding")
    second = make_binding(binding_id="binding")

    registry.register_binding(first)
    registry.register_binding(second, replace=True)

    assert list(registry.iter_bindings()) == [second]


def test_update_binding_changes_sequence() -> None:
    registry = KeymapRegistry()
    registry.register_command(make_command())
    registry.register_binding(make_binding(binding_id="binding"))

    updated = registry.update_binding(
        "binding", sequence=KeySequence.parse("ctrl+x ctrl+w"), description="write"
    )

    assert updated.sequence.tokens == ("ctrl+x", "ctrl+w")
    assert updated.description == "write"


def test_unregister_command_drops_its_bindings() -> None:
    registry = KeymapRegistry()
    registry.register_command(make_command())
    registry.register_binding(make_binding(binding_id="binding"))
    before = registry.revision()

    removed = registry.unregister_command("core.test")

    assert removed is not None
    assert registry.stats().binding_count == 0
    assert registry.revision() > before


def test_load_default_keymaps_registers_global_layer() -> None:
    registry = KeymapRegistry()

    load_default_keymaps(registry)

    binding = registry.get_binding("global.forward_word")
    assert binding.sequence.tokens == ("alt+f",)
    assert registry.get_command("motion.forward_word").kind == "motion"
    assert registry.get_command("core.universal_argument").kind == "argument"


def test_load_default_keymaps_include_filters() -> None:
    registry = KeymapRegistry()

    load_default_keymaps(
        registry,
        include_commands=("motion.forward_word",),
        include_bindings=("global.forward_word", "global.backward_word"),
    )

    # backward_word is skipped because its command was filtered out
    assert registry.stats().binding_count == 1
    assert registry.stats().command_count == 1


def test_load_default_keymaps_extra_bindings() -> None:
    registry = KeymapRegistry()
    extra = Binding(
        id="global.forward_word_alt",
        keymap="global",
        sequence=KeySequence.parse("ctrl+right"),
        command_id="motion.forward_word",
    )

    load_default_keymaps(registry, extra_bindings=(extra,))

    assert registry.bindings_for("motion.forward_word") == [
        registry.get_binding("global.forward_word"),
        extra,
    ]
