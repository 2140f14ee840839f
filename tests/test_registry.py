import pytest

from pitgen.config import PassConfig
from pitgen.errors import ConfigurationError
from pitgen.passes.base import GenerationPass, PassRole
from pitgen.passes.bsp import BSPPass
from pitgen.registry import PassRegistry

BUILTINS = [
    "bsp",
    "cellular_automata",
    "connectivity",
    "drunkard_walk",
    "extra_connections",
    "metadata",
    "prefabs",
    "simple_rooms",
    "validation",
]


class Noop(GenerationPass):
    name = "noop"
    default_role = PassRole.MODIFIER

    def execute(self, ctx):
        pass


def test_builtins_are_registered():
    reg = PassRegistry()
    assert reg.names() == BUILTINS


def test_lookup_is_case_insensitive():
    reg = PassRegistry()
    assert reg.is_registered("BSP")
    created = reg.create(PassConfig(pass_type="  Bsp ", priority=7))
    assert isinstance(created, BSPPass)
    assert created.priority == 7


def test_unknown_pass_lists_registered_names():
    reg = PassRegistry()
    with pytest.raises(ConfigurationError) as exc:
        reg.create(PassConfig(pass_type="lava_lakes"))
    message = str(exc.value)
    assert "lava_lakes" in message
    assert ", ".join(BUILTINS) in message


def test_register_unregister_and_reset():
    reg = PassRegistry()
    reg.register("Noop", Noop)
    assert reg.is_registered("noop")
    assert isinstance(reg.create(PassConfig(pass_type="NOOP")), Noop)

    reg.unregister("noop")
    assert not reg.is_registered("noop")

    reg.register("noop", Noop)
    reg.unregister("bsp")
    reg.reset()
    assert reg.names() == BUILTINS


def test_strict_flag_reaches_factory():
    reg = PassRegistry()
    seen = []

    def factory(pass_config, strict):
        seen.append(strict)
        return Noop(pass_config, strict)

    reg.register("noop", factory)
    reg.create(PassConfig(pass_type="noop"), strict=True)
    assert seen == [True]
