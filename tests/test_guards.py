"""Tests for tick_ability.guards — AbilityGuards registry."""
from __future__ import annotations

import pytest

from tick_ability.controller import AbilityController
from tick_ability.guards import AbilityGuards
from tick_ability.registry import AbilityRegistry
from tick_ability.types import AbilityDef, CooldownPolicy, UnknownGuard


class TestAbilityGuards:
    def test_register_and_check(self) -> None:
        guards = AbilityGuards()
        guards.register("is_hero", lambda actor, ctl: actor == "hero")
        controller = AbilityController(AbilityRegistry())

        assert guards.check("is_hero", "hero", controller) is True
        assert guards.check("is_hero", "goblin", controller) is False

    def test_check_unregistered_raises(self) -> None:
        guards = AbilityGuards()
        with pytest.raises(KeyError):
            guards.check("missing", "hero", AbilityController(AbilityRegistry()))

    def test_overwrite(self) -> None:
        guards = AbilityGuards()
        guards.register("g", lambda actor, ctl: False)
        guards.register("g", lambda actor, ctl: True)
        assert guards.check("g", "hero", AbilityController(AbilityRegistry()))

    def test_has_and_names(self) -> None:
        guards = AbilityGuards()
        guards.register("a", lambda actor, ctl: True)
        guards.register("b", lambda actor, ctl: True)
        assert guards.has("a")
        assert not guards.has("c")
        assert guards.names() == ["a", "b"]

    def test_guard_can_query_pools(self) -> None:
        guards = AbilityGuards()
        guards.register(
            "above_half_mana",
            lambda actor, ctl: ctl.pools.current(actor, "mana")
            >= ctl.pools.maximum(actor, "mana") / 2,
        )
        controller = AbilityController(AbilityRegistry(), guards=guards)
        controller.add_actor("hero", {"mana": {"maximum": 100.0, "current": 40.0}})

        assert not guards.check("above_half_mana", "hero", controller)
        controller.pools.credit("hero", "mana", 10.0)
        assert guards.check("above_half_mana", "hero", controller)

    def test_unregistered_in_first_seen_order(self) -> None:
        guards = AbilityGuards()
        guards.register("grounded", lambda actor, ctl: True)
        assert guards.unregistered(["rooted", "grounded", "silenced", "rooted"]) == [
            "rooted",
            "silenced",
        ]
        assert guards.unregistered([]) == []

    def test_first_failing_stops_at_first_refusal(self) -> None:
        calls: list[str] = []
        guards = AbilityGuards()

        def recording(name: str, verdict: bool):
            def guard(actor: str, ctl: AbilityController) -> bool:
                calls.append(name)
                return verdict

            return guard

        guards.register("a", recording("a", True))
        guards.register("b", recording("b", False))
        guards.register("c", recording("c", False))
        defn = AbilityDef("blink", CooldownPolicy(), conditions=("a", "b", "c"))
        controller = AbilityController(AbilityRegistry())

        assert guards.first_failing(defn, "hero", controller) == "b"
        assert calls == ["a", "b"]
        assert guards.first_failing(AbilityDef("wait", CooldownPolicy()), "hero", controller) is None


class TestValidation:
    def test_controller_rejects_unregistered_condition(self) -> None:
        registry = AbilityRegistry()
        registry.register("strike")
        registry.register("dash", conditions=["grounded", "not_rooted"])
        guards = AbilityGuards()
        guards.register("grounded", lambda actor, ctl: True)

        with pytest.raises(UnknownGuard) as excinfo:
            AbilityController(registry, guards=guards)

        assert excinfo.value.ability_id == "dash"
        assert excinfo.value.names == ["not_rooted"]

    def test_unknown_guard_is_value_error(self) -> None:
        registry = AbilityRegistry()
        registry.register("dash", conditions=["grounded"])
        with pytest.raises(ValueError, match="grounded"):
            AbilityController(registry, guards=AbilityGuards())

    def test_all_conditions_registered(self) -> None:
        registry = AbilityRegistry()
        registry.register("dash", conditions=["grounded"])
        guards = AbilityGuards()
        guards.register("grounded", lambda actor, ctl: True)
        controller = AbilityController(registry, guards=guards)
        controller.add_actor("hero")
        assert controller.try_trigger("hero", "dash")
