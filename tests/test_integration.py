"""Integration scenarios: registry + controller + tick driver together."""
from __future__ import annotations

from enum import Enum, auto

import pytest

from tick_ability import (
    AbilityController,
    AbilityGuards,
    AbilityRegistry,
    CooldownPolicy,
    TickDriver,
    TriggerFailure,
    UnknownAbility,
)


class Spell(Enum):
    FIREBALL = auto()
    BLINK = auto()


class Res(Enum):
    MANA = auto()


class TestFireballScenario:
    def test_cast_then_recover(self) -> None:
        registry = AbilityRegistry()
        registry.register("fireball", CooldownPolicy(base_duration=2.0), {"mana": 30})
        controller = AbilityController(registry)
        controller.add_actor(
            "mage",
            {"mana": {"maximum": 100.0, "current": 50.0, "regen_per_second": 10.0}},
        )
        driver = TickDriver.for_controller(controller)

        assert controller.try_trigger("mage", "fireball")
        assert controller.pools.current("mage", "mana") == 20.0
        assert not controller.is_ready("mage", "fireball")

        driver.advance_all(1.0)
        assert not controller.is_ready("mage", "fireball")
        assert controller.pools.current("mage", "mana") == 30.0

        driver.advance_all(1.0)
        assert controller.is_ready("mage", "fireball")
        assert controller.pools.current("mage", "mana") == 40.0

        assert controller.try_trigger("mage", "fireball")
        assert controller.pools.current("mage", "mana") == 10.0


class TestInsufficientManaScenario:
    def test_shortfall_reported_and_mana_kept(self) -> None:
        registry = AbilityRegistry()
        registry.register("meteor", CooldownPolicy(base_duration=5.0), {"mana": 60})
        controller = AbilityController(registry)
        controller.add_actor("mage", {"mana": {"maximum": 100.0, "current": 40.0}})

        result = controller.try_trigger("mage", "meteor")

        assert result.failure is TriggerFailure.INSUFFICIENT_RESOURCE
        assert result.kind == "mana"
        assert result.shortfall == 20.0
        assert controller.pools.current("mage", "mana") == 40.0
        assert controller.is_ready("mage", "meteor")


class TestUnknownAbilityScenario:
    def test_nothing_touched(self) -> None:
        registry = AbilityRegistry()
        registry.register("fireball", CooldownPolicy(base_duration=2.0), {"mana": 30})
        controller = AbilityController(registry)
        controller.add_actor("mage", {"mana": 50.0})

        with pytest.raises(UnknownAbility):
            controller.try_trigger("mage", "frostbolt")

        assert controller.pools.current("mage", "mana") == 50.0
        assert controller.tracker.state("mage", "fireball") is None
        assert controller.tracker.state("mage", "frostbolt") is None


class TestChargedAbilities:
    def test_overshoot_after_pause(self) -> None:
        registry = AbilityRegistry()
        registry.register(
            "blink",
            CooldownPolicy(base_duration=1.0, max_charges=3, charge_recovery_duration=1.0),
        )
        controller = AbilityController(registry)
        driver = TickDriver.for_controller(controller)

        for _ in range(3):
            assert controller.try_trigger("rogue", "blink")
        result = controller.try_trigger("rogue", "blink")
        assert result.failure is TriggerFailure.ON_COOLDOWN
        assert result.time_remaining == 1.0

        driver.advance_all(3.5)

        assert controller.charges("rogue", "blink") == 3

    def test_many_actors_step_independently(self) -> None:
        registry = AbilityRegistry()
        registry.register("strike", CooldownPolicy(base_duration=1.0), {"stamina": 5})
        controller = AbilityController(registry)
        driver = TickDriver.for_controller(controller)
        for actor in range(4):
            controller.add_actor(actor, {"stamina": 5.0})

        assert controller.try_trigger(0, "strike")
        assert controller.try_trigger(2, "strike")
        driver.advance_all(0.5)

        assert [controller.is_ready(a, "strike") for a in range(4)] == [
            False,
            True,
            False,
            True,
        ]
        assert [controller.pools.current(a, "stamina") for a in range(4)] == [
            0.0,
            5.0,
            0.0,
            5.0,
        ]


class TestDataDrivenSetup:
    def test_enum_catalogue_from_mapping(self) -> None:
        registry = AbilityRegistry.from_mapping(
            {
                "FIREBALL": {"base_duration": 2, "costs": {"MANA": 30}},
                "BLINK": {
                    "base_duration": 6,
                    "max_charges": 2,
                    "charge_recovery_duration": 3,
                    "conditions": ["not_rooted"],
                },
            },
            catalogue=Spell,
            resource_kinds=Res,
        )
        assert registry.missing() == []

        rooted = {"mage": True}
        guards = AbilityGuards()
        guards.register("not_rooted", lambda actor, ctl: not rooted[actor])
        controller = AbilityController(registry, guards=guards)
        controller.add_actor("mage", {Res.MANA: 100.0})
        driver = TickDriver.for_controller(controller)

        assert controller.usable_abilities("mage") == [Spell.FIREBALL]
        rooted["mage"] = False
        assert controller.try_trigger("mage", Spell.BLINK)
        assert controller.try_trigger("mage", Spell.BLINK)
        assert not controller.try_trigger("mage", Spell.BLINK)

        driver.advance_all(3.0)
        assert controller.charges("mage", Spell.BLINK) == 1
        assert controller.try_trigger("mage", Spell.FIREBALL)
        assert controller.pools.current("mage", Res.MANA) == 70.0
