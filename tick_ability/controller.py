"""AbilityController — the single trigger entry point."""
from __future__ import annotations

import logging
from typing import Any, Mapping, Union

from tick_ability.guards import AbilityGuards
from tick_ability.pools import ResourcePools
from tick_ability.registry import AbilityRegistry
from tick_ability.tracker import CooldownTracker
from tick_ability.types import (
    AbilityDef,
    AbilityId,
    Actor,
    ResourceKind,
    ResourcePool,
    TriggerFailure,
    TriggerResult,
)

logger = logging.getLogger(__name__)

# A pool may be given ready-made, as just a maximum, or as keyword fields.
PoolSpec = Union[ResourcePool, float, Mapping[str, Any]]


class AbilityController:
    """Answers "can this actor fire this ability now?" and fires it.

    A successful trigger spends one charge and pays every resource cost as
    one step; a refused trigger changes nothing. Checks run in a fixed
    order: disabled, cooldown, conditions, resources.

    Building a controller ends the registry's setup phase. With guards
    given, every condition an ability lists must name a registered guard
    or construction raises UnknownGuard.
    """

    def __init__(
        self,
        registry: AbilityRegistry,
        tracker: CooldownTracker | None = None,
        pools: ResourcePools | None = None,
        guards: AbilityGuards | None = None,
    ) -> None:
        registry.freeze()
        if guards is not None:
            guards.validate(registry.get(a) for a in registry.abilities())
        self._registry = registry
        self._tracker = (
            tracker if tracker is not None else CooldownTracker(registry.policy_of)
        )
        self._pools = pools if pools is not None else ResourcePools()
        self._guards = guards
        self._actors: dict[Actor, None] = {}
        self._disabled: set[tuple[Actor, AbilityId]] = set()

    @property
    def registry(self) -> AbilityRegistry:
        return self._registry

    @property
    def tracker(self) -> CooldownTracker:
        return self._tracker

    @property
    def pools(self) -> ResourcePools:
        return self._pools

    @property
    def guards(self) -> AbilityGuards | None:
        return self._guards

    # --- Actor lifecycle ---

    def add_actor(
        self,
        actor: Actor,
        pools: Mapping[ResourceKind, PoolSpec] | None = None,
    ) -> None:
        """Introduce an actor, optionally with its resource pools.

        Each pool spec is a ResourcePool, a bare maximum (starts full), or a
        mapping of ResourcePool fields where ``current`` defaults to
        ``maximum``.
        """
        self._actors[actor] = None
        for kind, spec in (pools or {}).items():
            if isinstance(spec, ResourcePool):
                self._pools.insert(actor, kind, spec)
            elif isinstance(spec, Mapping):
                self._pools.add_pool(actor, kind, **spec)
            else:
                self._pools.add_pool(actor, kind, float(spec))
        logger.debug("Added actor %r with pools %s", actor, list(pools or ()))

    def remove_actor(self, actor: Actor) -> None:
        """Forget an actor's cooldowns, pools and disabled abilities."""
        self._actors.pop(actor, None)
        self._tracker.remove_actor(actor)
        self._pools.remove_actor(actor)
        self._disabled = {key for key in self._disabled if key[0] != actor}
        logger.debug("Removed actor %r", actor)

    def actors(self) -> list[Actor]:
        """Actors introduced with add_actor, in insertion order."""
        return list(self._actors)

    # --- Disabling ---

    def disable(self, actor: Actor, ability_id: AbilityId) -> None:
        """Block an ability for one actor (stuns, silences, ...)."""
        self._registry.get(ability_id)
        self._disabled.add((actor, ability_id))

    def enable(self, actor: Actor, ability_id: AbilityId) -> None:
        self._disabled.discard((actor, ability_id))

    def is_disabled(self, actor: Actor, ability_id: AbilityId) -> bool:
        return (actor, ability_id) in self._disabled

    # --- Triggering ---

    def check(self, actor: Actor, ability_id: AbilityId) -> TriggerResult:
        """Would ``try_trigger`` succeed right now? Never mutates.

        Raises UnknownAbility if ``ability_id`` is not registered.
        """
        return self._evaluate(actor, self._registry.get(ability_id))

    def can_trigger(self, actor: Actor, ability_id: AbilityId) -> bool:
        return self.check(actor, ability_id).ok

    def try_trigger(self, actor: Actor, ability_id: AbilityId) -> TriggerResult:
        """Attempt to fire an ability.

        On success one charge is consumed and every cost deducted; the caller
        then runs the ability's effect. On refusal nothing changes and the
        result says why. Raises UnknownAbility if not registered.
        """
        defn = self._registry.get(ability_id)
        result = self._evaluate(actor, defn)
        if not result:
            logger.debug(
                "Trigger of %r by %r refused: %s",
                ability_id,
                actor,
                result.failure.value,
            )
            return result

        # Both preconditions were just verified, so neither call can fail.
        self._tracker.consume_charge(actor, ability_id)
        self._pools.deduct(actor, defn.costs)
        logger.debug("Actor %r triggered %r", actor, ability_id)
        return result

    def usable_abilities(self, actor: Actor) -> list[AbilityId]:
        """Registered abilities ``actor`` could trigger now, in registry order."""
        return [
            ability_id
            for ability_id in self._registry.abilities()
            if self._evaluate(actor, self._registry.get(ability_id)).ok
        ]

    # --- UI queries ---

    def is_ready(self, actor: Actor, ability_id: AbilityId) -> bool:
        """Cooldown-only readiness. Raises UnknownAbility."""
        self._registry.get(ability_id)
        return self._tracker.is_ready(actor, ability_id)

    def time_remaining(self, actor: Actor, ability_id: AbilityId) -> float:
        """Seconds until the next charge, 0 if ready. Raises UnknownAbility."""
        self._registry.get(ability_id)
        return self._tracker.time_remaining(actor, ability_id)

    def charges(self, actor: Actor, ability_id: AbilityId) -> int:
        """Charges available now. Raises UnknownAbility."""
        self._registry.get(ability_id)
        return self._tracker.charges(actor, ability_id)

    # --- Internal helpers ---

    def _evaluate(self, actor: Actor, defn: AbilityDef) -> TriggerResult:
        ability_id = defn.ability_id

        if (actor, ability_id) in self._disabled:
            return TriggerResult(ability_id, TriggerFailure.DISABLED)

        if not self._tracker.is_ready(actor, ability_id):
            return TriggerResult(
                ability_id,
                TriggerFailure.ON_COOLDOWN,
                time_remaining=self._tracker.time_remaining(actor, ability_id),
            )

        if self._guards is not None:
            refused = self._guards.first_failing(defn, actor, self)
            if refused is not None:
                return TriggerResult(
                    ability_id, TriggerFailure.CONDITION_FAILED, condition=refused
                )

        missing = self._pools.shortfall(actor, defn.costs)
        if missing is not None:
            kind, amount = missing
            return TriggerResult(
                ability_id,
                TriggerFailure.INSUFFICIENT_RESOURCE,
                kind=kind,
                shortfall=amount,
            )

        return TriggerResult(ability_id)
