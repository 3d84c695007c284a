"""CooldownTracker — per (actor, ability) charge and cooldown state."""
from __future__ import annotations

from typing import Callable

from tick_ability.storage import DictStore, KeyedStore
from tick_ability.types import (
    AbilityId,
    Actor,
    CooldownPolicy,
    CooldownState,
    Duration,
    NotReady,
    check_elapsed,
)

StateKey = tuple[Actor, AbilityId]

# Float residue left by summing fractional tick deltas.
_EPSILON = 1e-9


class CooldownTracker:
    """Tracks banked charges and recovery timers.

    Entries are created lazily the first time an ability is used and start
    fully charged, so an ability nobody has touched is always ready.
    ``policy_of`` supplies the rules for an ability id, normally
    ``AbilityRegistry.policy_of``.
    """

    def __init__(
        self,
        policy_of: Callable[[AbilityId], CooldownPolicy],
        store: KeyedStore[StateKey, CooldownState] | None = None,
    ) -> None:
        self._policy_of = policy_of
        self._store: KeyedStore[StateKey, CooldownState] = (
            store if store is not None else DictStore()
        )

    # --- Queries ---

    def state(self, actor: Actor, ability_id: AbilityId) -> CooldownState | None:
        """Direct access to the entry. None if the ability was never used."""
        return self._store.get((actor, ability_id))

    def charges(self, actor: Actor, ability_id: AbilityId) -> int:
        """Charges available now. Untouched abilities report max_charges."""
        state = self._store.get((actor, ability_id))
        if state is None:
            return self._policy_of(ability_id).max_charges
        return state.charges_available

    def is_ready(self, actor: Actor, ability_id: AbilityId) -> bool:
        """At least one charge available."""
        state = self._store.get((actor, ability_id))
        return state is None or state.charges_available > 0

    def time_remaining(self, actor: Actor, ability_id: AbilityId) -> float:
        """Seconds until the next charge if not ready, else 0."""
        state = self._store.get((actor, ability_id))
        if state is None or state.charges_available > 0:
            return 0.0
        return state.time_to_next_charge

    # --- Mutation ---

    def consume_charge(self, actor: Actor, ability_id: AbilityId) -> None:
        """Spend one charge. Raises NotReady if none is available."""
        policy = self._policy_of(ability_id)
        key = (actor, ability_id)
        state = self._store.get(key)
        if state is None:
            state = CooldownState(charges_available=policy.max_charges)
            self._store.insert(key, state)

        if state.charges_available == 0:
            raise NotReady(actor, ability_id, state.time_to_next_charge)

        recovery = policy.recovery_duration
        if recovery == 0:
            # Charge comes straight back; nothing to track.
            return

        if state.charges_available >= policy.max_charges:
            state.time_to_next_charge = recovery
        state.charges_available -= 1

    def advance(self, elapsed: Duration) -> list[tuple[Actor, AbilityId, int]]:
        """Move every recovering entry forward by ``elapsed`` seconds.

        Overshoot carries into the next recovery period, so one large step
        recovers as many charges as the same time split into small steps.
        Returns ``[(actor, ability_id, charges_gained), ...]`` for entries
        that gained at least one charge. Raises InvalidDuration.
        """
        seconds = check_elapsed(elapsed)
        recovered: list[tuple[Actor, AbilityId, int]] = []
        for (actor, ability_id), state in self._store.items():
            policy = self._policy_of(ability_id)
            max_charges = policy.max_charges
            if state.charges_available >= max_charges:
                state.time_to_next_charge = 0.0
                continue

            recovery = policy.recovery_duration
            state.time_to_next_charge -= seconds
            gained = 0
            while (
                state.time_to_next_charge <= _EPSILON
                and state.charges_available < max_charges
            ):
                state.charges_available += 1
                state.time_to_next_charge += recovery
                gained += 1

            if state.charges_available >= max_charges:
                state.time_to_next_charge = 0.0
            if gained:
                recovered.append((actor, ability_id, gained))
        return recovered

    def reset(self, actor: Actor, ability_id: AbilityId | None = None) -> None:
        """Refill one ability, or every ability of ``actor`` if None."""
        if ability_id is not None:
            self._store.remove((actor, ability_id))
            return
        for key in [k for k, _ in self._store.items() if k[0] == actor]:
            self._store.remove(key)

    def remove_actor(self, actor: Actor) -> None:
        """Forget all state for ``actor``."""
        self.reset(actor)
