"""ResourcePools — per (actor, kind) mana/stamina-style pools."""
from __future__ import annotations

import math
from typing import Iterable

from tick_ability.storage import DictStore, KeyedStore
from tick_ability.types import (
    Actor,
    Duration,
    InsufficientResource,
    ResourceCost,
    ResourceKind,
    ResourcePool,
    check_elapsed,
)

PoolKey = tuple[Actor, ResourceKind]


class ResourcePools:
    """Owns every actor's resource pools.

    An actor without a pool of some kind simply does not use that resource:
    queries report 0 and any positive cost of that kind is unaffordable.
    """

    def __init__(self, store: KeyedStore[PoolKey, ResourcePool] | None = None) -> None:
        self._store: KeyedStore[PoolKey, ResourcePool] = (
            store if store is not None else DictStore()
        )

    # --- Lifecycle ---

    def add_pool(
        self,
        actor: Actor,
        kind: ResourceKind,
        maximum: float,
        current: float | None = None,
        regen_per_second: float = 0.0,
    ) -> ResourcePool:
        """Create (or replace) a pool. ``current`` defaults to ``maximum``."""
        pool = ResourcePool(
            current=maximum if current is None else current,
            maximum=maximum,
            regen_per_second=regen_per_second,
        )
        self._store.insert((actor, kind), pool)
        return pool

    def insert(self, actor: Actor, kind: ResourceKind, pool: ResourcePool) -> None:
        """Attach an already-built pool."""
        self._store.insert((actor, kind), pool)

    def remove_pool(self, actor: Actor, kind: ResourceKind) -> None:
        self._store.remove((actor, kind))

    def remove_actor(self, actor: Actor) -> None:
        """Drop every pool owned by ``actor``."""
        for key in [k for k, _ in self._store.items() if k[0] == actor]:
            self._store.remove(key)

    # --- Queries ---

    def pool(self, actor: Actor, kind: ResourceKind) -> ResourcePool | None:
        """Direct access to a pool. None if the actor has no such pool."""
        return self._store.get((actor, kind))

    def kinds(self, actor: Actor) -> list[ResourceKind]:
        """Resource kinds ``actor`` has pools for."""
        return [kind for (owner, kind), _ in self._store.items() if owner == actor]

    def current(self, actor: Actor, kind: ResourceKind) -> float:
        pool = self._store.get((actor, kind))
        return 0.0 if pool is None else pool.current

    def maximum(self, actor: Actor, kind: ResourceKind) -> float:
        pool = self._store.get((actor, kind))
        return 0.0 if pool is None else pool.maximum

    def shortfall(
        self, actor: Actor, costs: Iterable[ResourceCost]
    ) -> tuple[ResourceKind, float] | None:
        """First unaffordable ``(kind, missing_amount)`` in order, or None."""
        for cost in costs:
            available = self.current(actor, cost.kind)
            if available < cost.amount:
                return cost.kind, cost.amount - available
        return None

    def can_afford(self, actor: Actor, costs: Iterable[ResourceCost]) -> bool:
        """Check every cost at once. An empty cost set is always affordable."""
        return self.shortfall(actor, costs) is None

    # --- Mutation ---

    def deduct(self, actor: Actor, costs: Iterable[ResourceCost]) -> None:
        """Pay every cost, or nothing at all.

        Raises InsufficientResource for the first failing kind, in the
        order given, without touching any pool.
        """
        costs = tuple(costs)
        missing = self.shortfall(actor, costs)
        if missing is not None:
            kind, amount = missing
            raise InsufficientResource(actor, kind, amount)
        for cost in costs:
            pool = self._store.get((actor, cost.kind))
            if pool is None:
                continue  # zero cost of a resource the actor lacks
            pool.current = max(0.0, pool.current - cost.amount)

    def credit(self, actor: Actor, kind: ResourceKind, amount: float) -> float:
        """Add to a pool, clamped to its maximum. Returns amount actually added."""
        if math.isnan(amount) or amount < 0:
            raise ValueError(f"amount must be >= 0, got {amount}")
        pool = self._store.get((actor, kind))
        if pool is None:
            return 0.0
        before = pool.current
        pool.current = min(pool.maximum, pool.current + amount)
        return pool.current - before

    def set_current(self, actor: Actor, kind: ResourceKind, value: float) -> None:
        """Overwrite current, clamped to ``[0, maximum]``. Raises KeyError."""
        if math.isnan(value):
            raise ValueError("current must be a number, got nan")
        pool = self._require(actor, kind)
        pool.current = min(max(value, 0.0), pool.maximum)

    def set_maximum(self, actor: Actor, kind: ResourceKind, value: float) -> None:
        """Change the cap; current is pulled down if above it. Raises KeyError."""
        if math.isnan(value) or value < 0:
            raise ValueError(f"maximum must be >= 0, got {value}")
        pool = self._require(actor, kind)
        pool.maximum = value
        if pool.current > value:
            pool.current = value

    def set_regen(self, actor: Actor, kind: ResourceKind, rate: float) -> None:
        """Change the regeneration rate. Raises KeyError."""
        if math.isnan(rate) or rate < 0:
            raise ValueError(f"regen_per_second must be >= 0, got {rate}")
        self._require(actor, kind).regen_per_second = rate

    def regenerate(self, elapsed: Duration) -> None:
        """Linear regeneration for every pool. Raises InvalidDuration."""
        seconds = check_elapsed(elapsed)
        for _key, pool in self._store.items():
            if pool.regen_per_second == 0 or pool.current >= pool.maximum:
                continue
            pool.current = min(
                pool.maximum, pool.current + pool.regen_per_second * seconds
            )

    # --- Internal helpers ---

    def _require(self, actor: Actor, kind: ResourceKind) -> ResourcePool:
        pool = self._store.get((actor, kind))
        if pool is None:
            raise KeyError(f"{actor!r} has no {kind!r} pool")
        return pool
