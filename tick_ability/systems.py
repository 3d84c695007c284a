"""Tick driver and system factory for ability bookkeeping."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

from tick_ability.pools import ResourcePools
from tick_ability.tracker import CooldownTracker
from tick_ability.types import AbilityId, Actor, Duration, StepContext, check_elapsed

if TYPE_CHECKING:
    from tick_ability.controller import AbilityController

RechargeCallback = Callable[[Actor, AbilityId, int], None]


class TickDriver:
    """Advances every tracker entry and pool by the same elapsed time.

    Holds no clock of its own; the host passes the step delta. Calling
    ``advance_all`` twice with the same value advances time twice.
    """

    def __init__(
        self,
        tracker: CooldownTracker,
        pools: ResourcePools,
        on_recharged: RechargeCallback | None = None,
    ) -> None:
        self._tracker = tracker
        self._pools = pools
        self._on_recharged = on_recharged

    @classmethod
    def for_controller(
        cls,
        controller: AbilityController,
        on_recharged: RechargeCallback | None = None,
    ) -> TickDriver:
        return cls(controller.tracker, controller.pools, on_recharged)

    def advance_all(self, elapsed: Duration) -> None:
        """Recover charges, then regenerate pools. Raises InvalidDuration.

        ``on_recharged(actor, ability_id, charges_gained)`` fires after both
        sub-systems have advanced.
        """
        seconds = check_elapsed(elapsed)
        recovered = self._tracker.advance(seconds)
        self._pools.regenerate(seconds)
        if self._on_recharged is not None:
            for actor, ability_id, gained in recovered:
                self._on_recharged(actor, ability_id, gained)


def make_cast_system(driver: TickDriver) -> Callable[[Any, StepContext], None]:
    """Return a ``system(world, ctx)`` that advances by ``ctx.dt`` each tick.

    The world argument is ignored; any context exposing ``dt`` in seconds
    works.
    """

    def cast_system(world: Any, ctx: StepContext) -> None:
        driver.advance_all(ctx.dt)

    return cast_system
