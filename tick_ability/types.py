"""Core data types, identifiers and errors for ability bookkeeping."""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Any, Hashable, Protocol, Union

AbilityId = Hashable
ResourceKind = Hashable
Actor = Hashable

# Seconds as a float, or a timedelta converted on entry.
Duration = Union[float, int, timedelta]


def to_seconds(value: Duration) -> float:
    """Convert a duration argument to float seconds."""
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)


def check_elapsed(elapsed: Duration) -> float:
    """Validate a tick delta. Raises InvalidDuration if negative, NaN or infinite."""
    try:
        seconds = to_seconds(elapsed)
    except (TypeError, ValueError):
        raise InvalidDuration(elapsed) from None
    if math.isnan(seconds) or math.isinf(seconds) or seconds < 0:
        raise InvalidDuration(elapsed)
    return seconds


@dataclass(frozen=True)
class CooldownPolicy:
    """Cooldown and charge rules for one ability.

    Attributes:
        base_duration: Seconds until the ability is ready again after use.
        max_charges: Uses that may be banked (>= 1).
        charge_recovery_duration: Seconds to regain one charge. None means
            base_duration. math.inf means charges never come back.
    """

    base_duration: float = 0.0
    max_charges: int = 1
    charge_recovery_duration: float | None = None

    def __post_init__(self) -> None:
        if math.isnan(self.base_duration) or self.base_duration < 0:
            raise ValueError(
                f"base_duration must be >= 0, got {self.base_duration}"
            )
        if self.max_charges < 1:
            raise ValueError(f"max_charges must be >= 1, got {self.max_charges}")
        recovery = self.charge_recovery_duration
        if recovery is not None and (math.isnan(recovery) or recovery < 0):
            raise ValueError(
                f"charge_recovery_duration must be >= 0, got {recovery}"
            )

    @property
    def recovery_duration(self) -> float:
        if self.charge_recovery_duration is None:
            return self.base_duration
        return self.charge_recovery_duration


@dataclass(frozen=True)
class ResourceCost:
    """Amount of one resource kind spent when an ability fires."""

    kind: ResourceKind
    amount: float

    def __post_init__(self) -> None:
        if math.isnan(self.amount) or math.isinf(self.amount) or self.amount < 0:
            raise ValueError(f"amount must be finite and >= 0, got {self.amount}")


@dataclass
class CooldownState:
    """Runtime charge state of one (actor, ability) pair. Mutable."""

    charges_available: int
    time_to_next_charge: float = 0.0


@dataclass
class ResourcePool:
    """Bounded, regenerating quantity owned by one actor.

    Attributes:
        current: Amount available right now (0 <= current <= maximum).
        maximum: Upper bound for current.
        regen_per_second: Linear regeneration rate.
    """

    current: float
    maximum: float
    regen_per_second: float = 0.0

    def __post_init__(self) -> None:
        if math.isnan(self.maximum) or self.maximum < 0:
            raise ValueError(f"maximum must be >= 0, got {self.maximum}")
        if math.isnan(self.current) or not 0 <= self.current <= self.maximum:
            raise ValueError(
                f"current must be within [0, {self.maximum}], got {self.current}"
            )
        if math.isnan(self.regen_per_second) or self.regen_per_second < 0:
            raise ValueError(
                f"regen_per_second must be >= 0, got {self.regen_per_second}"
            )


@dataclass(frozen=True)
class AbilityDef:
    """Registry entry for one ability. Not mutated after registration."""

    ability_id: AbilityId
    policy: CooldownPolicy
    costs: tuple[ResourceCost, ...] = ()
    conditions: tuple[str, ...] = ()  # guard names, ALL must pass


class TriggerFailure(Enum):
    """Gameplay reasons a trigger was refused."""

    DISABLED = "disabled"
    ON_COOLDOWN = "on_cooldown"
    CONDITION_FAILED = "condition_failed"
    INSUFFICIENT_RESOURCE = "insufficient_resource"


@dataclass(frozen=True)
class TriggerResult:
    """Outcome of a trigger attempt. Truthy only on success."""

    ability_id: AbilityId
    failure: TriggerFailure | None = None
    time_remaining: float = 0.0
    kind: ResourceKind | None = None
    shortfall: float = 0.0
    condition: str | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    def __bool__(self) -> bool:
        return self.failure is None


class StepContext(Protocol):
    """Anything carrying a per-step delta in seconds, e.g. a tick context."""

    @property
    def dt(self) -> float: ...


# --- Errors ---


class AbilityError(Exception):
    """Base class for every error raised by tick_ability."""


class UnknownAbility(AbilityError, KeyError):
    """Raised when an ability id is not registered."""

    def __init__(self, ability_id: AbilityId) -> None:
        self.ability_id = ability_id
        super().__init__(f"Ability {ability_id!r} is not registered")


class DuplicateAbility(AbilityError, ValueError):
    """Raised when registering an ability id twice."""

    def __init__(self, ability_id: AbilityId) -> None:
        self.ability_id = ability_id
        super().__init__(f"Ability {ability_id!r} is already registered")


class RegistryFrozen(AbilityError, RuntimeError):
    """Raised when registering after setup has ended."""


class InvalidDuration(AbilityError, ValueError):
    """Raised when an elapsed time is negative, NaN or infinite."""

    def __init__(self, elapsed: Any) -> None:
        self.elapsed = elapsed
        super().__init__(
            f"elapsed must be a finite, non-negative duration, got {elapsed!r}"
        )


class NotReady(AbilityError):
    """Raised when consuming a charge that is not available."""

    def __init__(
        self, actor: Actor, ability_id: AbilityId, time_remaining: float
    ) -> None:
        self.actor = actor
        self.ability_id = ability_id
        self.time_remaining = time_remaining
        super().__init__(
            f"Ability {ability_id!r} not ready for {actor!r} "
            f"({time_remaining:.3f}s remaining)"
        )


class InsufficientResource(AbilityError):
    """Raised when a deduction cannot be paid in full."""

    def __init__(self, actor: Actor, kind: ResourceKind, shortfall: float) -> None:
        self.actor = actor
        self.kind = kind
        self.shortfall = shortfall
        super().__init__(f"{actor!r} is short {shortfall} {kind!r}")


class UnknownGuard(AbilityError, ValueError):
    """Raised when an ability's conditions name a guard nobody registered."""

    def __init__(self, ability_id: AbilityId, names: list[str]) -> None:
        self.ability_id = ability_id
        self.names = names
        super().__init__(
            f"Ability {ability_id!r} has conditions with no guard: {names}"
        )
