"""Cooldown, charge and resource bookkeeping for ability casting."""
from tick_ability.controller import AbilityController
from tick_ability.guards import AbilityGuards
from tick_ability.pools import ResourcePools
from tick_ability.registry import AbilityRegistry
from tick_ability.storage import DictStore, KeyedStore
from tick_ability.systems import TickDriver, make_cast_system
from tick_ability.tracker import CooldownTracker
from tick_ability.types import (
    AbilityDef,
    AbilityError,
    CooldownPolicy,
    CooldownState,
    DuplicateAbility,
    InsufficientResource,
    InvalidDuration,
    NotReady,
    RegistryFrozen,
    ResourceCost,
    ResourcePool,
    TriggerFailure,
    TriggerResult,
    UnknownAbility,
    UnknownGuard,
)

__all__ = [
    "AbilityController",
    "AbilityDef",
    "AbilityError",
    "AbilityGuards",
    "AbilityRegistry",
    "CooldownPolicy",
    "CooldownState",
    "CooldownTracker",
    "DictStore",
    "DuplicateAbility",
    "InsufficientResource",
    "InvalidDuration",
    "KeyedStore",
    "NotReady",
    "RegistryFrozen",
    "ResourceCost",
    "ResourcePool",
    "ResourcePools",
    "TickDriver",
    "TriggerFailure",
    "TriggerResult",
    "UnknownAbility",
    "UnknownGuard",
    "make_cast_system",
]
