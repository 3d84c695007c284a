"""AbilityRegistry — static catalogue of cooldown policies and costs."""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Iterable, Mapping, Union

from tick_ability.types import (
    AbilityDef,
    AbilityId,
    CooldownPolicy,
    DuplicateAbility,
    RegistryFrozen,
    ResourceCost,
    ResourceKind,
    UnknownAbility,
    to_seconds,
)

logger = logging.getLogger(__name__)

CostSpec = Union[
    Mapping[ResourceKind, float],
    Iterable[Union[ResourceCost, tuple[ResourceKind, float]]],
]

_OPTION_KEYS = frozenset(
    {
        "base_duration",
        "max_charges",
        "charge_recovery_duration",
        "costs",
        "conditions",
    }
)


def _normalize_costs(costs: CostSpec) -> tuple[ResourceCost, ...]:
    """Coerce a cost spec to ResourceCost tuple. Raises ValueError on repeats."""
    if isinstance(costs, Mapping):
        items: Iterable[Any] = costs.items()
    else:
        items = costs
    result: list[ResourceCost] = []
    seen: set[ResourceKind] = set()
    for item in items:
        cost = item if isinstance(item, ResourceCost) else ResourceCost(*item)
        if cost.kind in seen:
            raise ValueError(f"Resource kind {cost.kind!r} listed more than once")
        seen.add(cost.kind)
        result.append(cost)
    return tuple(result)


def _as_count(name: str, value: Any) -> int:
    """Accept whole numbers only; 2.0 is fine, 1.5 and "2" are not."""
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise ValueError(f"{name} must be an integer, got {value!r}")


def _resolve(value: Any, enum_type: type[Enum] | None) -> Any:
    """Map a config key to an enum member by name when an enum is given."""
    if enum_type is None or isinstance(value, enum_type):
        return value
    try:
        return enum_type[value]
    except KeyError:
        raise ValueError(
            f"{value!r} is not a member of {enum_type.__name__}"
        ) from None


class AbilityRegistry:
    """Maps ability ids to their definitions. Read-only once frozen.

    Registration order is preserved and is the order used by
    :meth:`abilities` and anything that iterates the catalogue.
    """

    def __init__(self, catalogue: type[Enum] | None = None) -> None:
        self._definitions: dict[AbilityId, AbilityDef] = {}
        self._catalogue = catalogue
        self._frozen = False

    # --- Registration ---

    def register(
        self,
        ability_id: AbilityId,
        policy: CooldownPolicy | None = None,
        costs: CostSpec = (),
        conditions: Iterable[str] = (),
    ) -> AbilityDef:
        """Register an ability. Raises DuplicateAbility if already registered."""
        if self._frozen:
            raise RegistryFrozen(
                f"Cannot register {ability_id!r}: registry is frozen"
            )
        if self._catalogue is not None and not isinstance(
            ability_id, self._catalogue
        ):
            raise TypeError(
                f"{ability_id!r} is not a member of {self._catalogue.__name__}"
            )
        if ability_id in self._definitions:
            raise DuplicateAbility(ability_id)

        defn = AbilityDef(
            ability_id=ability_id,
            policy=policy if policy is not None else CooldownPolicy(),
            costs=_normalize_costs(costs),
            conditions=tuple(conditions),
        )
        self._definitions[ability_id] = defn
        logger.debug(
            "Registered ability %r (max_charges=%d, costs=%d)",
            ability_id,
            defn.policy.max_charges,
            len(defn.costs),
        )
        return defn

    def freeze(self) -> None:
        """End the setup phase. Further registration raises RegistryFrozen."""
        if not self._frozen:
            self._frozen = True
            logger.info("Ability registry frozen with %d abilities", len(self))

    @property
    def frozen(self) -> bool:
        return self._frozen

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[Any, Mapping[str, Any]],
        catalogue: type[Enum] | None = None,
        resource_kinds: type[Enum] | None = None,
    ) -> AbilityRegistry:
        """Build a registry from plain JSON-style data.

        ``data`` maps ability ids to option dicts with the keys
        ``base_duration``, ``max_charges`` (default 1),
        ``charge_recovery_duration`` (default base_duration), ``costs``
        (``{kind: amount}`` or ``[[kind, amount], ...]``, default empty) and
        ``conditions`` (guard names). With ``catalogue`` or
        ``resource_kinds`` set, string keys are looked up by member name.
        Raises ValueError on unrecognized option keys.
        """
        registry = cls(catalogue=catalogue)
        for raw_id, options in data.items():
            unknown = set(options) - _OPTION_KEYS
            if unknown:
                raise ValueError(
                    f"Unknown options for ability {raw_id!r}: {sorted(unknown)}"
                )
            recovery = options.get("charge_recovery_duration")
            policy = CooldownPolicy(
                base_duration=to_seconds(options.get("base_duration", 0.0)),
                max_charges=_as_count(
                    "max_charges", options.get("max_charges", 1)
                ),
                charge_recovery_duration=(
                    None if recovery is None else to_seconds(recovery)
                ),
            )
            raw_costs = options.get("costs", ())
            if isinstance(raw_costs, Mapping):
                raw_costs = list(raw_costs.items())
            costs = [
                (_resolve(kind, resource_kinds), float(amount))
                for kind, amount in raw_costs
            ]
            registry.register(
                _resolve(raw_id, catalogue),
                policy,
                costs,
                options.get("conditions", ()),
            )
        return registry

    # --- Queries ---

    def get(self, ability_id: AbilityId) -> AbilityDef:
        """Look up a definition. Raises UnknownAbility if not registered."""
        try:
            return self._definitions[ability_id]
        except (KeyError, TypeError):
            raise UnknownAbility(ability_id) from None

    def policy_of(self, ability_id: AbilityId) -> CooldownPolicy:
        """Cooldown policy. Raises UnknownAbility if not registered."""
        return self.get(ability_id).policy

    def costs_of(self, ability_id: AbilityId) -> tuple[ResourceCost, ...]:
        """Resource costs in stored order. Raises UnknownAbility if not registered."""
        return self.get(ability_id).costs

    def has(self, ability_id: AbilityId) -> bool:
        return ability_id in self._definitions

    def abilities(self) -> list[AbilityId]:
        """All registered ids in registration order."""
        return list(self._definitions)

    def missing(self) -> list[AbilityId]:
        """Catalogue members not registered yet. Empty without a catalogue."""
        if self._catalogue is None:
            return []
        return [m for m in self._catalogue if m not in self._definitions]

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, ability_id: object) -> bool:
        try:
            return ability_id in self._definitions
        except TypeError:
            return False
