"""AbilityGuards — named predicates an ability's conditions refer to."""
from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Iterable

from tick_ability.types import AbilityDef, Actor, UnknownGuard

if TYPE_CHECKING:
    from tick_ability.controller import AbilityController

Guard = Callable[[Actor, "AbilityController"], bool]


class AbilityGuards:
    """Maps condition names to ``fn(actor, controller) -> bool`` predicates.

    Guards are evaluated in the order an ability lists its conditions and
    stop at the first one that refuses.
    """

    def __init__(self) -> None:
        self._guards: dict[str, Guard] = {}

    def register(self, name: str, fn: Guard) -> None:
        """Register a named guard. Overwrites if already registered."""
        self._guards[name] = fn

    def check(self, name: str, actor: Actor, controller: AbilityController) -> bool:
        """Evaluate one guard. Raises KeyError if not registered."""
        return self._guards[name](actor, controller)

    def first_failing(
        self, defn: AbilityDef, actor: Actor, controller: AbilityController
    ) -> str | None:
        """Name of the first condition of ``defn`` that refuses, or None."""
        for name in defn.conditions:
            if not self.check(name, actor, controller):
                return name
        return None

    def unregistered(self, names: Iterable[str]) -> list[str]:
        """Names with no guard, in first-seen order, without repeats."""
        missing: list[str] = []
        for name in names:
            if name not in self._guards and name not in missing:
                missing.append(name)
        return missing

    def validate(self, definitions: Iterable[AbilityDef]) -> None:
        """Raise UnknownGuard for the first ability naming a missing guard."""
        for defn in definitions:
            missing = self.unregistered(defn.conditions)
            if missing:
                raise UnknownGuard(defn.ability_id, missing)

    def has(self, name: str) -> bool:
        return name in self._guards

    def names(self) -> list[str]:
        """Registered guard names in registration order."""
        return list(self._guards)
