"""Keyed storage interface backing the tracker and the resource pools."""
from __future__ import annotations

from typing import Generic, Hashable, Iterable, Protocol, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class KeyedStore(Protocol[K, V]):
    """Minimal get/insert/remove storage a host can back with anything.

    Keys are ``(actor, ability_id)`` for cooldown state and
    ``(actor, resource_kind)`` for pools. ``items()`` must be safe to
    iterate while values are mutated in place.
    """

    def get(self, key: K) -> V | None: ...

    def insert(self, key: K, value: V) -> None: ...

    def remove(self, key: K) -> V | None: ...

    def items(self) -> Iterable[tuple[K, V]]: ...


class DictStore(Generic[K, V]):
    """Default in-memory KeyedStore. Preserves insertion order."""

    def __init__(self) -> None:
        self._data: dict[K, V] = {}

    def get(self, key: K) -> V | None:
        return self._data.get(key)

    def insert(self, key: K, value: V) -> None:
        self._data[key] = value

    def remove(self, key: K) -> V | None:
        return self._data.pop(key, None)

    def items(self) -> list[tuple[K, V]]:
        # Snapshot so callers may insert/remove while iterating.
        return list(self._data.items())

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data
