"""
BaseService -- abstract base for all store-backed billing services.

Responsibility:
    Provides the common constructor and the load/save helpers every
    service uses to move between stored records and frozen entities.

Architecture position:
    Services -- imperative shell infrastructure.

Invariants enforced:
    - Services never mutate a collection in place: they load it, build a
      new list and replace the whole collection.
    - A failed replacement raises StoreWriteError, so callers can rely on
      "no exception" meaning "persisted".

Failure modes:
    - StoreWriteError when ``save_collection`` reports failure.
"""

from __future__ import annotations

from abc import ABC
from typing import Any, Callable, Sequence, TypeVar

from billing_kernel.exceptions import StoreWriteError
from billing_services.store import CollectionName, EntityStore

EntityType = TypeVar("EntityType")


class BaseService(ABC):
    """
    Abstract base class for services reading and writing entity collections.

    Contract:
        Accepts an ``EntityStore`` from the caller; every method reads the
        current snapshot from it, so services hold no state of their own.
    """

    def __init__(self, store: EntityStore):
        self.store = store

    def _load(
        self,
        name: CollectionName,
        from_record: Callable[[dict[str, Any]], EntityType],
    ) -> list[EntityType]:
        return [from_record(record) for record in self.store.load_collection(name)]

    def _save(self, name: CollectionName, entities: Sequence[Any]) -> None:
        records = [entity.to_record() for entity in entities]
        if not self.store.save_collection(name, records):
            raise StoreWriteError(name.value)
