"""
In-Memory Object Store

Process-local implementation of ObjectStore. Holds references to the
entities it is given (an identity map), so the ledger's live aggregates
and the stored records are the same objects.
"""

import threading
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from finance_tracker.services.storage.interface import (
    DuplicateError,
    EntityT,
    NotFoundError,
    ObjectStore,
)


class InMemoryObjectStore(ObjectStore):
    """Dict-backed store, one collection per entity type."""

    def __init__(self):
        self._collections: dict[type, dict[UUID, BaseModel]] = {}
        self._lock = threading.Lock()

    def _collection(self, entity_type: type) -> dict[UUID, BaseModel]:
        return self._collections.setdefault(entity_type, {})

    def create(self, entity: BaseModel) -> None:
        with self._lock:
            collection = self._collection(type(entity))
            if entity.id in collection:
                raise DuplicateError(
                    f"{type(entity).__name__} {entity.id} already exists"
                )
            collection[entity.id] = entity

    def update(self, entity: BaseModel) -> None:
        with self._lock:
            collection = self._collection(type(entity))
            if entity.id not in collection:
                raise NotFoundError(f"{type(entity).__name__} {entity.id} not found")
            collection[entity.id] = entity

    def delete(self, entity_type: type[BaseModel], entity_id: UUID) -> None:
        with self._lock:
            collection = self._collection(entity_type)
            if entity_id not in collection:
                raise NotFoundError(f"{entity_type.__name__} {entity_id} not found")
            del collection[entity_id]

    def delete_many(self, keys: list[tuple[type[BaseModel], UUID]]) -> int:
        deleted = 0
        with self._lock:
            for entity_type, entity_id in keys:
                if self._collection(entity_type).pop(entity_id, None) is not None:
                    deleted += 1
        return deleted

    def get(self, entity_type: type[EntityT], entity_id: UUID) -> Optional[EntityT]:
        with self._lock:
            return self._collection(entity_type).get(entity_id)

    def all_of_type(self, entity_type: type[EntityT]) -> list[EntityT]:
        with self._lock:
            return list(self._collection(entity_type).values())

    def count(self, entity_type: type[BaseModel]) -> int:
        with self._lock:
            return len(self._collection(entity_type))
