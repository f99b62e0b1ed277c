"""
Abstract Storage Interface

DESIGN DECISION: The ledger does not own persistence. It talks to an
external object store through this interface and treats it as a black
box. This allows us to:
1. Use in-memory storage for testing
2. Plug in a real database later without touching the ledger
3. Keep business logic decoupled from durability, indexing and migration

The interface is intentionally tiny: create, update, delete and
query-all-of-type, keyed by entity type and id.
"""

from abc import ABC, abstractmethod
from typing import Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel


EntityT = TypeVar("EntityT", bound=BaseModel)


class ObjectStore(ABC):
    """
    Abstract interface for entity storage.

    Entities are pydantic models with an `id` field. Each entity type is
    its own collection.
    """

    @abstractmethod
    def create(self, entity: BaseModel) -> None:
        """
        Insert a new entity.

        Raises:
            DuplicateError: an entity of this type with this id exists
        """
        pass

    @abstractmethod
    def update(self, entity: BaseModel) -> None:
        """
        Replace a stored entity.

        Raises:
            NotFoundError: no entity of this type with this id
        """
        pass

    @abstractmethod
    def delete(self, entity_type: type[BaseModel], entity_id: UUID) -> None:
        """
        Delete one entity.

        Raises:
            NotFoundError: no entity of this type with this id
        """
        pass

    @abstractmethod
    def delete_many(self, keys: list[tuple[type[BaseModel], UUID]]) -> int:
        """
        Delete a set of entities as one unit.

        Keys that are not stored are skipped; an entity written only to an
        in-memory aggregate never reached the store and has nothing to
        remove. No other store call observes a partially deleted set.

        Returns:
            Number of entities actually deleted
        """
        pass

    @abstractmethod
    def get(self, entity_type: type[EntityT], entity_id: UUID) -> Optional[EntityT]:
        """Fetch one entity, or None if it is not stored."""
        pass

    @abstractmethod
    def all_of_type(self, entity_type: type[EntityT]) -> list[EntityT]:
        """All stored entities of one type, in insertion order."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass
