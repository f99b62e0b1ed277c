"""
Storage Services Package

Provides the abstract object store contract and an in-memory implementation.
Any real backend only has to implement ObjectStore.
"""

from finance_tracker.services.storage.interface import (
    DuplicateError,
    NotFoundError,
    ObjectStore,
    StorageError,
)
from finance_tracker.services.storage.memory import InMemoryObjectStore

__all__ = [
    # Interface
    "ObjectStore",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # In-memory implementation
    "InMemoryObjectStore",
]
