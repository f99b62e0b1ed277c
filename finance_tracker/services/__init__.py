"""
Services Package

External collaborators of the ledger core. Currently only storage.
"""

from finance_tracker.services.storage import (
    DuplicateError,
    InMemoryObjectStore,
    NotFoundError,
    ObjectStore,
    StorageError,
)

__all__ = [
    "DuplicateError",
    "InMemoryObjectStore",
    "NotFoundError",
    "ObjectStore",
    "StorageError",
]
