"""Allocation protocol package."""

from finance_tracker.ledger.allocation import (
    Allocation,
    account_lock,
    allocate,
    deallocate,
)

__all__ = [
    "Allocation",
    "account_lock",
    "allocate",
    "deallocate",
]
