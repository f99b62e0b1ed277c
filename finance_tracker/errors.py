"""
Ledger Error Taxonomy

Every validation failure in the ledger core is raised synchronously to the
caller as one of these exceptions. Nothing is logged-and-swallowed inside
the core, and nothing is retried: the same inputs always fail the same way.

DESIGN DECISION: Removing or updating an identity that is not in the owning
collection raises NotFound. It is never a silent no-op.
"""

from decimal import Decimal
from typing import Optional
from uuid import UUID


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class InvalidAmount(LedgerError):
    """A negative (or non-finite) magnitude was supplied."""

    def __init__(self, amount: object, message: Optional[str] = None):
        self.amount = amount
        super().__init__(message or f"Amount must be a non-negative number, got {amount}")


class InvalidTarget(LedgerError):
    """A saving goal target was zero or negative."""

    def __init__(self, target_amount: object):
        self.target_amount = target_amount
        super().__init__(f"Target amount must be greater than zero, got {target_amount}")


class InvalidGoal(LedgerError):
    """The saving goal is not owned by the given account."""

    def __init__(self, goal_id: UUID, account_id: UUID):
        self.goal_id = goal_id
        self.account_id = account_id
        super().__init__(f"Saving goal {goal_id} does not belong to account {account_id}")


class InsufficientFunds(LedgerError):
    """The requested amount exceeds the funds available at check time."""

    def __init__(self, requested: Decimal, available: Decimal):
        self.requested = requested
        self.available = available
        super().__init__(f"Insufficient funds: requested {requested}, available {available}")


class NotFound(LedgerError):
    """An identity is absent from the owning collection."""

    def __init__(self, entity: str, entity_id: UUID):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")
