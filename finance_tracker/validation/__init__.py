"""Ledger validation package."""

from finance_tracker.validation.validator import (
    LedgerValidator,
    ValidationIssue,
    ValidationResult,
)

__all__ = ["LedgerValidator", "ValidationIssue", "ValidationResult"]
