"""
Data Models Package

The ledger domain model: categories, operations, accounts and saving goals.
Balances are always derived from operation lists, never stored.
"""

from finance_tracker.models.category import (
    Expense,
    ExpenseCategory,
    Income,
    IncomeCategory,
    OperationKind,
    signed_amount,
)
from finance_tracker.models.operation import (
    Operation,
    as_amount,
    sum_operations,
    to_decimal,
)
from finance_tracker.models.goal import SavingGoal
from finance_tracker.models.account import (
    Account,
    CascadeSet,
    PlannedPurchase,
    goals_of,
    operations_of,
)

__all__ = [
    # Categories
    "Expense",
    "ExpenseCategory",
    "Income",
    "IncomeCategory",
    "OperationKind",
    "signed_amount",
    # Operations
    "Operation",
    "as_amount",
    "sum_operations",
    "to_decimal",
    # Aggregates
    "Account",
    "CascadeSet",
    "PlannedPurchase",
    "SavingGoal",
    "goals_of",
    "operations_of",
]
