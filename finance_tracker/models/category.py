"""
Operation Categories

Closed enumerations describing why money moved, and the tagged union
that says which way it moved.

DESIGN DECISION: The direction of an operation lives only in its kind.
Amounts are always non-negative magnitudes; signed_amount() is the one
place that turns a (kind, amount) pair into a signed contribution, and
every balance sum goes through it.
"""

from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class IncomeCategory(str, Enum):
    """Reasons money comes in."""
    SALARY = "salary"
    GIFT = "gift"
    INTEREST = "interest"
    UNDEFINED = "undefined"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def icon(self) -> str:
        return _INCOME_ICONS[self]


class ExpenseCategory(str, Enum):
    """
    Reasons money goes out.

    SAVING is reserved for the account side of an allocation.
    """
    FOOD = "food"
    RENT = "rent"
    GIFT = "gift"
    SAVING = "saving"
    TRIP = "trip"
    UNDEFINED = "undefined"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def icon(self) -> str:
        return _EXPENSE_ICONS[self]


# Presentation metadata, symbol names as used by the desktop client
_INCOME_ICONS = {
    IncomeCategory.SALARY: "banknote",
    IncomeCategory.GIFT: "gift",
    IncomeCategory.INTEREST: "percent",
    IncomeCategory.UNDEFINED: "arrow.down.circle",
}

_EXPENSE_ICONS = {
    ExpenseCategory.FOOD: "fork.knife",
    ExpenseCategory.RENT: "house",
    ExpenseCategory.GIFT: "gift",
    ExpenseCategory.SAVING: "target",
    ExpenseCategory.TRIP: "airplane",
    ExpenseCategory.UNDEFINED: "arrow.up.circle",
}


# =============================================================================
# OPERATION KIND - tagged union
# =============================================================================

class Income(BaseModel):
    """Money coming into a ledger."""
    model_config = ConfigDict(frozen=True)

    direction: Literal["income"] = "income"
    category: IncomeCategory = IncomeCategory.UNDEFINED

    @property
    def is_income(self) -> bool:
        return True

    @property
    def label(self) -> str:
        return self.category.label

    @property
    def icon(self) -> str:
        return self.category.icon


class Expense(BaseModel):
    """Money leaving a ledger."""
    model_config = ConfigDict(frozen=True)

    direction: Literal["expense"] = "expense"
    category: ExpenseCategory = ExpenseCategory.UNDEFINED

    @property
    def is_income(self) -> bool:
        return False

    @property
    def label(self) -> str:
        return self.category.label

    @property
    def icon(self) -> str:
        return self.category.icon


OperationKind = Annotated[
    Union[Income, Expense],
    Field(discriminator="direction"),
]


def signed_amount(kind: Union[Income, Expense], amount: Decimal) -> Decimal:
    """
    Signed contribution of an operation to its ledger's balance.

    Raises TypeError for anything that is not a known kind, so a new
    variant cannot slip through the balance sum unnoticed.
    """
    if isinstance(kind, Income):
        return amount
    if isinstance(kind, Expense):
        return -amount
    raise TypeError(f"Unknown operation kind: {kind!r}")
