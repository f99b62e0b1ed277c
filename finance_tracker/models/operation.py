"""
Operation Model

One money movement in one ledger: when it happened, how much, and which
way. Operations are only ever created by an owning aggregate (an Account
or a SavingGoal) and stay with that owner until removed.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from finance_tracker.errors import InvalidAmount
from finance_tracker.models.category import Expense, Income, OperationKind, signed_amount


def to_decimal(value: Any) -> Decimal:
    """
    Convert caller input into a finite Decimal, sign untouched.

    Accepts Decimal, int and numeric strings. Floats are refused outright:
    currency totals must stay exact in base 10.

    Raises:
        TypeError: value is a float or an unsupported type
        InvalidAmount: value is non-finite or not a number
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise TypeError(
            f"Amounts must be Decimal, int or str, not {type(value).__name__}"
        )

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, str)):
        try:
            amount = Decimal(value)
        except InvalidOperation:
            raise InvalidAmount(value, f"Amount is not a number: {value!r}")
    else:
        raise TypeError(
            f"Amounts must be Decimal, int or str, not {type(value).__name__}"
        )

    if not amount.is_finite():
        raise InvalidAmount(value, f"Amount must be finite, got {value}")
    return amount


def as_amount(value: Any) -> Decimal:
    """
    Convert caller input into a non-negative Decimal magnitude.

    Raises:
        TypeError: value is a float or an unsupported type
        InvalidAmount: value is negative, non-finite or not a number
    """
    amount = to_decimal(value)
    if amount < 0:
        raise InvalidAmount(amount)
    return amount


class Operation(BaseModel):
    """
    A single ledger entry.

    The amount is always a magnitude; the kind carries the direction.
    """
    model_config = ConfigDict(validate_assignment=True)

    id: UUID = Field(
        default_factory=uuid4,
        frozen=True,
        description="Process-unique operation identifier"
    )
    date: datetime = Field(
        ...,
        description="When the money moved"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Non-negative magnitude"
    )
    kind: OperationKind = Field(
        ...,
        description="Income or expense, with its category"
    )

    @field_validator('amount', mode='before')
    @classmethod
    def reject_float(cls, v: Any) -> Any:
        """Binary floating point is never an acceptable amount."""
        if isinstance(v, float):
            raise ValueError("Amounts must not be floats")
        return v

    @classmethod
    def create(
        cls,
        date: datetime,
        amount: Union[Decimal, int, str],
        kind: Union[Income, Expense],
    ) -> "Operation":
        """Build a new operation, raising InvalidAmount for a negative amount."""
        return cls(date=date, amount=as_amount(amount), kind=kind)

    def update(
        self,
        date: Optional[datetime] = None,
        amount: Optional[Union[Decimal, int, str]] = None,
        kind: Optional[Union[Income, Expense]] = None,
    ) -> None:
        """
        Edit an existing operation in place.

        Every supplied field is validated before any field is written, so a
        rejected edit leaves the operation exactly as it was.
        """
        changes: dict[str, Any] = {}
        if amount is not None:
            changes["amount"] = as_amount(amount)
        if date is not None:
            changes["date"] = date
        if kind is not None:
            changes["kind"] = kind
        if not changes:
            return

        candidate = Operation.model_validate(
            {"id": self.id, "date": self.date, "amount": self.amount, "kind": self.kind, **changes}
        )
        for field in changes:
            setattr(self, field, getattr(candidate, field))

    @property
    def signed_amount(self) -> Decimal:
        return signed_amount(self.kind, self.amount)

    @property
    def day(self):
        """Calendar day of the operation; time of day is ignored."""
        return self.date.date()


def sum_operations(operations: list[Operation]) -> Decimal:
    """Balance of a ledger: the signed sum of its operations."""
    return sum((op.signed_amount for op in operations), Decimal("0"))
