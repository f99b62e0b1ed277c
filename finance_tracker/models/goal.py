"""
Saving Goal Model

A saving goal is a small ledger of its own, scoped to exactly one account.
Its progress is derived from its private operations, which are filled and
drained only through the allocation protocol.

DESIGN DECISION: The goal refers to its account by id, never by handle.
A goal cannot move between accounts and cannot outlive its account.
"""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from finance_tracker.errors import InvalidAmount, InvalidGoal, InvalidTarget
from finance_tracker.models.operation import Operation, as_amount, sum_operations

if TYPE_CHECKING:
    from finance_tracker.models.account import Account


def as_target(value: Any) -> Decimal:
    """Convert a target amount, raising InvalidTarget unless it is positive."""
    try:
        target = as_amount(value)
    except InvalidAmount:
        raise InvalidTarget(value)
    if target <= 0:
        raise InvalidTarget(value)
    return target


class SavingGoal(BaseModel):
    """
    Progress toward a savings target inside one account.

    current_amount, progress_amount and progress_fraction are recomputed
    from the goal's operations on every read.
    """
    model_config = ConfigDict(
        validate_assignment=True,
        str_strip_whitespace=True,
    )

    id: UUID = Field(
        default_factory=uuid4,
        frozen=True,
        description="Unique goal ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Goal name shown to the user"
    )
    target_amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount the user wants to put aside"
    )
    account_id: UUID = Field(
        ...,
        frozen=True,
        description="Account this goal belongs to"
    )
    created_at: datetime = Field(
        default_factory=datetime.now,
        frozen=True,
    )
    operations: list[Operation] = Field(
        default_factory=list,
        description="Private ledger, disjoint from the account's operations"
    )

    @classmethod
    def create(
        cls,
        name: str,
        target_amount: Union[Decimal, int, str],
        account: "Account",
    ) -> "SavingGoal":
        """
        Create a goal against an existing account and register it there.

        Raises:
            InvalidTarget: target_amount is zero or negative
        """
        goal = cls(
            name=name,
            target_amount=as_target(target_amount),
            account_id=account.id,
        )
        account.saving_goals.append(goal)
        return goal

    @property
    def current_amount(self) -> Decimal:
        return sum_operations(self.operations)

    @property
    def progress_amount(self) -> Decimal:
        """What is still missing; negative once the goal is over-funded."""
        return self.target_amount - self.current_amount

    @property
    def progress_fraction(self) -> Decimal:
        """
        current_amount / target_amount, not clamped.

        Clamping for display is left to the caller.
        """
        if self.target_amount <= 0:
            return Decimal("0")
        return self.current_amount / self.target_amount

    @property
    def is_reached(self) -> bool:
        return self.current_amount >= self.target_amount

    def retarget(self, target_amount: Union[Decimal, int, str]) -> None:
        """Change the target, raising InvalidTarget unless it is positive."""
        self.target_amount = as_target(target_amount)

    def delete(self, account: "Account") -> list[UUID]:
        """
        Detach this goal from its account.

        Returns the ids of the goal's operations so the storage layer can
        remove them along with the goal.

        Raises:
            InvalidGoal: the goal does not belong to this account
        """
        if self.account_id != account.id:
            raise InvalidGoal(self.id, account.id)
        return account.remove_goal(self.id)
