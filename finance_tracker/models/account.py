"""
Account Model

An account is an aggregate of operations. Its balance is never stored:
it is the signed sum of the account's own operation list, recomputed on
every read, so it cannot drift away from the history.

DESIGN DECISION: The opening deposit is recorded as a synthetic first
operation (Income / undefined) rather than as a separate field. The
operation list stays the single source of truth for the balance.

Overdraft is allowed for regular operations. Only allocations into a
saving goal check the balance (see finance_tracker.ledger.allocation).
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from finance_tracker.errors import NotFound
from finance_tracker.models.category import Expense, ExpenseCategory, Income, IncomeCategory
from finance_tracker.models.goal import SavingGoal
from finance_tracker.models.operation import Operation, as_amount, sum_operations


class PlannedPurchase(BaseModel):
    """Something the user intends to buy from this account. Descriptive only."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4, frozen=True)
    name: str = Field(
        default="",
        max_length=200,
    )
    category: ExpenseCategory = ExpenseCategory.UNDEFINED
    price: Decimal = Field(
        ...,
        ge=0,
        description="Expected price"
    )


class CascadeSet(BaseModel):
    """
    Every identity that has to go when an account is deleted.

    Handed to the storage collaborator so it can remove dependents in one
    pass.
    """
    account_id: UUID
    operation_ids: list[UUID] = Field(default_factory=list)
    goal_ids: list[UUID] = Field(default_factory=list)
    goal_operation_ids: list[UUID] = Field(default_factory=list)
    planned_purchase_ids: list[UUID] = Field(default_factory=list)

    @property
    def all_operation_ids(self) -> list[UUID]:
        return self.operation_ids + self.goal_operation_ids


class Account(BaseModel):
    """
    A financial account and its operation history.

    Operations are kept in insertion order. Sorting for display is the
    caller's job (see finance_tracker.queries).
    """
    model_config = ConfigDict(
        validate_assignment=True,
        str_strip_whitespace=True,
    )

    # Identity
    id: UUID = Field(
        default_factory=uuid4,
        frozen=True,
        description="Unique account ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Display label"
    )
    currency_code: str = Field(
        ...,
        frozen=True,
        pattern=r"^[A-Z]{3}$",
        description="ISO-4217 style currency code, fixed at creation"
    )
    created_at: datetime = Field(
        default_factory=datetime.now,
        frozen=True,
    )

    # Owned collections
    operations: list[Operation] = Field(default_factory=list)
    saving_goals: list[SavingGoal] = Field(default_factory=list)
    planned_purchases: list[PlannedPurchase] = Field(default_factory=list)

    @field_validator('currency_code', mode='before')
    @classmethod
    def normalize_currency_code(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @classmethod
    def create(
        cls,
        name: str,
        currency_code: str,
        initial_deposit: Union[Decimal, int, str],
        when: Optional[datetime] = None,
    ) -> "Account":
        """
        Open an account with a mandatory opening deposit.

        Raises:
            InvalidAmount: initial_deposit is negative
        """
        deposit = as_amount(initial_deposit)
        when = when or datetime.now()
        seed = Operation.create(
            date=when,
            amount=deposit,
            kind=Income(category=IncomeCategory.UNDEFINED),
        )
        return cls(
            name=name,
            currency_code=currency_code,
            created_at=when,
            operations=[seed],
        )

    # -------------------------------------------------------------------------
    # Derived reads
    # -------------------------------------------------------------------------

    @property
    def balance(self) -> Decimal:
        return sum_operations(self.operations)

    def get_operation(self, operation_id: UUID) -> Operation:
        for operation in self.operations:
            if operation.id == operation_id:
                return operation
        raise NotFound("Operation", operation_id)

    def get_goal(self, goal_id: UUID) -> SavingGoal:
        for goal in self.saving_goals:
            if goal.id == goal_id:
                return goal
        raise NotFound("SavingGoal", goal_id)

    def owns_goal(self, goal: SavingGoal) -> bool:
        """True when the goal points at this account and is registered here."""
        return goal.account_id == self.id and any(
            g.id == goal.id for g in self.saving_goals
        )

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def rename(self, name: str) -> None:
        self.name = name

    def add_operation(
        self,
        date: datetime,
        amount: Union[Decimal, int, str],
        kind: Union[Income, Expense],
    ) -> UUID:
        """
        Append an operation and return its id.

        No upper bound: the balance may go negative.

        Raises:
            InvalidAmount: amount is negative
        """
        operation = Operation.create(date=date, amount=amount, kind=kind)
        self.operations.append(operation)
        return operation.id

    def remove_operation(self, operation_id: UUID) -> Operation:
        """
        Remove an operation by id and return it.

        The opening deposit is not protected and can be removed too.

        Raises:
            NotFound: no operation with this id in the account
        """
        operation = self.get_operation(operation_id)
        self.operations.remove(operation)
        return operation

    def update_operation(
        self,
        operation_id: UUID,
        date: Optional[datetime] = None,
        amount: Optional[Union[Decimal, int, str]] = None,
        kind: Optional[Union[Income, Expense]] = None,
    ) -> Operation:
        operation = self.get_operation(operation_id)
        operation.update(date=date, amount=amount, kind=kind)
        return operation

    def remove_goal(self, goal_id: UUID) -> list[UUID]:
        """
        Detach a saving goal and return the ids of its operations.

        Raises:
            NotFound: no goal with this id in the account
        """
        goal = self.get_goal(goal_id)
        self.saving_goals.remove(goal)
        return [op.id for op in goal.operations]

    def add_planned_purchase(
        self,
        name: str,
        price: Union[Decimal, int, str],
        category: ExpenseCategory = ExpenseCategory.UNDEFINED,
    ) -> UUID:
        purchase = PlannedPurchase(name=name, price=as_amount(price), category=category)
        self.planned_purchases.append(purchase)
        return purchase.id

    def remove_planned_purchase(self, purchase_id: UUID) -> PlannedPurchase:
        for purchase in self.planned_purchases:
            if purchase.id == purchase_id:
                self.planned_purchases.remove(purchase)
                return purchase
        raise NotFound("PlannedPurchase", purchase_id)

    # -------------------------------------------------------------------------
    # Cascade
    # -------------------------------------------------------------------------

    def cascade(self) -> CascadeSet:
        """Identities the storage layer must delete together with this account."""
        return CascadeSet(
            account_id=self.id,
            operation_ids=operations_of(self),
            goal_ids=goals_of(self),
            goal_operation_ids=[
                op.id for goal in self.saving_goals for op in goal.operations
            ],
            planned_purchase_ids=[p.id for p in self.planned_purchases],
        )


def operations_of(owner: Union[Account, SavingGoal]) -> list[UUID]:
    """Operation ids owned directly by an account or a saving goal."""
    return [op.id for op in owner.operations]


def goals_of(account: Account) -> list[UUID]:
    return [goal.id for goal in account.saving_goals]
