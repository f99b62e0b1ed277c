"""
Ledger Service

Ties the ledger core to the object store. A presentation layer calls these
entry points instead of mutating aggregates directly, so every change to
an account is mirrored in storage and every deletion removes the full set
of dependents.

DESIGN DECISION: The service holds the account lock for the whole
mutate-then-store sequence. The lock is re-entrant, so allocate() can take
it again inside.

Storage layout: accounts, saving goals, operations and planned purchases
are stored as separate records so a backend can index and delete them
individually.
"""

from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from typing import Iterator, Optional, Union
from uuid import UUID

from finance_tracker.config import LedgerSettings, get_settings
from finance_tracker.errors import NotFound
from finance_tracker.ledger.allocation import (
    Allocation,
    account_lock,
    allocate,
    deallocate,
)
from finance_tracker.log import ensure_logging, get_logger
from finance_tracker.models.account import Account, CascadeSet, PlannedPurchase
from finance_tracker.models.category import Expense, ExpenseCategory, Income
from finance_tracker.models.goal import SavingGoal
from finance_tracker.models.operation import Operation
from finance_tracker.services.storage import InMemoryObjectStore, ObjectStore
from finance_tracker.validation import LedgerValidator, ValidationResult


Amount = Union[Decimal, int, str]


class LedgerService:
    """
    Mutation entry points for accounts, operations and saving goals.

    Each method either returns the created/changed entity (or its id) or
    raises one of the errors in finance_tracker.errors.
    """

    def __init__(
        self,
        store: Optional[ObjectStore] = None,
        settings: Optional[LedgerSettings] = None,
        validator: Optional[LedgerValidator] = None,
    ):
        self._store = store or InMemoryObjectStore()
        self._settings = settings or get_settings().ledger
        self._validator = validator or LedgerValidator(self._settings)
        ensure_logging()
        self._logger = get_logger(__name__)

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def accounts(self) -> list[Account]:
        return self._store.all_of_type(Account)

    def get_account(self, account_id: UUID) -> Account:
        account = self._store.get(Account, account_id)
        if account is None:
            raise NotFound("Account", account_id)
        return account

    def get_goal(self, goal_id: UUID) -> SavingGoal:
        goal = self._store.get(SavingGoal, goal_id)
        if goal is None:
            raise NotFound("SavingGoal", goal_id)
        return goal

    @contextmanager
    def _locked_account(self, account_id: UUID) -> Iterator[Account]:
        """
        Hold the account lock and yield the stored account.

        The lookup happens after the lock is acquired, so a caller that
        waited behind delete_account() gets NotFound instead of a detached
        aggregate.
        """
        with account_lock(account_id):
            yield self.get_account(account_id)

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    def open_account(
        self,
        name: str,
        initial_deposit: Amount,
        currency_code: Optional[str] = None,
        when: Optional[datetime] = None,
    ) -> Account:
        """
        Open an account in one of the supported currencies.

        Raises:
            ValueError: the currency is not supported
            InvalidAmount: initial_deposit is negative
        """
        code = (currency_code or self._settings.default_currency_code).strip().upper()
        if code not in self._settings.supported_currencies_list:
            raise ValueError(
                f"Unsupported currency: {code}. "
                f"Allowed: {', '.join(self._settings.supported_currencies_list)}"
            )

        account = Account.create(
            name=name,
            currency_code=code,
            initial_deposit=initial_deposit,
            when=when,
        )
        self._store.create(account)
        for operation in account.operations:
            self._store.create(operation)

        self._logger.info(
            "account_opened",
            account_id=str(account.id),
            currency_code=code,
            initial_deposit=str(account.balance),
        )
        return account

    def rename_account(self, account_id: UUID, name: str) -> Account:
        with self._locked_account(account_id) as account:
            account.rename(name)
            self._store.update(account)
        return account

    def delete_account(self, account_id: UUID) -> CascadeSet:
        """
        Delete an account and everything it owns.

        The whole cascade set is removed in one store call. Members that
        were never mirrored into storage (written through the ledger core
        directly) are skipped. Returns the cascade set.
        """
        with self._locked_account(account_id) as account:
            cascade = account.cascade()
            keys = (
                [(Operation, op_id) for op_id in cascade.all_operation_ids]
                + [(SavingGoal, goal_id) for goal_id in cascade.goal_ids]
                + [(PlannedPurchase, p_id) for p_id in cascade.planned_purchase_ids]
                + [(Account, account.id)]
            )
            deleted = self._store.delete_many(keys)

        self._logger.info(
            "account_deleted",
            account_id=str(account.id),
            operations=len(cascade.all_operation_ids),
            goals=len(cascade.goal_ids),
            records_deleted=deleted,
        )
        return cascade

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def record(
        self,
        account_id: UUID,
        date: datetime,
        amount: Amount,
        kind: Union[Income, Expense],
    ) -> UUID:
        """Add an operation to an account and return its id."""
        with self._locked_account(account_id) as account:
            operation_id = account.add_operation(date=date, amount=amount, kind=kind)
            self._store.create(account.get_operation(operation_id))
            self._store.update(account)

        self._logger.info(
            "operation_recorded",
            account_id=str(account.id),
            operation_id=str(operation_id),
            kind=kind.direction,
            category=kind.category.value,
            amount=str(amount),
        )
        return operation_id

    def edit_operation(
        self,
        account_id: UUID,
        operation_id: UUID,
        date: Optional[datetime] = None,
        amount: Optional[Amount] = None,
        kind: Optional[Union[Income, Expense]] = None,
    ) -> Operation:
        with self._locked_account(account_id) as account:
            operation = account.update_operation(
                operation_id, date=date, amount=amount, kind=kind
            )
            self._store.update(operation)
            self._store.update(account)
        return operation

    def remove_operation(self, account_id: UUID, operation_id: UUID) -> Operation:
        with self._locked_account(account_id) as account:
            operation = account.remove_operation(operation_id)
            self._store.delete_many([(Operation, operation.id)])
            self._store.update(account)
        return operation

    # -------------------------------------------------------------------------
    # Planned purchases
    # -------------------------------------------------------------------------

    def plan_purchase(
        self,
        account_id: UUID,
        name: str,
        price: Amount,
        category: ExpenseCategory = ExpenseCategory.UNDEFINED,
    ) -> UUID:
        with self._locked_account(account_id) as account:
            purchase_id = account.add_planned_purchase(name, price, category)
            self._store.create(account.planned_purchases[-1])
            self._store.update(account)
        return purchase_id

    def cancel_planned_purchase(self, account_id: UUID, purchase_id: UUID) -> None:
        with self._locked_account(account_id) as account:
            account.remove_planned_purchase(purchase_id)
            self._store.delete(PlannedPurchase, purchase_id)
            self._store.update(account)

    # -------------------------------------------------------------------------
    # Saving goals
    # -------------------------------------------------------------------------

    def create_goal(self, account_id: UUID, name: str, target_amount: Amount) -> SavingGoal:
        with self._locked_account(account_id) as account:
            goal = SavingGoal.create(name=name, target_amount=target_amount, account=account)
            self._store.create(goal)
            self._store.update(account)
        return goal

    def delete_goal(self, account_id: UUID, goal_id: UUID) -> list[UUID]:
        """Delete a goal and its operations; returns the deleted operation ids."""
        with self._locked_account(account_id) as account:
            goal = self.get_goal(goal_id)
            operation_ids = goal.delete(account)
            self._store.delete_many(
                [(Operation, op_id) for op_id in operation_ids] + [(SavingGoal, goal.id)]
            )
            self._store.update(account)
        return operation_ids

    def allocate(
        self,
        account_id: UUID,
        goal_id: UUID,
        amount: Amount,
        when: Optional[datetime] = None,
    ) -> Allocation:
        with self._locked_account(account_id) as account:
            goal = self.get_goal(goal_id)
            allocation = allocate(account, goal, amount, when)
            self._store_allocation(account, goal, allocation)
        return allocation

    def deallocate(
        self,
        account_id: UUID,
        goal_id: UUID,
        amount: Amount,
        when: Optional[datetime] = None,
    ) -> Allocation:
        with self._locked_account(account_id) as account:
            goal = self.get_goal(goal_id)
            allocation = deallocate(account, goal, amount, when)
            self._store_allocation(account, goal, allocation)
        return allocation

    def _store_allocation(
        self,
        account: Account,
        goal: SavingGoal,
        allocation: Allocation,
    ) -> None:
        self._store.create(account.get_operation(allocation.account_operation_id))
        self._store.create(
            next(op for op in goal.operations if op.id == allocation.goal_operation_id)
        )
        self._store.update(goal)
        self._store.update(account)

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate(self, account_id: UUID) -> ValidationResult:
        with self._locked_account(account_id) as account:
            result = self._validator.validate(account)
        if not result.is_valid:
            self._logger.warning(
                "account_invalid",
                account_id=str(account.id),
                errors=result.error_count,
            )
        return result
