"""
Allocation Protocol

Moves money from an account into one of its saving goals (allocate) and
back again (deallocate). This is the only operation that touches two
ledgers at once.

DESIGN DECISION: An allocation writes two mirrored operations, one in
each ledger, instead of one shared record:
- account: Expense(saving) of the amount
- goal:    Income(undefined) of the amount
Each side keeps deriving its balance from its own list with the same
signed-sum rule. Do not collapse these into a single shared row.

Both operations are staged before either is appended, and the whole
check-then-append sequence runs under the account's lock. A goal belongs
to exactly one account, so that lock covers the (account, goal) pair and
two concurrent allocations cannot both pass the funds check.
"""

import threading
import weakref
from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field

from finance_tracker.errors import InsufficientFunds, InvalidAmount, InvalidGoal, LedgerError
from finance_tracker.log import get_logger
from finance_tracker.models.account import Account
from finance_tracker.models.category import Expense, ExpenseCategory, Income, IncomeCategory
from finance_tracker.models.goal import SavingGoal
from finance_tracker.models.operation import Operation, to_decimal


logger = get_logger(__name__)


# =============================================================================
# EXCLUSION LOCKS
# =============================================================================

_registry_lock = threading.Lock()
_account_locks: "weakref.WeakValueDictionary[UUID, threading.RLock]" = (
    weakref.WeakValueDictionary()
)


def account_lock(account_id: UUID) -> threading.RLock:
    """
    The exclusive lock for one account.

    Re-entrant, so a service that already holds it can call allocate().
    Every caller holding or waiting on the lock keeps a reference to it,
    so all of them share one lock object. The registry entry goes away
    once the last reference is dropped.
    """
    with _registry_lock:
        lock = _account_locks.get(account_id)
        if lock is None:
            lock = threading.RLock()
            _account_locks[account_id] = lock
        return lock


# =============================================================================
# ALLOCATION RECORD
# =============================================================================

class Allocation(BaseModel):
    """The two mirrored operations written by one allocate/deallocate call."""

    direction: Literal["allocate", "deallocate"]
    account_id: UUID
    goal_id: UUID
    amount: Decimal = Field(ge=0)
    date: datetime
    account_operation_id: UUID
    goal_operation_id: UUID


def _check_goal(account: Account, goal: SavingGoal) -> None:
    if not account.owns_goal(goal):
        raise InvalidGoal(goal.id, account.id)


def allocate(
    account: Account,
    goal: SavingGoal,
    amount: Union[Decimal, int, str],
    when: Optional[datetime] = None,
) -> Allocation:
    """
    Move `amount` from the account into the goal.

    Checks run in a fixed order so the reported error is deterministic:
    1. the goal belongs to the account        -> InvalidGoal
    2. the account balance covers the amount  -> InsufficientFunds
    3. the amount is not negative             -> InvalidAmount

    On failure nothing is written to either ledger.
    """
    with account_lock(account.id):
        try:
            _check_goal(account, goal)

            requested = to_decimal(amount)
            available = account.balance
            if available < requested:
                raise InsufficientFunds(requested, available)

            if requested < 0:
                raise InvalidAmount(requested)
        except LedgerError as e:
            logger.warning(
                "allocation_rejected",
                error=type(e).__name__,
                account_id=str(account.id),
                goal_id=str(goal.id),
                amount=str(amount),
            )
            raise

        when = when or datetime.now()
        account_op = Operation.create(
            date=when,
            amount=requested,
            kind=Expense(category=ExpenseCategory.SAVING),
        )
        goal_op = Operation.create(
            date=when,
            amount=requested,
            kind=Income(category=IncomeCategory.UNDEFINED),
        )

        account.operations.append(account_op)
        goal.operations.append(goal_op)

    logger.info(
        "allocation_committed",
        account_id=str(account.id),
        goal_id=str(goal.id),
        amount=str(requested),
    )
    return Allocation(
        direction="allocate",
        account_id=account.id,
        goal_id=goal.id,
        amount=requested,
        date=when,
        account_operation_id=account_op.id,
        goal_operation_id=goal_op.id,
    )


def deallocate(
    account: Account,
    goal: SavingGoal,
    amount: Union[Decimal, int, str],
    when: Optional[datetime] = None,
) -> Allocation:
    """
    Move `amount` from the goal back into the account.

    The inverse pair of allocate(): Expense(saving) in the goal,
    Income(undefined) in the account. The funds check is made against the
    goal's current amount.
    """
    with account_lock(account.id):
        try:
            _check_goal(account, goal)

            requested = to_decimal(amount)
            available = goal.current_amount
            if available < requested:
                raise InsufficientFunds(requested, available)

            if requested < 0:
                raise InvalidAmount(requested)
        except LedgerError as e:
            logger.warning(
                "deallocation_rejected",
                error=type(e).__name__,
                account_id=str(account.id),
                goal_id=str(goal.id),
                amount=str(amount),
            )
            raise

        when = when or datetime.now()
        goal_op = Operation.create(
            date=when,
            amount=requested,
            kind=Expense(category=ExpenseCategory.SAVING),
        )
        account_op = Operation.create(
            date=when,
            amount=requested,
            kind=Income(category=IncomeCategory.UNDEFINED),
        )

        goal.operations.append(goal_op)
        account.operations.append(account_op)

    logger.info(
        "deallocation_committed",
        account_id=str(account.id),
        goal_id=str(goal.id),
        amount=str(requested),
    )
    return Allocation(
        direction="deallocate",
        account_id=account.id,
        goal_id=goal.id,
        amount=requested,
        date=when,
        account_operation_id=account_op.id,
        goal_operation_id=goal_op.id,
    )
