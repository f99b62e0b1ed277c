"""
Tests for the ledger service and the object store

Uses the in-memory store; no external services.
"""

import threading
import pytest
from datetime import datetime
from decimal import Decimal
from uuid import uuid4

from finance_tracker.config import LedgerSettings
from finance_tracker.errors import InsufficientFunds, InvalidAmount, InvalidGoal, NotFound
from finance_tracker.ledger import account_lock, allocate
from finance_tracker.models import (
    Account,
    Expense,
    ExpenseCategory,
    Income,
    IncomeCategory,
    Operation,
    PlannedPurchase,
    SavingGoal,
)
from finance_tracker.orchestrator import LedgerService
from finance_tracker.services.storage import DuplicateError, InMemoryObjectStore, NotFoundError


T1 = datetime(2025, 3, 1, 9, 0)


@pytest.fixture
def store() -> InMemoryObjectStore:
    return InMemoryObjectStore()


@pytest.fixture
def service(store) -> LedgerService:
    settings = LedgerSettings(
        default_currency_code="EUR",
        supported_currency_codes="EUR,HUF",
    )
    return LedgerService(store=store, settings=settings)


class TestInMemoryObjectStore:
    """Tests for the in-memory store."""

    def test_create_get_all(self, store):
        """Test basic storage round trip."""
        account = Account.create("Main", "EUR", 0)
        store.create(account)
        assert store.get(Account, account.id) is account
        assert store.all_of_type(Account) == [account]
        assert store.all_of_type(SavingGoal) == []

    def test_duplicate_create(self, store):
        """Test that inserting the same id twice fails."""
        account = Account.create("Main", "EUR", 0)
        store.create(account)
        with pytest.raises(DuplicateError):
            store.create(account)

    def test_update_and_delete_missing(self, store):
        """Test that update and delete require an existing record."""
        account = Account.create("Main", "EUR", 0)
        with pytest.raises(NotFoundError):
            store.update(account)
        with pytest.raises(NotFoundError):
            store.delete(Account, account.id)

    def test_types_are_separate_collections(self, store):
        """Test that collections are keyed by type."""
        account = Account.create("Main", "EUR", 0)
        store.create(account)
        store.create(account.operations[0])
        assert store.count(Account) == 1
        assert store.count(Operation) == 1
        assert store.get(Operation, account.id) is None

    def test_delete_many_skips_absent_keys(self, store):
        """Test that a batch delete removes stored keys and ignores the rest."""
        account = Account.create("Main", "EUR", 0)
        store.create(account)
        store.create(account.operations[0])
        deleted = store.delete_many([
            (Operation, account.operations[0].id),
            (Operation, uuid4()),
            (Account, account.id),
        ])
        assert deleted == 2
        assert store.count(Account) == 0
        assert store.count(Operation) == 0


class TestLedgerService:
    """Tests for LedgerService entry points."""

    def test_open_account(self, service, store):
        """Test that opening stores the account and its seed operation."""
        account = service.open_account("Main", Decimal("100.00"))
        assert account.currency_code == "EUR"
        assert service.accounts() == [account]
        assert store.get(Operation, account.operations[0].id) is not None

    def test_open_account_unsupported_currency(self, service):
        """Test that only configured currencies are accepted."""
        with pytest.raises(ValueError, match="Unsupported currency"):
            service.open_account("Main", 0, currency_code="USD")
        assert service.accounts() == []

    def test_open_account_negative_deposit(self, service):
        """Test that a negative deposit stores nothing."""
        with pytest.raises(InvalidAmount):
            service.open_account("Main", Decimal("-1"))
        assert service.accounts() == []

    def test_unknown_account(self, service):
        """Test that unknown ids raise NotFound."""
        with pytest.raises(NotFound):
            service.record(uuid4(), T1, 1, Income())

    def test_record_edit_remove(self, service, store):
        """Test the operation lifecycle through the service."""
        account = service.open_account("Main", Decimal("100"))
        op_id = service.record(account.id, T1, Decimal("30"), Income(category=IncomeCategory.SALARY))
        assert store.get(Operation, op_id) is not None
        assert account.balance == Decimal("130")

        service.edit_operation(account.id, op_id, kind=Expense(category=ExpenseCategory.FOOD))
        assert account.balance == Decimal("70")

        service.remove_operation(account.id, op_id)
        assert store.get(Operation, op_id) is None
        assert account.balance == Decimal("100")

    def test_rename_account(self, service):
        """Test renaming through the service."""
        account = service.open_account("Main", 0)
        service.rename_account(account.id, "Daily")
        assert service.get_account(account.id).name == "Daily"

    def test_allocate_and_deallocate(self, service, store):
        """Test allocation through the service stores both operations."""
        account = service.open_account("Main", Decimal("100"))
        goal = service.create_goal(account.id, "Holiday", Decimal("50"))
        allocation = service.allocate(account.id, goal.id, Decimal("40"))

        assert account.balance == Decimal("60")
        assert goal.current_amount == Decimal("40")
        assert store.get(Operation, allocation.account_operation_id) is not None
        assert store.get(Operation, allocation.goal_operation_id) is not None

        service.deallocate(account.id, goal.id, Decimal("10"))
        assert account.balance == Decimal("70")
        assert goal.current_amount == Decimal("30")

    def test_allocate_insufficient_funds_stores_nothing(self, service, store):
        """Test that a refused allocation adds no records."""
        account = service.open_account("Main", Decimal("10"))
        goal = service.create_goal(account.id, "Holiday", Decimal("50"))
        before = store.count(Operation)
        with pytest.raises(InsufficientFunds):
            service.allocate(account.id, goal.id, Decimal("11"))
        assert store.count(Operation) == before

    def test_allocate_across_accounts(self, service):
        """Test that a goal of another account is refused."""
        first = service.open_account("First", Decimal("100"))
        second = service.open_account("Second", Decimal("100"))
        goal = service.create_goal(second.id, "Car", Decimal("500"))
        with pytest.raises(InvalidGoal):
            service.allocate(first.id, goal.id, Decimal("1"))
        with pytest.raises(InvalidGoal):
            service.delete_goal(first.id, goal.id)

    def test_delete_goal(self, service, store):
        """Test that deleting a goal removes its operations from storage."""
        account = service.open_account("Main", Decimal("100"))
        goal = service.create_goal(account.id, "Holiday", Decimal("50"))
        allocation = service.allocate(account.id, goal.id, Decimal("20"))

        removed = service.delete_goal(account.id, goal.id)
        assert removed == [allocation.goal_operation_id]
        assert store.get(SavingGoal, goal.id) is None
        assert store.get(Operation, allocation.goal_operation_id) is None
        assert account.saving_goals == []
        # the account side of the allocation stays in the account's history
        assert account.balance == Decimal("80")

    def test_planned_purchases(self, service, store):
        """Test planned purchase records."""
        account = service.open_account("Main", 0)
        purchase_id = service.plan_purchase(account.id, "Tent", Decimal("120"), ExpenseCategory.TRIP)
        assert store.get(PlannedPurchase, purchase_id) is not None
        service.cancel_planned_purchase(account.id, purchase_id)
        assert store.get(PlannedPurchase, purchase_id) is None

    def test_delete_account_cascades(self, service, store):
        """Test that deleting an account removes every dependent record."""
        account = service.open_account("Main", Decimal("100"))
        other = service.open_account("Other", Decimal("5"))
        service.record(account.id, T1, Decimal("10"), Expense(category=ExpenseCategory.FOOD))
        goal = service.create_goal(account.id, "Holiday", Decimal("50"))
        service.allocate(account.id, goal.id, Decimal("20"))
        service.plan_purchase(account.id, "Tent", Decimal("120"))

        cascade = service.delete_account(account.id)

        assert len(cascade.operation_ids) == 3
        assert len(cascade.goal_operation_ids) == 1
        assert service.accounts() == [other]
        assert store.all_of_type(SavingGoal) == []
        assert store.all_of_type(PlannedPurchase) == []
        assert store.all_of_type(Operation) == other.operations
        with pytest.raises(NotFound):
            service.get_account(account.id)

    def test_delete_account_after_core_allocation(self, service, store):
        """Test deleting an account whose allocation bypassed the service."""
        account = service.open_account("Main", Decimal("100"))
        goal = service.create_goal(account.id, "Holiday", Decimal("50"))
        allocate(account, goal, Decimal("10"))

        cascade = service.delete_account(account.id)

        assert len(cascade.all_operation_ids) == 3
        assert service.accounts() == []
        assert store.count(Operation) == 0
        assert store.count(SavingGoal) == 0
        assert store.count(Account) == 0

    def test_record_waiting_on_deleted_account(self, service, store):
        """Test that a write queued behind delete_account fails without storing."""
        account = service.open_account("Main", Decimal("100"))
        outcome = []
        started = threading.Event()

        def worker():
            started.set()
            try:
                service.record(account.id, T1, Decimal("5"), Expense())
                outcome.append("recorded")
            except NotFound:
                outcome.append("not_found")

        lock = account_lock(account.id)
        with lock:
            thread = threading.Thread(target=worker)
            thread.start()
            started.wait()
            service.delete_account(account.id)
        thread.join()

        assert outcome == ["not_found"]
        assert service.accounts() == []
        assert store.count(Operation) == 0

    def test_validate(self, service):
        """Test validation through the service."""
        account = service.open_account("Main", Decimal("10"))
        service.record(account.id, T1, Decimal("30"), Expense(category=ExpenseCategory.RENT))
        result = service.validate(account.id)
        assert result.is_valid is True
        assert result.balance == Decimal("-20")
        assert result.issues[0].issue_type == "overdraft"
