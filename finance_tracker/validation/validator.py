"""
Ledger Invariant Validation

DESIGN DECISION: The ledger refuses bad input at the door (see
finance_tracker.errors), so a well-behaved account never fails these
checks. The validator recomputes the invariants from scratch anyway:
- after loading accounts from an external store
- in tests, as a cross-check of the derived balances
- to produce the overdraft warning that the ledger itself never raises

IMPORTANT: Validation NEVER fixes anything.
It reports issues for the caller to act on.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from finance_tracker.config import LedgerSettings, get_settings
from finance_tracker.models.account import Account
from finance_tracker.models.operation import Operation


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Part of the account with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'negative_amount', 'overdraft')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="Operation or goal the issue is about"
    )


class ValidationResult(BaseModel):
    """Result of validating one account."""

    account_id: UUID
    validated_at: datetime = Field(
        default_factory=datetime.now
    )
    balance: Decimal = Field(
        ...,
        description="Balance recomputed during validation"
    )
    is_valid: bool = Field(
        ...,
        description="No error-level issues"
    )
    issues: list[ValidationIssue] = Field(
        default_factory=list
    )

    @property
    def has_errors(self) -> bool:
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]


class LedgerValidator:
    """Checks an account, its operations and its goals against the ledger invariants."""

    def __init__(self, settings: Optional[LedgerSettings] = None):
        self._settings = settings or get_settings().ledger

    def _recompute(self, operations: list[Operation]) -> Decimal:
        total = Decimal("0")
        for op in operations:
            if op.kind.is_income:
                total += op.amount
            else:
                total -= op.amount
        return total

    def _check_operations(
        self,
        operations: list[Operation],
        owner: str,
        seen: set[UUID],
    ) -> list[ValidationIssue]:
        issues = []
        for op in operations:
            if op.amount < 0:
                issues.append(ValidationIssue(
                    field=f"{owner}.operations",
                    issue_type="negative_amount",
                    message=f"Operation {op.id} has a negative amount ({op.amount})",
                    severity="error",
                    entity_id=op.id,
                ))
            if op.id in seen:
                issues.append(ValidationIssue(
                    field=f"{owner}.operations",
                    issue_type="duplicate_operation",
                    message=f"Operation {op.id} appears more than once",
                    severity="error",
                    entity_id=op.id,
                ))
            seen.add(op.id)
        return issues

    def validate(self, account: Account) -> ValidationResult:
        """Run every check and collect the issues."""
        issues: list[ValidationIssue] = []
        seen: set[UUID] = set()

        issues.extend(self._check_operations(account.operations, "account", seen))

        balance = self._recompute(account.operations)
        if balance != account.balance:
            issues.append(ValidationIssue(
                field="account.balance",
                issue_type="balance_mismatch",
                message=f"Derived balance {account.balance} differs from recomputed {balance}",
                severity="error",
            ))

        threshold = self._settings.overdraft_warning_threshold
        if balance < threshold:
            issues.append(ValidationIssue(
                field="account.balance",
                issue_type="overdraft",
                message=f"Balance ({balance} {account.currency_code}) is below {threshold}",
                severity="warning",
            ))

        for goal in account.saving_goals:
            owner = f"goal[{goal.id}]"
            if goal.account_id != account.id:
                issues.append(ValidationIssue(
                    field=owner,
                    issue_type="foreign_goal",
                    message=f"Goal '{goal.name}' belongs to account {goal.account_id}",
                    severity="error",
                    entity_id=goal.id,
                ))
            if goal.target_amount <= 0:
                issues.append(ValidationIssue(
                    field=f"{owner}.target_amount",
                    issue_type="invalid_target",
                    message=f"Goal '{goal.name}' has a non-positive target",
                    severity="error",
                    entity_id=goal.id,
                ))

            issues.extend(self._check_operations(goal.operations, owner, seen))

            if self._recompute(goal.operations) > goal.target_amount:
                issues.append(ValidationIssue(
                    field=f"{owner}.current_amount",
                    issue_type="over_funded",
                    message=f"Goal '{goal.name}' holds more than its target",
                    severity="info",
                    entity_id=goal.id,
                ))

        return ValidationResult(
            account_id=account.id,
            balance=balance,
            is_valid=not any(issue.severity == "error" for issue in issues),
            issues=issues,
        )
