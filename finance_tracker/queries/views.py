"""
Read Views over Operation Collections

The ledger stores operations in insertion order only. These helpers build
the orderings and groupings a presentation layer needs without touching
the stored list.

Every function is pure: same input, same output, no mutation.
"""

from collections import OrderedDict
from datetime import date
from decimal import Decimal
from typing import Iterable, Union

from finance_tracker.models.category import Expense, Income
from finance_tracker.models.operation import Operation


def sorted_by_date(
    operations: Iterable[Operation],
    descending: bool = True,
) -> list[Operation]:
    """Operations ordered by date, newest first by default. Stable on ties."""
    return sorted(operations, key=lambda op: op.date, reverse=descending)


def group_by_day(operations: Iterable[Operation]) -> "OrderedDict[date, list[Operation]]":
    """
    Bucket operations by calendar day.

    Days come newest first; inside a day, the newest operation comes first.
    """
    groups: "OrderedDict[date, list[Operation]]" = OrderedDict()
    for op in sorted_by_date(operations):
        groups.setdefault(op.day, []).append(op)
    return groups


def income_total(operations: Iterable[Operation]) -> Decimal:
    return sum(
        (op.amount for op in operations if isinstance(op.kind, Income)),
        Decimal("0"),
    )


def expense_total(operations: Iterable[Operation]) -> Decimal:
    return sum(
        (op.amount for op in operations if isinstance(op.kind, Expense)),
        Decimal("0"),
    )


def totals_by_category(
    operations: Iterable[Operation],
) -> dict[Union[Income, Expense], Decimal]:
    """
    Signed totals per operation kind.

    Income and expense categories that share a name (e.g. gift) are kept
    apart because the key is the whole kind, not just the category.
    """
    totals: dict[Union[Income, Expense], Decimal] = {}
    for op in operations:
        totals[op.kind] = totals.get(op.kind, Decimal("0")) + op.signed_amount
    return totals
