"""Read views package."""

from finance_tracker.queries.views import (
    expense_total,
    group_by_day,
    income_total,
    sorted_by_date,
    totals_by_category,
)

__all__ = [
    "expense_total",
    "group_by_day",
    "income_total",
    "sorted_by_date",
    "totals_by_category",
]
