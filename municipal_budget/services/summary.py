"""
Summary aggregation over a valid record set.

The record set must already be ordered by ``used_amount`` descending, as
``BudgetService`` returns it. Nothing here re-sorts: the largest category
is simply the first record.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Sequence, Tuple

from municipal_budget.schemas.budget import (
    BudgetRecord,
    BudgetSummary,
    CategoryShare,
    LargestCategory,
)

ZERO_PERCENTAGE = "0.0"
ONE_DECIMAL = Decimal("0.1")


def summarize(records: Sequence[BudgetRecord]) -> BudgetSummary:
    """Total spend and largest category of an ordered valid record set."""
    total_used = sum(record.used_amount for record in records)
    largest = None
    if records:
        first = records[0]
        largest = LargestCategory(category=first.category_label, amount=first.used_amount)
    return BudgetSummary(
        total_used=total_used,
        largest_category=largest,
        # No historical series yet
        year_over_year_change=0.0,
    )


def format_percentage(amount: float, total: float) -> str:
    """
    Share of *total* as a one-decimal string, e.g. ``"6.3"`` for 1 of 16.

    Exact halves of the float round up, as JavaScript's ``toFixed(1)`` does.
    """
    if total <= 0:
        return ZERO_PERCENTAGE
    share = Decimal(amount / total * 100)
    return str(share.quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP))


def compute_shares(items: Iterable[Tuple[str, float]]) -> List[CategoryShare]:
    """Annotate ``(category, amount)`` pairs with their share of the total."""
    items = list(items)
    total = sum(amount for _, amount in items)
    return [
        CategoryShare(
            category=category,
            amount=amount,
            percentage=format_percentage(amount, total),
        )
        for category, amount in items
    ]


def category_shares(records: Sequence[BudgetRecord]) -> List[CategoryShare]:
    return compute_shares((record.category_label, record.used_amount) for record in records)
