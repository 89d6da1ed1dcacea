"""
Payment Aggregation

Summary statistics are always recomputed over the user's FULL collection,
never over a filtered list view.

NOTE: pending_expense_amount sums every pending payment, income included.
The name says "expense" but the dashboard has always shown this total.
"""

import math
from collections import defaultdict
from typing import Iterable, Optional

from finance_tracker.models.payment import (
    Payment,
    PaymentStats,
    PaymentStatus,
    PaymentType,
)


def round_half_up(value: float) -> int:
    """Round to the nearest whole peso, halves towards +infinity."""
    return int(math.floor(value + 0.5))


def compute_stats(payments: Iterable[Payment]) -> PaymentStats:
    """Totals, balance, pending amount and completed count."""
    total_income = 0.0
    total_expense = 0.0
    pending = 0.0
    completed_count = 0

    for payment in payments:
        if payment.status == PaymentStatus.COMPLETED:
            completed_count += 1
            if payment.type == PaymentType.INCOME:
                total_income += payment.amount
            elif payment.type == PaymentType.EXPENSE:
                total_expense += payment.amount
        elif payment.status == PaymentStatus.PENDING:
            pending += payment.amount

    return PaymentStats(
        total_income=round_half_up(total_income),
        total_expense=round_half_up(total_expense),
        balance=round_half_up(total_income - total_expense),
        pending_expense_amount=round_half_up(pending),
        completed_count=completed_count,
    )


def summarize_by_category(
    payments: Iterable[Payment],
    payment_type: Optional[PaymentType] = None,
) -> dict[str, int]:
    """
    Completed totals per category, largest first.

    Restricted to one payment type when given.
    """
    totals: dict[str, float] = defaultdict(float)
    for payment in payments:
        if payment.status != PaymentStatus.COMPLETED:
            continue
        if payment_type and payment.type != payment_type:
            continue
        totals[payment.category.value] += payment.amount

    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return {category: round_half_up(amount) for category, amount in ranked}
