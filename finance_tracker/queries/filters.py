"""
Payment Filtering

Filters are applied in Python over the user's full, already-loaded
collection. Every criterion is optional and they are AND-combined;
the original (newest-first) order is always preserved.
"""

from typing import Iterable, Optional

from finance_tracker.models.payment import Payment, PaymentFilters


def matches_search(payment: Payment, search: str) -> bool:
    """Case-insensitive substring match on description OR category."""
    needle = search.lower()
    if needle in payment.description.lower():
        return True
    return payment.category is not None and needle in payment.category.value.lower()


def matches(payment: Payment, filters: PaymentFilters) -> bool:
    """Does a single payment satisfy every supplied criterion?"""
    if filters.status and payment.status != filters.status:
        return False
    if filters.type and payment.type != filters.type:
        return False
    if filters.method and payment.method != filters.method:
        return False
    if filters.category and payment.category != filters.category:
        return False
    if filters.id and payment.id != filters.id:
        return False
    if filters.search and not matches_search(payment, filters.search):
        return False
    if filters.date_from and payment.created_at < filters.date_from:
        return False
    if filters.date_to and payment.created_at > filters.date_to:
        return False
    if filters.min_amount is not None and payment.amount < filters.min_amount:
        return False
    if filters.max_amount is not None and payment.amount > filters.max_amount:
        return False
    return True


def apply_filters(
    payments: Iterable[Payment],
    filters: Optional[PaymentFilters] = None,
) -> list[Payment]:
    """
    The payments matching filters, in their original order.

    offset/limit paginate the matching list; with no filters at all this
    is the identity.
    """
    payments = list(payments)
    if filters is None or filters.is_empty:
        return payments

    matched = [p for p in payments if matches(p, filters)]

    end = filters.offset + filters.limit if filters.limit is not None else None
    return matched[filters.offset:end]
