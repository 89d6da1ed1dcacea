"""
Payment endpoints.

| Operation | Method | Path                        |
|-----------|--------|-----------------------------|
| List      | GET    | /payments                   |
| Create    | POST   | /payments                   |
| Update    | PUT    | /payments                   |
| Delete    | DELETE | /payments?id=               |
| Stats     | GET    | /payments/stats             |
| Breakdown | GET    | /payments/stats/categories  |
| Get one   | GET    | /payments/{id}              |

Every endpoint requires an authenticated caller.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from finance_tracker.api.dependencies import get_correlation_id, get_current_user_id, get_flow
from finance_tracker.api.exceptions import BadRequestError
from finance_tracker.models.payment import (
    PaymentCreate,
    PaymentFilters,
    PaymentType,
    PaymentUpdate,
)
from finance_tracker.orchestrator import PaymentFlow


router = APIRouter(prefix="/payments", tags=["payments"])


@router.get("")
async def list_payments(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    type_filter: Optional[str] = Query(default=None, alias="type"),
    method: Optional[str] = Query(default=None),
    category: Optional[str] = Query(default=None),
    search: Optional[str] = Query(default=None),
    payment_id: Optional[str] = Query(default=None, alias="id"),
    date_from: Optional[datetime] = Query(default=None, alias="dateFrom"),
    date_to: Optional[datetime] = Query(default=None, alias="dateTo"),
    min_amount: Optional[float] = Query(default=None, ge=0, alias="minAmount"),
    max_amount: Optional[float] = Query(default=None, ge=0, alias="maxAmount"),
    limit: Optional[int] = Query(default=None, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    user_id: str = Depends(get_current_user_id),
    flow: PaymentFlow = Depends(get_flow),
    correlation_id: str = Depends(get_correlation_id),
):
    """List the caller's payments, newest first, optionally filtered."""
    filters = PaymentFilters(
        status=status_filter,
        type=type_filter,
        method=method,
        category=category,
        search=search,
        id=payment_id,
        date_from=date_from,
        date_to=date_to,
        min_amount=min_amount,
        max_amount=max_amount,
        limit=limit,
        offset=offset,
    )
    payments = await flow.list_payments(user_id, filters, correlation_id=correlation_id)
    return [payment.to_record() for payment in payments]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_payment(
    body: PaymentCreate,
    user_id: str = Depends(get_current_user_id),
    flow: PaymentFlow = Depends(get_flow),
    correlation_id: str = Depends(get_correlation_id),
):
    payment = await flow.create_payment(user_id, body, correlation_id=correlation_id)
    return payment.to_record()


@router.put("")
async def update_payment(
    body: PaymentUpdate,
    user_id: str = Depends(get_current_user_id),
    flow: PaymentFlow = Depends(get_flow),
    correlation_id: str = Depends(get_correlation_id),
):
    payment = await flow.update_payment(user_id, body, correlation_id=correlation_id)
    return payment.to_record()


@router.delete("")
async def delete_payment(
    payment_id: Optional[str] = Query(default=None, alias="id"),
    user_id: str = Depends(get_current_user_id),
    flow: PaymentFlow = Depends(get_flow),
    correlation_id: str = Depends(get_correlation_id),
):
    if not payment_id or not payment_id.strip():
        raise BadRequestError("ID requerido")

    await flow.delete_payment(user_id, payment_id.strip(), correlation_id=correlation_id)
    return {"success": True}


@router.get("/stats")
async def payment_stats(
    user_id: str = Depends(get_current_user_id),
    flow: PaymentFlow = Depends(get_flow),
    correlation_id: str = Depends(get_correlation_id),
):
    """Aggregate stats over the caller's whole collection (list filters don't apply)."""
    stats = await flow.get_stats(user_id, correlation_id=correlation_id)
    return stats.model_dump(by_alias=True)


@router.get("/stats/categories")
async def category_breakdown(
    type_filter: Optional[PaymentType] = Query(default=None, alias="type"),
    user_id: str = Depends(get_current_user_id),
    flow: PaymentFlow = Depends(get_flow),
    correlation_id: str = Depends(get_correlation_id),
):
    totals = await flow.get_category_summary(
        user_id, type_filter, correlation_id=correlation_id
    )
    return {"type": type_filter.value if type_filter else None, "totals": totals}


# Declared last so /payments/stats is never taken for an id
@router.get("/{payment_id}")
async def get_payment(
    payment_id: str,
    user_id: str = Depends(get_current_user_id),
    flow: PaymentFlow = Depends(get_flow),
    correlation_id: str = Depends(get_correlation_id),
):
    payment = await flow.get_payment(user_id, payment_id, correlation_id=correlation_id)
    return payment.to_record()
