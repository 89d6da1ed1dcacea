"""Builders and constants shared by the tests."""

import asyncio
from datetime import datetime, timedelta, timezone

from finance_tracker.models.payment import (
    Payment,
    PaymentCategory,
    PaymentCreate,
    PaymentMethod,
    PaymentStatus,
    PaymentType,
)


USER_ID = "user_test123"
OTHER_USER_ID = "user_other456"
BASE_TIME = datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def run(coro):
    """Run a coroutine to completion."""
    return asyncio.run(coro)


class StepClock:
    """Deterministic clock: each call returns a time one second later."""

    def __init__(self, start: datetime = BASE_TIME):
        self.current = start - timedelta(seconds=1)

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


def make_create(**overrides) -> PaymentCreate:
    data = {
        "amount": 25000,
        "status": PaymentStatus.COMPLETED,
        "method": PaymentMethod.CASH,
        "type": PaymentType.EXPENSE,
        "description": "Almuerzo",
        "category": PaymentCategory.FOOD,
    }
    data.update(overrides)
    return PaymentCreate(**data)


def make_payment(**overrides) -> Payment:
    data = {
        "id": "TRX-000001",
        "amount": 25000,
        "status": PaymentStatus.COMPLETED,
        "method": PaymentMethod.CASH,
        "type": PaymentType.EXPENSE,
        "description": "Almuerzo",
        "category": PaymentCategory.FOOD,
        "created_at": BASE_TIME,
        "updated_at": BASE_TIME,
    }
    data.update(overrides)
    return Payment(**data)


def payment_body(**overrides) -> dict:
    """JSON body for POST /payments."""
    body = {
        "amount": 25000,
        "status": "completed",
        "method": "efectivo",
        "type": "gasto",
        "description": "Almuerzo",
        "category": "alimentacion",
    }
    body.update(overrides)
    return body


