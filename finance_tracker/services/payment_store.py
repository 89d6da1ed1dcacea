"""
Payment Record Store

Owns the lifecycle rules of a user's payment collection:
- ids are generated here and are unique within the collection
- createdAt is set once, updatedAt is refreshed on every mutation
- completedAt is set when a payment becomes completed and never cleared

Every call loads the full collection from storage; every mutation writes the
full collection back. Nothing is cached between calls.
"""

from datetime import datetime
from typing import Callable, Optional
from uuid import uuid4

from pydantic import ValidationError

from finance_tracker.models.payment import (
    Payment,
    PaymentCreate,
    PaymentStatus,
    PaymentUpdate,
    utc_now,
)
from finance_tracker.services.storage import (
    NotFoundError,
    PaymentStorageInterface,
    StorageUnavailableError,
    build_payment_storage,
)


ID_PREFIX = "TRX-"


def generate_payment_id() -> str:
    """A new opaque payment id, e.g. TRX-3F9A0C12B7DE."""
    return f"{ID_PREFIX}{uuid4().hex[:12].upper()}"


class PaymentStore:
    """
    Per-user payment collections on top of a PaymentStorageInterface.

    New payments are inserted at the front, so collections read newest first.
    """

    def __init__(
        self,
        storage: PaymentStorageInterface,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = generate_payment_id,
    ):
        self._storage = storage
        self._clock = clock
        self._id_factory = id_factory

    async def load_all(self, user_id: str) -> list[Payment]:
        """The user's full collection in stored order (empty if none yet)."""
        records = await self._storage.load(user_id)
        try:
            return [Payment.model_validate(record) for record in records]
        except ValidationError as e:
            # Skipping bad records would drop them on the next write
            raise StorageUnavailableError(
                f"Collection contains an invalid record: {e.error_count()} errors"
            )

    async def get(self, user_id: str, payment_id: str) -> Payment:
        """A single payment by id."""
        for payment in await self.load_all(user_id):
            if payment.id == payment_id:
                return payment
        raise NotFoundError(f"Payment not found: {payment_id}")

    async def append(self, user_id: str, data: PaymentCreate) -> Payment:
        """Create a payment and insert it at the front of the collection."""
        payments = await self.load_all(user_id)
        now = self._clock()

        payment = Payment(
            **data.model_dump(),
            id=self._new_id({p.id for p in payments}),
            created_at=now,
            updated_at=now,
            completed_at=now if data.status == PaymentStatus.COMPLETED else None,
        )

        payments.insert(0, payment)
        await self._persist(user_id, payments)
        return payment

    async def update(self, user_id: str, update: PaymentUpdate) -> Payment:
        """
        Merge the supplied fields into an existing payment.

        Raises:
            NotFoundError: If no payment has update.id (collection untouched)
        """
        payments = await self.load_all(user_id)

        index = next(
            (i for i, p in enumerate(payments) if p.id == update.id),
            None,
        )
        if index is None:
            raise NotFoundError(f"Payment not found: {update.id}")

        current = payments[index]
        # Never let updatedAt go backwards if the clock does
        now = max(self._clock(), current.updated_at)

        merged = current.model_dump()
        merged.update(update.changes())
        merged["updated_at"] = now
        if merged["status"] == PaymentStatus.COMPLETED and current.completed_at is None:
            merged["completed_at"] = now

        payments[index] = Payment.model_validate(merged)
        await self._persist(user_id, payments)
        return payments[index]

    async def remove(self, user_id: str, payment_id: str) -> bool:
        """
        Drop every payment with this id and persist the rest.

        Returns whether anything was removed; an unknown id is not an error.
        """
        payments = await self.load_all(user_id)
        remaining = [p for p in payments if p.id != payment_id]
        await self._persist(user_id, remaining)
        return len(remaining) != len(payments)

    def _new_id(self, taken: set[str]) -> str:
        payment_id = self._id_factory()
        while payment_id in taken:
            payment_id = self._id_factory()
        return payment_id

    async def _persist(self, user_id: str, payments: list[Payment]) -> None:
        await self._storage.save(user_id, [p.to_record() for p in payments])


def build_payment_store(
    storage: Optional[PaymentStorageInterface] = None,
) -> PaymentStore:
    """Store bound to the configured file storage unless one is given."""
    return PaymentStore(storage or build_payment_storage())
