"""
Main Orchestrator for the Finance Tracker

This module ties together the record store, the query layer and the audit
logger, and defines the flows the HTTP layer calls:
1. List (load → filter → respond)
2. Create / Update / Delete (load → mutate → persist → audit)
3. Stats (load → aggregate → respond)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Every call is scoped to the user id it is given; it never looks elsewhere
- Stats are computed over the full collection, never a filtered view
- Every mutation and every storage failure is audited

Storage failures are audited here and re-raised; turning them into a
generic response is the HTTP layer's job.
"""

from typing import Optional

from finance_tracker.audit import AuditLogger
from finance_tracker.config import Settings, get_settings
from finance_tracker.models.payment import (
    Payment,
    PaymentCreate,
    PaymentFilters,
    PaymentStats,
    PaymentType,
    PaymentUpdate,
)
from finance_tracker.queries import apply_filters, compute_stats, summarize_by_category
from finance_tracker.services.payment_store import PaymentStore
from finance_tracker.services.storage import (
    AuditStorageInterface,
    JsonLinesAuditStorage,
    NotFoundError,
    PaymentStorageInterface,
    StorageError,
    build_payment_storage,
)


class PaymentFlow:
    """
    Orchestrates every payment operation for one authenticated user.

    The user id always comes from the caller's auth context, never from
    request data.
    """

    def __init__(
        self,
        store: PaymentStore,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._audit_logger = audit_logger or AuditLogger()

    @property
    def store(self) -> PaymentStore:
        return self._store

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    async def list_payments(
        self,
        user_id: str,
        filters: Optional[PaymentFilters] = None,
        correlation_id: Optional[str] = None,
    ) -> list[Payment]:
        """The user's payments matching filters, newest first."""
        try:
            payments = await self._store.load_all(user_id)
        except StorageError as e:
            await self._storage_failed(user_id, "list", e, correlation_id)
            raise

        result = apply_filters(payments, filters)

        await self._audit_logger.log_payments_listed(
            user_id=user_id,
            filters=filters.model_dump(mode="json", exclude_defaults=True) if filters else {},
            result_count=len(result),
            correlation_id=correlation_id,
        )
        return result

    async def get_payment(
        self,
        user_id: str,
        payment_id: str,
        correlation_id: Optional[str] = None,
    ) -> Payment:
        try:
            return await self._store.get(user_id, payment_id)
        except NotFoundError:
            raise
        except StorageError as e:
            await self._storage_failed(user_id, "get", e, correlation_id)
            raise

    async def create_payment(
        self,
        user_id: str,
        data: PaymentCreate,
        correlation_id: Optional[str] = None,
    ) -> Payment:
        try:
            payment = await self._store.append(user_id, data)
        except StorageError as e:
            await self._storage_failed(user_id, "create", e, correlation_id)
            raise

        await self._audit_logger.log_payment_created(
            user_id=user_id,
            payment_id=payment.id,
            correlation_id=correlation_id,
        )
        return payment

    async def update_payment(
        self,
        user_id: str,
        update: PaymentUpdate,
        correlation_id: Optional[str] = None,
    ) -> Payment:
        """
        Raises:
            NotFoundError: If the user has no payment with update.id
        """
        try:
            payment = await self._store.update(user_id, update)
        except NotFoundError:
            raise
        except StorageError as e:
            await self._storage_failed(user_id, "update", e, correlation_id)
            raise

        await self._audit_logger.log_payment_updated(
            user_id=user_id,
            payment_id=payment.id,
            fields=list(update.changes()),
            correlation_id=correlation_id,
        )
        return payment

    async def delete_payment(
        self,
        user_id: str,
        payment_id: str,
        correlation_id: Optional[str] = None,
    ) -> bool:
        """Idempotent: deleting an unknown id succeeds and changes nothing."""
        try:
            removed = await self._store.remove(user_id, payment_id)
        except StorageError as e:
            await self._storage_failed(user_id, "delete", e, correlation_id)
            raise

        await self._audit_logger.log_payment_deleted(
            user_id=user_id,
            payment_id=payment_id,
            removed=removed,
            correlation_id=correlation_id,
        )
        return removed

    async def get_stats(
        self,
        user_id: str,
        correlation_id: Optional[str] = None,
    ) -> PaymentStats:
        """Aggregate stats over the user's full collection."""
        try:
            payments = await self._store.load_all(user_id)
        except StorageError as e:
            await self._storage_failed(user_id, "stats", e, correlation_id)
            raise

        await self._audit_logger.log_stats_computed(
            user_id=user_id,
            record_count=len(payments),
            correlation_id=correlation_id,
        )
        return compute_stats(payments)

    async def get_category_summary(
        self,
        user_id: str,
        payment_type: Optional[PaymentType] = None,
        correlation_id: Optional[str] = None,
    ) -> dict[str, int]:
        """Completed totals per category over the user's full collection."""
        try:
            payments = await self._store.load_all(user_id)
        except StorageError as e:
            await self._storage_failed(user_id, "category_summary", e, correlation_id)
            raise

        return summarize_by_category(payments, payment_type)

    async def _storage_failed(
        self,
        user_id: str,
        operation: str,
        error: Exception,
        correlation_id: Optional[str],
    ) -> None:
        await self._audit_logger.log_storage_error(
            user_id=user_id,
            operation=operation,
            error_message=str(error),
            correlation_id=correlation_id,
        )


def create_app_components(
    settings: Optional[Settings] = None,
    storage: Optional[PaymentStorageInterface] = None,
    audit_storage: Optional[AuditStorageInterface] = None,
) -> PaymentFlow:
    """
    Factory function to create the payment flow.

    Uses the configured JSON file storage unless a storage is injected
    (tests pass the in-memory backends).
    """
    settings = settings or get_settings()
    storage_settings = settings.storage

    if storage is None:
        storage = build_payment_storage(storage_settings)

    if audit_storage is None and storage_settings.audit_log_path:
        audit_storage = JsonLinesAuditStorage(storage_settings.audit_log_path)

    return PaymentFlow(
        store=PaymentStore(storage),
        audit_logger=AuditLogger(audit_storage),
    )
