"""Services package."""

from finance_tracker.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    InMemoryPaymentStorage,
    JsonFilePaymentStorage,
    JsonLinesAuditStorage,
    NotFoundError,
    PaymentStorageInterface,
    StorageError,
    StorageUnavailableError,
    build_payment_storage,
)

__all__ = [
    "AuditStorageInterface",
    "InMemoryAuditStorage",
    "InMemoryPaymentStorage",
    "JsonFilePaymentStorage",
    "JsonLinesAuditStorage",
    "NotFoundError",
    "PaymentStorageInterface",
    "StorageError",
    "StorageUnavailableError",
    "build_payment_storage",
]
