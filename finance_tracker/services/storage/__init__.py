"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Per-user JSON files are the production backend; the in-memory backend is
for tests.
"""

from finance_tracker.services.storage.interface import (
    AuditStorageInterface,
    NotFoundError,
    PaymentStorageInterface,
    StorageError,
    StorageUnavailableError,
)
from finance_tracker.services.storage.json_file import (
    JsonFilePaymentStorage,
    JsonLinesAuditStorage,
    build_payment_storage,
)
from finance_tracker.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryPaymentStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "PaymentStorageInterface",
    # Exceptions
    "NotFoundError",
    "StorageError",
    "StorageUnavailableError",
    # File implementation
    "JsonFilePaymentStorage",
    "JsonLinesAuditStorage",
    "build_payment_storage",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryPaymentStorage",
]
