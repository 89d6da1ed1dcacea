"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Use per-user JSON files in production
2. Use in-memory storage for testing
3. Move to a real database later without touching the record store

The interface is intentionally tiny. A user's collection is the unit of
persistence: it is loaded whole and saved whole. There is no locking; two
concurrent writers for the same user race and the last one wins.
"""

from abc import ABC, abstractmethod
from typing import Any

from finance_tracker.models.audit import AuditEvent


class PaymentStorageInterface(ABC):
    """
    Abstract interface for per-user payment collections.

    Collections are serialized records (camelCase dicts), newest first.
    """

    @abstractmethod
    async def load(self, user_id: str) -> list[dict[str, Any]]:
        """
        Load a user's full collection.

        Args:
            user_id: Authenticated owner of the collection

        Returns:
            The stored records in order; an empty list if the user
            has no collection yet

        Raises:
            StorageUnavailableError: If the collection exists but can't be read
        """
        pass

    @abstractmethod
    async def save(self, user_id: str, records: list[dict[str, Any]]) -> None:
        """
        Replace a user's full collection.

        Args:
            user_id: Authenticated owner of the collection
            records: Every record the collection should contain

        Raises:
            StorageUnavailableError: If the collection can't be written
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class StorageUnavailableError(StorageError):
    """The backing store could not be read or written."""
    pass
