"""
In-Memory Storage Implementation

Dict-backed stand-ins for the file storage, used by tests and local demos.
Collections are deep-copied on the way in and out so callers can't mutate
stored state behind the store's back, the same isolation a file gives.
"""

import copy
from typing import Any, Optional

from finance_tracker.models.audit import AuditEvent
from finance_tracker.services.storage.interface import (
    AuditStorageInterface,
    PaymentStorageInterface,
)


class InMemoryPaymentStorage(PaymentStorageInterface):
    """Payment collections kept in a dict keyed by user id."""

    def __init__(self, initial: Optional[dict[str, list[dict[str, Any]]]] = None):
        self._collections: dict[str, list[dict[str, Any]]] = copy.deepcopy(initial or {})
        self.save_count = 0

    async def load(self, user_id: str) -> list[dict[str, Any]]:
        return copy.deepcopy(self._collections.get(user_id, []))

    async def save(self, user_id: str, records: list[dict[str, Any]]) -> None:
        self._collections[user_id] = copy.deepcopy(records)
        self.save_count += 1

    def has_collection(self, user_id: str) -> bool:
        return user_id in self._collections


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        return list(reversed(self.events))[:limit]
