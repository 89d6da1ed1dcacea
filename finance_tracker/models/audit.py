"""
Audit Models for the Finance Tracker

Every mutation of a user's collection, and every failure, is recorded as an
audit event. This provides:
1. Traceability of who changed what, and when
2. Debugging information when things go wrong
3. A trail that can be correlated with the X-Request-ID of each call

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
Payment amounts and descriptions are kept out of events; only identifiers are logged.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from finance_tracker.models.payment import utc_now


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Persistence
    PAYMENT_CREATED = "payment_created"
    PAYMENT_UPDATED = "payment_updated"
    PAYMENT_DELETED = "payment_deleted"

    # Reads
    PAYMENTS_LISTED = "payments_listed"
    STATS_COMPUTED = "stats_computed"

    # Access
    UNAUTHENTICATED_REQUEST = "unauthenticated_request"

    # System events
    STORAGE_ERROR = "storage_error"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    user_id: Optional[str] = Field(
        default=None,
        description="Owner of the collection the event touched"
    )
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'payment', 'collection')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - ties the event to one HTTP request
    correlation_id: Optional[str] = Field(
        default=None,
        description="Request id shared by all events of one call"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "user_id": self.user_id,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": self.correlation_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_json_line(self) -> str:
        """One line of the JSON-lines audit file."""
        return json.dumps(self.model_dump(mode="json"), ensure_ascii=False)


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.payment_created(user_id, payment_id, correlation_id)
        event = AuditEventBuilder.storage_error(user_id, "save", message)
    """

    @staticmethod
    def payment_created(
        user_id: str,
        payment_id: str,
        correlation_id: Optional[str] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_CREATED,
            user_id=user_id,
            entity_type="payment",
            entity_id=payment_id,
            correlation_id=correlation_id,
            description=f"Payment created: {payment_id}",
            is_user_action=True,
        )

    @staticmethod
    def payment_updated(
        user_id: str,
        payment_id: str,
        fields: list[str],
        correlation_id: Optional[str] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_UPDATED,
            user_id=user_id,
            entity_type="payment",
            entity_id=payment_id,
            correlation_id=correlation_id,
            description=f"Payment updated: {payment_id}",
            details={
                "fields": sorted(fields),
            },
            is_user_action=True,
        )

    @staticmethod
    def payment_deleted(
        user_id: str,
        payment_id: str,
        removed: bool,
        correlation_id: Optional[str] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_DELETED,
            user_id=user_id,
            entity_type="payment",
            entity_id=payment_id,
            correlation_id=correlation_id,
            description=(
                f"Payment deleted: {payment_id}"
                if removed
                else f"Delete requested for unknown payment: {payment_id}"
            ),
            details={
                "removed": removed,
            },
            is_user_action=True,
        )

    @staticmethod
    def payments_listed(
        user_id: str,
        filters: dict,
        result_count: int,
        correlation_id: Optional[str] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENTS_LISTED,
            severity=AuditSeverity.DEBUG,
            user_id=user_id,
            entity_type="collection",
            correlation_id=correlation_id,
            description=f"Listed payments: {result_count} results",
            details={
                "filters": filters,
                "result_count": result_count,
            },
        )

    @staticmethod
    def stats_computed(
        user_id: str,
        record_count: int,
        correlation_id: Optional[str] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATS_COMPUTED,
            severity=AuditSeverity.DEBUG,
            user_id=user_id,
            entity_type="collection",
            correlation_id=correlation_id,
            description=f"Stats computed over {record_count} payments",
            details={
                "record_count": record_count,
            },
        )

    @staticmethod
    def unauthenticated_request(
        method: str,
        path: str,
        correlation_id: Optional[str] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.UNAUTHENTICATED_REQUEST,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"Unauthenticated request: {method} {path}",
            details={
                "method": method,
                "path": path,
            },
        )

    @staticmethod
    def storage_error(
        user_id: Optional[str],
        operation: str,
        error_message: str,
        correlation_id: Optional[str] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            user_id=user_id,
            entity_type="collection",
            correlation_id=correlation_id,
            description=f"Storage failure during {operation}",
            error_message=error_message,
            details={
                "operation": operation,
            },
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[str] = None,
        user_id: Optional[str] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            user_id=user_id,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
