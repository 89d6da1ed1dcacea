"""
Audit Logger

DESIGN DECISION: Every change to a user's collection is logged.
This provides:
1. Complete traceability
2. Debugging capability
3. A way to spot storage failures that callers only see as a generic 500

The audit logger:
- Is async so it fits the request flow
- Gracefully handles failures (doesn't crash the request if logging fails)
- Supports correlation IDs (the X-Request-ID) to trace related events
"""

import logging
import sys
from typing import Optional
from uuid import uuid4

import structlog

from finance_tracker.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from finance_tracker.services.storage import AuditStorageInterface


def configure_logging(level: str = "INFO", json_logs: bool = True) -> None:
    """
    Configure structlog (and the stdlib logging it sits on).

    Call once at process start-up.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
        force=True,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("finance_tracker.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_payment_created(
        self,
        user_id: str,
        payment_id: str,
        correlation_id: Optional[str] = None,
    ) -> None:
        event = AuditEventBuilder.payment_created(
            user_id=user_id,
            payment_id=payment_id,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_payment_updated(
        self,
        user_id: str,
        payment_id: str,
        fields: list[str],
        correlation_id: Optional[str] = None,
    ) -> None:
        event = AuditEventBuilder.payment_updated(
            user_id=user_id,
            payment_id=payment_id,
            fields=fields,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_payment_deleted(
        self,
        user_id: str,
        payment_id: str,
        removed: bool,
        correlation_id: Optional[str] = None,
    ) -> None:
        event = AuditEventBuilder.payment_deleted(
            user_id=user_id,
            payment_id=payment_id,
            removed=removed,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_payments_listed(
        self,
        user_id: str,
        filters: dict,
        result_count: int,
        correlation_id: Optional[str] = None,
    ) -> None:
        event = AuditEventBuilder.payments_listed(
            user_id=user_id,
            filters=filters,
            result_count=result_count,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_stats_computed(
        self,
        user_id: str,
        record_count: int,
        correlation_id: Optional[str] = None,
    ) -> None:
        event = AuditEventBuilder.stats_computed(
            user_id=user_id,
            record_count=record_count,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_unauthenticated(
        self,
        method: str,
        path: str,
        correlation_id: Optional[str] = None,
    ) -> None:
        event = AuditEventBuilder.unauthenticated_request(
            method=method,
            path=path,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_storage_error(
        self,
        user_id: Optional[str],
        operation: str,
        error_message: str,
        correlation_id: Optional[str] = None,
    ) -> None:
        event = AuditEventBuilder.storage_error(
            user_id=user_id,
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
            user_id=user_id,
        )
        await self.log(event)


def create_correlation_id() -> str:
    """
    Create a new correlation ID for tracking related events.

    Used when a request arrives without an X-Request-ID.
    """
    return str(uuid4())
