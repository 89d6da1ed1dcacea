"""
Data Models Package

This package contains all Pydantic models used by the finance tracker.
All data flowing through the system must conform to these schemas.
"""

from finance_tracker.models.payment import (
    Currency,
    Payment,
    PaymentCategory,
    PaymentCreate,
    PaymentFilters,
    PaymentMethod,
    PaymentStats,
    PaymentStatus,
    PaymentType,
    PaymentUpdate,
    utc_now,
)
from finance_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Payment models
    "Currency",
    "Payment",
    "PaymentCategory",
    "PaymentCreate",
    "PaymentFilters",
    "PaymentMethod",
    "PaymentStats",
    "PaymentStatus",
    "PaymentType",
    "PaymentUpdate",
    "utc_now",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
