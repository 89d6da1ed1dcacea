"""
Tests for the audit logger.
"""

from finance_tracker.audit import AuditLogger, create_correlation_id
from finance_tracker.models.audit import AuditEventBuilder, AuditEventType, AuditSeverity
from finance_tracker.services.storage import InMemoryAuditStorage, StorageUnavailableError
from tests.helpers import USER_ID, run


class ExplodingAuditStorage(InMemoryAuditStorage):
    async def append_event(self, event):
        raise StorageUnavailableError("audit disk gone")


class TestAuditLogger:
    """Tests for AuditLogger."""

    def test_log_persists_event(self):
        """Test that an event is written to the audit storage."""
        storage = InMemoryAuditStorage()
        logger = AuditLogger(storage)
        event = AuditEventBuilder.payment_created(USER_ID, "TRX-1", "req-1")

        assert run(logger.log(event)) is True
        assert storage.events == [event]

    def test_log_without_storage(self):
        """Test that logging works with no audit storage configured."""
        event = AuditEventBuilder.payment_created(USER_ID, "TRX-1")
        assert run(AuditLogger().log(event)) is True

    def test_storage_failure_does_not_raise(self):
        """Test that a broken audit store never breaks the request."""
        logger = AuditLogger(ExplodingAuditStorage())
        event = AuditEventBuilder.payment_created(USER_ID, "TRX-1")
        assert run(logger.log(event)) is False

    def test_helpers_build_expected_events(self):
        """Test the convenience helpers and their severities."""
        storage = InMemoryAuditStorage()
        logger = AuditLogger(storage)

        run(logger.log_payments_listed(USER_ID, {"status": "completed"}, 3, "req"))
        run(logger.log_stats_computed(USER_ID, 10, "req"))
        run(logger.log_unauthenticated("GET", "/payments", "req"))
        run(logger.log_error("KeyError", "boom", {"path": "/payments"}, "req"))

        types = [e.event_type for e in storage.events]
        assert types == [
            AuditEventType.PAYMENTS_LISTED,
            AuditEventType.STATS_COMPUTED,
            AuditEventType.UNAUTHENTICATED_REQUEST,
            AuditEventType.SYSTEM_ERROR,
        ]
        assert storage.events[0].severity == AuditSeverity.DEBUG
        assert storage.events[2].severity == AuditSeverity.WARNING
        assert storage.events[2].user_id is None

    def test_error_event_attributed_to_user(self):
        """Test that a system error can name the caller it happened to."""
        storage = InMemoryAuditStorage()
        logger = AuditLogger(storage)
        run(logger.log_error("RuntimeError", "boom", correlation_id="req", user_id=USER_ID))

        event = storage.events[-1]
        assert event.event_type == AuditEventType.SYSTEM_ERROR
        assert event.user_id == USER_ID
        assert event.severity == AuditSeverity.ERROR

    def test_recent_events_newest_first(self):
        """Test reading back the most recent event first."""
        storage = InMemoryAuditStorage()
        logger = AuditLogger(storage)
        run(logger.log_payment_created(USER_ID, "TRX-1"))
        run(logger.log_payment_deleted(USER_ID, "TRX-1", True))

        recent = run(storage.get_recent_events(limit=1))
        assert [e.event_type for e in recent] == [AuditEventType.PAYMENT_DELETED]


def test_correlation_ids_are_unique():
    """Test that each correlation id is fresh."""
    assert create_correlation_id() != create_correlation_id()
