"""
Tests for the payment record store and the flow on top of it.
"""

import pytest

from finance_tracker.audit import AuditLogger
from finance_tracker.models.audit import AuditEventType
from finance_tracker.models.payment import PaymentStatus, PaymentType, PaymentUpdate
from finance_tracker.orchestrator import PaymentFlow
from finance_tracker.services.payment_store import (
    ID_PREFIX,
    PaymentStore,
    generate_payment_id,
)
from finance_tracker.services.storage import (
    InMemoryPaymentStorage,
    NotFoundError,
    StorageUnavailableError,
)
from tests.helpers import BASE_TIME, OTHER_USER_ID, USER_ID, make_create, make_payment, run


class TestGeneratePaymentId:
    """Tests for id generation."""

    def test_format(self):
        """Test the TRX- prefix followed by 12 uppercase hex digits."""
        payment_id = generate_payment_id()
        assert payment_id.startswith(ID_PREFIX)
        suffix = payment_id[len(ID_PREFIX):]
        assert len(suffix) == 12
        assert suffix == suffix.upper()
        int(suffix, 16)

    def test_ids_differ(self):
        """Test that consecutive ids are distinct."""
        assert len({generate_payment_id() for _ in range(100)}) == 100


class TestAppend:
    """Tests for PaymentStore.append."""

    def test_new_payment_gets_id_and_timestamps(self, store):
        """Test that createdAt equals updatedAt on a new payment."""
        payment = run(store.append(USER_ID, make_create()))
        assert payment.id.startswith(ID_PREFIX)
        assert payment.created_at == BASE_TIME
        assert payment.updated_at == payment.created_at

    def test_completed_payment_gets_completed_at(self, store):
        """Test that creating a completed payment stamps completedAt."""
        payment = run(store.append(USER_ID, make_create(status=PaymentStatus.COMPLETED)))
        assert payment.completed_at == payment.created_at

    def test_pending_payment_has_no_completed_at(self, store):
        """Test that a pending payment has no completedAt."""
        payment = run(store.append(USER_ID, make_create(status=PaymentStatus.PENDING)))
        assert payment.completed_at is None

    def test_newest_first(self, store):
        """Test that new payments go to the front of the collection."""
        first = run(store.append(USER_ID, make_create(description="Primero")))
        second = run(store.append(USER_ID, make_create(description="Segundo")))
        assert [p.id for p in run(store.load_all(USER_ID))] == [second.id, first.id]

    def test_ids_unique_within_collection(self, store):
        """Test that N appends produce N distinct ids."""
        for _ in range(20):
            run(store.append(USER_ID, make_create()))
        ids = [p.id for p in run(store.load_all(USER_ID))]
        assert len(set(ids)) == 20

    def test_colliding_id_is_regenerated(self, storage, clock):
        """Test that a generated id already in the collection is retried."""
        ids = iter(["TRX-AAAAAAAAAAAA", "TRX-AAAAAAAAAAAA", "TRX-BBBBBBBBBBBB"])
        store = PaymentStore(storage, clock=clock, id_factory=lambda: next(ids))

        first = run(store.append(USER_ID, make_create()))
        second = run(store.append(USER_ID, make_create()))

        assert first.id == "TRX-AAAAAAAAAAAA"
        assert second.id == "TRX-BBBBBBBBBBBB"

    def test_stored_record_is_camel_case(self, store, storage):
        """Test that the persisted record uses the camelCase layout."""
        run(store.append(USER_ID, make_create()))
        record = run(storage.load(USER_ID))[0]
        assert {"id", "createdAt", "updatedAt", "completedAt"} <= set(record)

    def test_users_are_isolated(self, store):
        """Test that one user's payments never show up for another."""
        run(store.append(USER_ID, make_create()))
        assert run(store.load_all(OTHER_USER_ID)) == []


class TestUpdate:
    """Tests for PaymentStore.update."""

    def test_partial_update_keeps_other_fields(self, store):
        """Test that unsupplied fields are left unchanged."""
        created = run(store.append(USER_ID, make_create(notes="Con equipo")))
        update = PaymentUpdate.model_validate({"id": created.id, "amount": 30000})

        updated = run(store.update(USER_ID, update))

        assert updated.amount == 30000
        assert updated.description == created.description
        assert updated.notes == "Con equipo"
        assert updated.created_at == created.created_at
        assert updated.updated_at > created.updated_at

    def test_update_persists(self, store):
        """Test that an update is written back to storage."""
        created = run(store.append(USER_ID, make_create()))
        run(store.update(USER_ID, PaymentUpdate(id=created.id, type=PaymentType.INCOME)))
        assert run(store.get(USER_ID, created.id)).type == PaymentType.INCOME

    def test_becoming_completed_sets_completed_at(self, store):
        """Test that moving to completed stamps completedAt."""
        created = run(store.append(USER_ID, make_create(status=PaymentStatus.PENDING)))
        updated = run(store.update(USER_ID, PaymentUpdate(id=created.id, status=PaymentStatus.COMPLETED)))
        assert updated.completed_at == updated.updated_at

    def test_completed_at_not_overwritten(self, store):
        """Test that a later edit keeps the original completedAt."""
        created = run(store.append(USER_ID, make_create(status=PaymentStatus.COMPLETED)))
        updated = run(store.update(USER_ID, PaymentUpdate(id=created.id, amount=1)))
        assert updated.completed_at == created.completed_at

    def test_completed_at_kept_when_reopened(self, store):
        """Test that moving back to pending keeps the original completedAt."""
        created = run(store.append(USER_ID, make_create(status=PaymentStatus.COMPLETED)))
        updated = run(store.update(USER_ID, PaymentUpdate(id=created.id, status=PaymentStatus.PENDING)))
        assert updated.status == PaymentStatus.PENDING
        assert updated.completed_at == created.completed_at

    def test_position_preserved(self, store):
        """Test that an updated payment stays where it was."""
        older = run(store.append(USER_ID, make_create(description="Viejo")))
        newer = run(store.append(USER_ID, make_create(description="Nuevo")))
        run(store.update(USER_ID, PaymentUpdate(id=older.id, description="Editado")))
        assert [p.id for p in run(store.load_all(USER_ID))] == [newer.id, older.id]

    def test_record_with_naive_timestamps_can_be_updated(self, clock):
        """Test updating a record whose stored timestamps have no offset."""
        record = make_payment(id="TRX-1").to_record()
        record["createdAt"] = "2025-01-01T00:00:00"
        record["updatedAt"] = "2025-01-01T00:00:00"
        storage = InMemoryPaymentStorage({USER_ID: [record]})
        store = PaymentStore(storage, clock=clock)

        updated = run(store.update(USER_ID, PaymentUpdate(id="TRX-1", amount=6)))

        assert updated.amount == 6
        assert updated.updated_at == BASE_TIME
        assert run(storage.load(USER_ID))[0]["createdAt"].startswith("2025-01-01T00:00:00")

    def test_unknown_id_raises_and_changes_nothing(self, store, storage):
        """Test that updating a missing id leaves the collection untouched."""
        run(store.append(USER_ID, make_create()))
        before = run(storage.load(USER_ID))
        saves = storage.save_count

        with pytest.raises(NotFoundError):
            run(store.update(USER_ID, PaymentUpdate(id="TRX-MISSING", amount=1)))

        assert run(storage.load(USER_ID)) == before
        assert storage.save_count == saves

    def test_other_users_payment_not_found(self, store):
        """Test that a user can't update another user's payment."""
        created = run(store.append(USER_ID, make_create()))
        with pytest.raises(NotFoundError):
            run(store.update(OTHER_USER_ID, PaymentUpdate(id=created.id, amount=1)))


class TestRemoveAndGet:
    """Tests for PaymentStore.remove and PaymentStore.get."""

    def test_remove(self, store):
        """Test removing an existing payment."""
        created = run(store.append(USER_ID, make_create()))
        assert run(store.remove(USER_ID, created.id)) is True
        assert run(store.load_all(USER_ID)) == []

    def test_remove_is_idempotent(self, store):
        """Test that removing twice reports nothing removed the second time."""
        created = run(store.append(USER_ID, make_create()))
        run(store.remove(USER_ID, created.id))
        assert run(store.remove(USER_ID, created.id)) is False

    def test_remove_unknown_leaves_others(self, store):
        """Test that removing an unknown id keeps the collection as is."""
        created = run(store.append(USER_ID, make_create()))
        assert run(store.remove(USER_ID, "TRX-NOPE")) is False
        assert [p.id for p in run(store.load_all(USER_ID))] == [created.id]

    def test_get(self, store):
        """Test fetching a single payment by id."""
        created = run(store.append(USER_ID, make_create(description="Taxi")))
        assert run(store.get(USER_ID, created.id)).description == "Taxi"

    def test_get_missing_raises(self, store):
        """Test that fetching an unknown id raises NotFoundError."""
        with pytest.raises(NotFoundError):
            run(store.get(USER_ID, "TRX-NOPE"))

    def test_invalid_stored_record_raises(self, clock):
        """Test that a record that fails validation makes the load fail."""
        storage = InMemoryPaymentStorage({USER_ID: [{"id": "TRX-1", "amount": "lots"}]})
        store = PaymentStore(storage, clock=clock)
        with pytest.raises(StorageUnavailableError):
            run(store.load_all(USER_ID))


class FailingStorage(InMemoryPaymentStorage):
    """Storage whose every operation fails."""

    async def load(self, user_id):
        raise StorageUnavailableError("disk on fire")

    async def save(self, user_id, records):
        raise StorageUnavailableError("disk on fire")


class TestPaymentFlow:
    """Tests for the orchestrating flow and its audit trail."""

    def test_create_is_audited(self, flow, audit_storage):
        """Test that a create records a payment_created event."""
        payment = run(flow.create_payment(USER_ID, make_create(), correlation_id="req-1"))
        event = audit_storage.events[-1]
        assert event.event_type == AuditEventType.PAYMENT_CREATED
        assert event.entity_id == payment.id
        assert event.user_id == USER_ID
        assert event.correlation_id == "req-1"

    def test_update_audits_changed_fields(self, flow, audit_storage):
        """Test that the update event lists the fields that were sent."""
        payment = run(flow.create_payment(USER_ID, make_create()))
        update = PaymentUpdate.model_validate({"id": payment.id, "status": "pending", "amount": 5})
        run(flow.update_payment(USER_ID, update))
        assert audit_storage.events[-1].details["fields"] == ["amount", "status"]

    def test_delete_audits_outcome(self, flow, audit_storage):
        """Test that the delete event says whether anything was removed."""
        run(flow.delete_payment(USER_ID, "TRX-NOPE"))
        event = audit_storage.events[-1]
        assert event.event_type == AuditEventType.PAYMENT_DELETED
        assert event.details["removed"] is False

    def test_get_payment(self, flow):
        """Test fetching one payment through the flow."""
        payment = run(flow.create_payment(USER_ID, make_create()))
        assert run(flow.get_payment(USER_ID, payment.id)).id == payment.id
        with pytest.raises(NotFoundError):
            run(flow.get_payment(OTHER_USER_ID, payment.id))

    def test_not_found_is_not_a_storage_error(self, flow, audit_storage):
        """Test that a missing id is not audited as a storage failure."""
        with pytest.raises(NotFoundError):
            run(flow.update_payment(USER_ID, PaymentUpdate(id="TRX-NOPE", amount=1)))
        assert all(e.event_type != AuditEventType.STORAGE_ERROR for e in audit_storage.events)

    def test_stats_ignore_list_filters(self, flow):
        """Test that stats cover the whole collection."""
        run(flow.create_payment(USER_ID, make_create(amount=100, type=PaymentType.INCOME)))
        run(flow.create_payment(USER_ID, make_create(amount=40)))
        stats = run(flow.get_stats(USER_ID))
        assert stats.balance == 60
        assert stats.completed_count == 2

    def test_category_summary(self, flow):
        """Test the per-category breakdown of expenses."""
        run(flow.create_payment(USER_ID, make_create(amount=100)))
        run(flow.create_payment(USER_ID, make_create(amount=50, category="transporte")))
        summary = run(flow.get_category_summary(USER_ID, PaymentType.EXPENSE))
        assert summary == {"alimentacion": 100, "transporte": 50}

    def test_storage_failure_audited_and_reraised(self, clock, audit_storage):
        """Test that storage failures are audited and then propagate."""
        flow = PaymentFlow(PaymentStore(FailingStorage(), clock=clock), AuditLogger(audit_storage))

        with pytest.raises(StorageUnavailableError):
            run(flow.create_payment(USER_ID, make_create(), correlation_id="req-9"))

        event = audit_storage.events[-1]
        assert event.event_type == AuditEventType.STORAGE_ERROR
        assert event.details["operation"] == "create"
        assert event.error_message == "disk on fire"
