"""
Shared fixtures.

Test strategy:
1. Unit tests for models, filters and aggregation (pure functions)
2. Store/flow tests over the in-memory storage
3. HTTP tests through FastAPI's TestClient
4. File storage tests against pytest's tmp_path
"""

import pytest
from fastapi.testclient import TestClient

from finance_tracker.api import create_app
from finance_tracker.audit import AuditLogger
from finance_tracker.orchestrator import PaymentFlow
from finance_tracker.services.payment_store import PaymentStore
from finance_tracker.services.storage import InMemoryAuditStorage, InMemoryPaymentStorage
from tests.helpers import USER_ID, StepClock


@pytest.fixture
def storage():
    return InMemoryPaymentStorage()


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def store(storage, clock):
    return PaymentStore(storage, clock=clock)


@pytest.fixture
def flow(store, audit_storage):
    return PaymentFlow(store, AuditLogger(audit_storage))


@pytest.fixture
def app(flow):
    return create_app(flow=flow)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def auth_headers():
    return {"X-User-Id": USER_ID}
