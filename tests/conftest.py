"""
Shared test fixtures.

Everything runs against the in-memory store and the static auth provider;
no test talks to Supabase.
"""

from datetime import date
from uuid import UUID

import pytest

from finance_tracker.audit import AuditLogger
from finance_tracker.events import RecordEventBus
from finance_tracker.models.records import User
from finance_tracker.services.auth import StaticAuthProvider
from finance_tracker.services.records import RecordService
from finance_tracker.services.storage import InMemoryRecordStore, StoreError


TODAY = date(2024, 3, 15)

USER_ID = UUID("11111111-1111-1111-1111-111111111111")
OTHER_USER_ID = UUID("22222222-2222-2222-2222-222222222222")


class FailingRecordStore(InMemoryRecordStore):
    """In-memory store whose selected operations raise StoreError."""

    def __init__(self, fail_on=("insert", "query", "update", "delete"), message="connection refused"):
        super().__init__()
        self.fail_on = set(fail_on)
        self.message = message

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.fail_on:
            raise StoreError(self.message)

    async def insert(self, collection, record):
        self._maybe_fail("insert")
        return await super().insert(collection, record)

    async def query(self, collection, filters=(), order_by=()):
        self._maybe_fail("query")
        return await super().query(collection, filters, order_by)

    async def update(self, collection, filters, patch):
        self._maybe_fail("update")
        return await super().update(collection, filters, patch)

    async def delete(self, collection, filters):
        self._maybe_fail("delete")
        return await super().delete(collection, filters)


def transaction_row(type="expense", amount="100", category="Food", day="2024-03-01",
                    user_id=USER_ID, **extra):
    row = {
        "user_id": str(user_id),
        "type": type,
        "category": category,
        "amount": amount,
        "description": None,
        "transaction_date": day,
    }
    row.update(extra)
    return row


def debt_row(type="borrowed", amount="100", person_name="Rahim", day="2024-03-01",
             status="pending", user_id=USER_ID, **extra):
    row = {
        "user_id": str(user_id),
        "type": type,
        "person_name": person_name,
        "amount": amount,
        "description": None,
        "debt_date": day,
        "status": status,
        "settled_date": None,
    }
    row.update(extra)
    return row


@pytest.fixture
def user():
    return User(id=USER_ID, email="owner@example.com")


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def auth(user):
    return StaticAuthProvider(user=user)


@pytest.fixture
def audit_logger():
    return AuditLogger()


@pytest.fixture
def event_bus():
    return RecordEventBus()


@pytest.fixture
def records(store, auth, audit_logger, event_bus):
    return RecordService(
        store=store,
        auth=auth,
        audit_logger=audit_logger,
        event_bus=event_bus,
        today=lambda: TODAY,
    )


@pytest.fixture
def signed_out_records(store, audit_logger, event_bus):
    return RecordService(
        store=store,
        auth=StaticAuthProvider(),
        audit_logger=audit_logger,
        event_bus=event_bus,
        today=lambda: TODAY,
    )
