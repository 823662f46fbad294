"""Tests for the view-models and the page composition."""

import asyncio
import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from finance_tracker.audit import AuditLogger
from finance_tracker.events import RecordEventBus
from finance_tracker.models.audit import AuditEventType
from finance_tracker.models.records import (
    DEBTS,
    TRANSACTIONS,
    Debt,
    DebtStatus,
    DebtType,
    Transaction,
    TransactionType,
)
from finance_tracker.orchestrator import FinancePage, create_app_components
from finance_tracker.services.auth import StaticAuthProvider
from finance_tracker.services.records import RecordService
from finance_tracker.services.storage import InMemoryRecordStore
from finance_tracker.views import (
    DashboardView,
    DebtFormView,
    DebtListView,
    FetchGeneration,
    NotificationLevel,
    RefreshingView,
    TransactionFormView,
    TransactionListView,
)
from finance_tracker.views.formatting import (
    debt_badge,
    debt_date_line,
    format_money,
    transaction_amount_label,
)

from conftest import TODAY, FailingRecordStore, debt_row, transaction_row


def messages(view):
    return [(n.level, n.message) for n in view.drain_notifications()]


class GatedView(RefreshingView[str]):
    """A view whose fetches complete only when the test releases them."""

    def __init__(self, records):
        super().__init__(records)
        self.content = None
        self.releases = []

    async def _fetch(self):
        release = asyncio.get_running_loop().create_future()
        self.releases.append(release)
        return await release

    def _apply(self, content):
        self.content = content


class TestFetchGeneration:

    def test_only_latest_is_current(self):
        generation = FetchGeneration()
        first = generation.begin()
        second = generation.begin()

        assert not generation.is_current(first)
        assert generation.is_current(second)

    def test_nothing_is_current_after_close(self):
        generation = FetchGeneration()
        latest = generation.begin()
        generation.close()

        assert not generation.is_current(latest)


class TestRefreshRaces:

    @pytest.mark.asyncio
    async def test_stale_fetch_is_dropped(self, records):
        view = GatedView(records)
        first = asyncio.ensure_future(view.refresh())
        second = asyncio.ensure_future(view.refresh())
        await asyncio.sleep(0)

        # Later fetch finishes first
        view.releases[1].set_result("fresh")
        assert await second is True
        view.releases[0].set_result("stale")
        assert await first is False

        assert view.content == "fresh"
        assert view.loading is False

    @pytest.mark.asyncio
    async def test_loading_stays_on_until_latest_completes(self, records):
        view = GatedView(records)
        first = asyncio.ensure_future(view.refresh())
        second = asyncio.ensure_future(view.refresh())
        await asyncio.sleep(0)

        view.releases[0].set_result("stale")
        await first
        assert view.loading is True

        view.releases[1].set_result("fresh")
        await second
        assert view.loading is False

    @pytest.mark.asyncio
    async def test_nothing_applied_after_close(self, records):
        view = GatedView(records)
        pending = asyncio.ensure_future(view.refresh())
        await asyncio.sleep(0)

        view.close()
        view.releases[0].set_result("late")

        assert await pending is False
        assert view.content is None
        assert view.closed


class TestTransactionViews:

    @pytest.mark.asyncio
    async def test_form_submit_refreshes_list_and_dashboard(self, records):
        form = TransactionFormView(records, today=lambda: TODAY)
        listing = TransactionListView(records)
        dashboard = DashboardView(records)

        form.type = TransactionType.EXPENSE
        form.category = "Food"
        form.amount = "250"
        assert await form.submit() is True

        assert messages(form) == [(NotificationLevel.SUCCESS, "Transaction added successfully!")]
        assert [t.category for t in listing.items] == ["Food"]
        assert dashboard.stats.total_expense == Decimal("250")
        assert dashboard.stats.balance == Decimal("-250")

    @pytest.mark.asyncio
    async def test_form_resets_but_keeps_type(self, records):
        form = TransactionFormView(records, today=lambda: TODAY)
        form.type = TransactionType.INCOME
        form.category = "Salary"
        form.amount = "1000"
        form.description = "March"
        form.date = date(2024, 3, 1)

        await form.submit()

        assert form.type == TransactionType.INCOME
        assert form.category == ""
        assert form.amount == ""
        assert form.description == ""
        assert form.date == TODAY

    @pytest.mark.asyncio
    async def test_invalid_input_is_kept(self, store, records, audit_logger):
        form = TransactionFormView(records, audit_logger=audit_logger, today=lambda: TODAY)
        form.category = "Food"
        form.amount = "-5"

        assert await form.submit() is False

        assert messages(form) == [(NotificationLevel.ERROR, "Amount must be positive")]
        assert form.category == "Food"
        assert form.amount == "-5"
        assert store.rows(TRANSACTIONS) == []
        assert audit_logger.recent_events[-1].event_type == AuditEventType.VALIDATION_FAILED

    @pytest.mark.asyncio
    async def test_store_failure_message(self, auth):
        records = RecordService(FailingRecordStore(fail_on={"insert"}, message=""), auth)
        form = TransactionFormView(records)
        form.category = "Food"
        form.amount = "5"

        assert await form.submit() is False
        assert messages(form) == [(NotificationLevel.ERROR, "Failed to add transaction")]
        assert form.category == "Food"

    @pytest.mark.asyncio
    async def test_signed_out_submit(self, signed_out_records):
        form = TransactionFormView(signed_out_records)
        form.category = "Food"
        form.amount = "5"

        assert await form.submit() is False
        assert messages(form) == [(NotificationLevel.ERROR, "Not authenticated")]

    @pytest.mark.asyncio
    async def test_second_submit_while_in_flight_is_ignored(self, store, auth):
        gate = asyncio.Event()

        class SlowStore(InMemoryRecordStore):
            async def insert(self, collection, record):
                await gate.wait()
                return await super().insert(collection, record)

        slow = SlowStore()
        form = TransactionFormView(RecordService(slow, auth))
        form.category = "Food"
        form.amount = "5"

        first = asyncio.ensure_future(form.submit())
        await asyncio.sleep(0)
        assert form.submitting is True
        assert await form.submit() is False

        gate.set()
        assert await first is True
        assert form.submitting is False
        assert len(slow.rows(TRANSACTIONS)) == 1

    @pytest.mark.asyncio
    async def test_on_success_callback(self, records):
        called = []

        async def on_success():
            called.append(True)

        form = TransactionFormView(records, on_success=on_success)
        form.category = "Food"
        form.amount = "5"
        await form.submit()

        assert called == [True]

    @pytest.mark.asyncio
    async def test_list_delete(self, store, records):
        listing = TransactionListView(records)
        dashboard = DashboardView(records)
        row = await store.insert(TRANSACTIONS, transaction_row(type="income", amount="10"))
        await listing.refresh()
        await dashboard.refresh()
        assert dashboard.stats.total_income == Decimal("10")

        assert await listing.delete(listing.items[0].id) is True

        assert messages(listing) == [(NotificationLevel.SUCCESS, "Transaction deleted")]
        assert listing.items == []
        assert listing.is_empty
        assert dashboard.stats.total_income == 0
        assert row["id"] not in [r["id"] for r in store.rows(TRANSACTIONS)]

    @pytest.mark.asyncio
    async def test_list_delete_failure(self, auth):
        store = FailingRecordStore(fail_on={"delete"})
        records = RecordService(store, auth, event_bus=RecordEventBus())
        listing = TransactionListView(records)
        await store.insert(TRANSACTIONS, transaction_row())
        await listing.refresh()

        assert await listing.delete(listing.items[0].id) is False
        assert messages(listing) == [(NotificationLevel.ERROR, "Failed to delete transaction")]
        assert len(listing.items) == 1

    @pytest.mark.asyncio
    async def test_list_load_failure(self, auth):
        records = RecordService(FailingRecordStore(fail_on={"query"}), auth)
        listing = TransactionListView(records)

        assert await listing.refresh() is False
        assert messages(listing) == [(NotificationLevel.ERROR, "Failed to load transactions")]
        assert listing.loading is False

    @pytest.mark.asyncio
    async def test_refresh_without_event_bus(self, store, auth):
        records = RecordService(store, auth)
        listing = TransactionListView(records)
        await store.insert(TRANSACTIONS, transaction_row())
        await listing.refresh()

        assert await listing.delete(listing.items[0].id) is True
        assert listing.items == []


class TestDebtViews:

    @pytest.mark.asyncio
    async def test_settle_flow(self, store, records):
        form = DebtFormView(records, today=lambda: TODAY)
        listing = DebtListView(records)
        dashboard = DashboardView(records)

        form.type = DebtType.LENT
        form.person_name = "Karim"
        form.amount = "500"
        assert await form.submit() is True
        assert messages(form) == [(NotificationLevel.SUCCESS, "Debt record added successfully!")]
        assert dashboard.stats.pending_lent == Decimal("500")

        debt = listing.items[0]
        assert listing.can_settle(debt)
        assert await listing.settle(debt.id) is True

        assert messages(listing) == [(NotificationLevel.SUCCESS, "Debt marked as settled!")]
        settled = listing.items[0]
        assert settled.status == DebtStatus.SETTLED
        assert settled.settled_date == TODAY
        assert not listing.can_settle(settled)
        assert dashboard.stats.pending_lent == 0

    @pytest.mark.asyncio
    async def test_settle_missing_debt(self, records):
        listing = DebtListView(records)

        assert await listing.settle(uuid4()) is False
        assert messages(listing) == [(NotificationLevel.ERROR, "Failed to settle debt")]

    @pytest.mark.asyncio
    async def test_delete(self, store, records):
        listing = DebtListView(records)
        await store.insert(DEBTS, debt_row())
        await listing.refresh()

        assert await listing.delete(listing.items[0].id) is True
        assert messages(listing) == [(NotificationLevel.SUCCESS, "Debt record deleted")]
        assert listing.is_empty

    @pytest.mark.asyncio
    async def test_form_defaults_to_borrowed(self, records):
        form = DebtFormView(records)
        form.person_name = ""
        form.amount = "5"

        assert form.type == DebtType.BORROWED
        assert await form.submit() is False
        assert messages(form) == [(NotificationLevel.ERROR, "Person name is required")]

    @pytest.mark.asyncio
    async def test_list_does_not_react_to_transactions(self, store, records):
        listing = DebtListView(records)
        await listing.refresh()
        form = TransactionFormView(records)
        form.category = "Food"
        form.amount = "5"

        calls = []
        real_refresh = listing.refresh

        async def counting_refresh():
            calls.append(True)
            return await real_refresh()

        listing.refresh = counting_refresh
        await form.submit()

        assert calls == []


class TestFormatting:

    def _transaction(self, type):
        return Transaction(
            id=uuid4(), user_id=uuid4(), type=type, category="x",
            amount=Decimal("250"), transaction_date=date(2024, 3, 1),
        )

    def _debt(self, **kwargs):
        values = dict(
            id=uuid4(), user_id=uuid4(), type=DebtType.BORROWED, person_name="Karim",
            amount=Decimal("500"), debt_date=date(2024, 2, 1),
        )
        values.update(kwargs)
        return Debt(**values)

    def test_money(self):
        assert format_money(Decimal("1234.5")) == "৳1234.50"
        assert format_money(Decimal("0")) == "৳0.00"

    def test_transaction_amount_label(self):
        assert transaction_amount_label(self._transaction(TransactionType.EXPENSE)) == "-৳250.00"
        assert transaction_amount_label(self._transaction(TransactionType.INCOME)) == "+৳250.00"

    def test_amount_label_follows_signed_amount(self):
        for type in TransactionType:
            txn = self._transaction(type)
            label = transaction_amount_label(txn, symbol="$")
            assert label[0] == ("-" if txn.signed_amount < 0 else "+")
            assert Decimal(label[2:]) == abs(txn.signed_amount)

    def test_debt_badge(self):
        assert debt_badge(self._debt()) == "I owe"
        assert debt_badge(self._debt(type=DebtType.LENT)) == "They owe me"

    def test_debt_date_line(self):
        assert debt_date_line(self._debt()) == "Feb 01, 2024"
        settled = self._debt(status=DebtStatus.SETTLED, settled_date=date(2024, 3, 3))
        assert debt_date_line(settled) == "Feb 01, 2024 • Settled: Mar 03, 2024"


class TestFinancePage:

    @pytest.mark.asyncio
    async def test_gate_blocks_loading(self):
        page, client = create_app_components(
            use_storage=False, store=InMemoryRecordStore(), auth=StaticAuthProvider(),
        )

        assert client is None
        assert await page.load() is False
        assert page.session.is_authenticated is False
        assert page.transaction_list.loading is True

    @pytest.mark.asyncio
    async def test_sign_in_loads_everything(self):
        auth = StaticAuthProvider(accounts={"owner@example.com": "secret"})
        page, _ = create_app_components(use_storage=False, auth=auth)

        assert await page.sign_in("owner@example.com", "secret") is True

        assert page.session.is_authenticated
        assert page.dashboard.greeting == "Welcome, !"
        assert page.transaction_list.is_empty
        assert page.debt_list.is_empty
        notes = page.drain_notifications()
        assert [(n.level, n.message) for n in notes] == [
            (NotificationLevel.SUCCESS, "Signed in successfully"),
        ]

    @pytest.mark.asyncio
    async def test_wrong_password(self):
        auth = StaticAuthProvider(accounts={"owner@example.com": "secret"})
        page, _ = create_app_components(use_storage=False, auth=auth)

        assert await page.sign_in("owner@example.com", "nope") is False
        assert messages(page.session) == [(NotificationLevel.ERROR, "Invalid login credentials")]

    @pytest.mark.asyncio
    async def test_sign_out(self, user):
        audit_logger = AuditLogger()
        records = RecordService(InMemoryRecordStore(), StaticAuthProvider(user=user))
        page = FinancePage(records, audit_logger)
        await page.load()

        assert await page.sign_out() is True

        assert not page.session.is_authenticated
        assert messages(page.session) == [(NotificationLevel.SUCCESS, "Logged out successfully")]
        assert audit_logger.recent_events[-1].event_type == AuditEventType.USER_SIGNED_OUT

    @pytest.mark.asyncio
    async def test_close_stops_listening(self, user):
        bus = RecordEventBus()
        records = RecordService(InMemoryRecordStore(), StaticAuthProvider(user=user), event_bus=bus)
        page = FinancePage(records)

        page.close()

        assert bus.subscriber_count(TRANSACTIONS) == 0
        assert all(view.closed for view in page.refreshing_views)


class TestActionCorrelation:
    """Each user action stamps its audit events with its own correlation id."""

    @pytest.mark.asyncio
    async def test_settle_then_delete(self, records, audit_logger):
        form = DebtFormView(records)
        listing = DebtListView(records)
        form.person_name = "Karim"
        form.amount = "500"
        await form.submit()
        debt_id = listing.items[0].id

        await listing.settle(debt_id)
        await listing.delete(debt_id)

        events = [
            e for e in audit_logger.recent_events
            if e.event_type in (AuditEventType.DEBT_SETTLED, AuditEventType.DEBT_DELETED)
        ]
        assert [e.event_type for e in events] == [AuditEventType.DEBT_SETTLED, AuditEventType.DEBT_DELETED]
        assert all(e.correlation_id is not None for e in events)
        assert events[0].correlation_id != events[1].correlation_id

    @pytest.mark.asyncio
    async def test_failed_delete_shares_id_with_store_error(self, auth, audit_logger):
        records = RecordService(FailingRecordStore(fail_on={"delete"}), auth, audit_logger)
        listing = TransactionListView(records)

        await listing.delete(uuid4())

        last = audit_logger.recent_events[-1]
        assert last.event_type == AuditEventType.STORE_ERROR
        assert last.correlation_id is not None

    @pytest.mark.asyncio
    async def test_session_events(self):
        audit_logger = AuditLogger()
        records = RecordService(InMemoryRecordStore(), StaticAuthProvider())
        page = FinancePage(records, audit_logger)

        await page.sign_in("owner@example.com", "secret")
        await page.sign_out()

        events = audit_logger.recent_events
        assert [e.event_type for e in events] == [
            AuditEventType.USER_SIGNED_IN,
            AuditEventType.USER_SIGNED_OUT,
        ]
        assert all(e.correlation_id is not None for e in events)
