"""Tests for dashboard aggregation."""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from finance_tracker.models.records import (
    DEBTS,
    PROFILES,
    TRANSACTIONS,
    Debt,
    DebtStatus,
    DebtType,
    Transaction,
    TransactionType,
)
from finance_tracker.queries import DashboardQuery, compute_dashboard_stats
from finance_tracker.services.records import RecordService
from finance_tracker.services.storage import InMemoryRecordStore, StoreError
from finance_tracker.views import DashboardView

from conftest import OTHER_USER_ID, USER_ID, debt_row, transaction_row


class TestComputeDashboardStats:

    def test_empty_input_is_all_zero(self):
        stats = compute_dashboard_stats([], [])
        assert stats.total_income == 0
        assert stats.total_expense == 0
        assert stats.balance == 0
        assert stats.pending_borrowed == 0
        assert stats.pending_lent == 0

    def test_income_expense_and_balance(self):
        transactions = [
            transaction_row(type="income", amount="1000"),
            transaction_row(type="expense", amount="250"),
            transaction_row(type="expense", amount="100"),
        ]
        stats = compute_dashboard_stats(transactions, [])
        assert stats.total_income == Decimal("1000")
        assert stats.total_expense == Decimal("350")
        assert stats.balance == Decimal("650")

    def test_balance_can_be_negative(self):
        stats = compute_dashboard_stats([transaction_row(type="expense", amount="40.50")], [])
        assert stats.balance == Decimal("-40.50")

    def test_decimal_sums_are_exact(self):
        transactions = [transaction_row(type="income", amount="0.1") for _ in range(3)]
        stats = compute_dashboard_stats(transactions, [])
        assert stats.total_income == Decimal("0.3")

    def test_pending_debts_by_direction(self):
        debts = [
            debt_row(type="borrowed", amount="200"),
            debt_row(type="lent", amount="500"),
            debt_row(type="lent", amount="50"),
        ]
        stats = compute_dashboard_stats([], debts)
        assert stats.pending_borrowed == Decimal("200")
        assert stats.pending_lent == Decimal("550")

    def test_settled_debts_contribute_nothing(self):
        debts = [
            debt_row(type="borrowed", amount="200", status="settled", settled_date="2024-03-01"),
            debt_row(type="lent", amount="500"),
        ]
        stats = compute_dashboard_stats([], debts)
        assert stats.pending_borrowed == 0
        assert stats.pending_lent == Decimal("500")

    def test_debt_without_status_counts_as_pending(self):
        row = debt_row(type="lent", amount="75")
        del row["status"]
        stats = compute_dashboard_stats([], [row])
        assert stats.pending_lent == Decimal("75")

    def test_unknown_type_is_ignored(self):
        transactions = [
            transaction_row(type="transfer", amount="999"),
            transaction_row(type="income", amount="10"),
        ]
        debts = [debt_row(type="gift", amount="999")]
        stats = compute_dashboard_stats(transactions, debts)
        assert stats.total_income == Decimal("10")
        assert stats.total_expense == 0
        assert stats.pending_borrowed == 0
        assert stats.pending_lent == 0

    def test_missing_or_unparseable_amount_counts_as_zero(self):
        missing = transaction_row(type="income")
        del missing["amount"]
        transactions = [
            missing,
            transaction_row(type="income", amount="not-a-number"),
            transaction_row(type="income", amount="5"),
        ]
        stats = compute_dashboard_stats(transactions, [])
        assert stats.total_income == Decimal("5")

    def test_accepts_typed_records(self):
        user_id = uuid4()
        transactions = [
            Transaction(
                id=uuid4(), user_id=user_id, type=TransactionType.INCOME,
                category="Salary", amount=Decimal("1000"), transaction_date=date(2024, 3, 1),
            ),
        ]
        debts = [
            Debt(
                id=uuid4(), user_id=user_id, type=DebtType.BORROWED, person_name="Rahim",
                amount=Decimal("120"), status=DebtStatus.PENDING, debt_date=date(2024, 3, 1),
            ),
        ]
        stats = compute_dashboard_stats(transactions, debts)
        assert stats.total_income == Decimal("1000")
        assert stats.pending_borrowed == Decimal("120")

    def test_order_does_not_matter(self):
        transactions = [
            transaction_row(type="income", amount="3"),
            transaction_row(type="expense", amount="1"),
            transaction_row(type="income", amount="7"),
        ]
        forward = compute_dashboard_stats(transactions, [])
        backward = compute_dashboard_stats(list(reversed(transactions)), [])
        assert forward == backward


class TestDashboardQuery:

    @pytest.mark.asyncio
    async def test_load_scopes_to_user(self, store, records):
        await store.insert(TRANSACTIONS, transaction_row(type="income", amount="1000"))
        await store.insert(TRANSACTIONS, transaction_row(type="expense", amount="250"))
        await store.insert(TRANSACTIONS, transaction_row(type="income", amount="9999", user_id=OTHER_USER_ID))
        await store.insert(DEBTS, debt_row(type="lent", amount="500"))
        await store.insert(DEBTS, debt_row(type="borrowed", amount="80", status="settled",
                                           settled_date="2024-03-02"))
        await store.insert(DEBTS, debt_row(type="borrowed", amount="777", user_id=OTHER_USER_ID))
        await store.insert(PROFILES, {"id": str(USER_ID), "full_name": "Nadia Rahman"})

        snapshot = await DashboardQuery(records).load()

        assert snapshot.display_name == "Nadia Rahman"
        assert snapshot.stats.total_income == Decimal("1000")
        assert snapshot.stats.total_expense == Decimal("250")
        assert snapshot.stats.balance == Decimal("750")
        assert snapshot.stats.pending_lent == Decimal("500")
        assert snapshot.stats.pending_borrowed == 0

    @pytest.mark.asyncio
    async def test_load_includes_rows_list_views_skip(self, store, records):
        """A row that fails model parsing is still counted by its amount."""
        await store.insert(TRANSACTIONS, transaction_row(type="income", amount="10", category=""))

        assert await records.list_transactions() == []
        stats = await DashboardQuery(records).load_stats()
        assert stats.total_income == Decimal("10")

    @pytest.mark.asyncio
    async def test_signed_out_is_empty(self, store, signed_out_records):
        await store.insert(TRANSACTIONS, transaction_row(type="income", amount="10"))
        snapshot = await DashboardQuery(signed_out_records).load()
        assert snapshot.display_name == ""
        assert snapshot.stats.total_income == 0

    @pytest.mark.asyncio
    async def test_profile_failure_keeps_totals(self, auth):
        """The greeting name falls back to '' when profiles can't be read."""

        class ProfilesDownStore(InMemoryRecordStore):
            async def query(self, collection, filters=(), order_by=()):
                if collection == PROFILES:
                    raise StoreError("relation \"profiles\" does not exist")
                return await super().query(collection, filters, order_by)

        store = ProfilesDownStore()
        await store.insert(TRANSACTIONS, transaction_row(type="income", amount="1000"))
        records = RecordService(store, auth)
        dashboard = DashboardView(records)

        assert await dashboard.refresh() is True

        assert dashboard.stats.total_income == Decimal("1000")
        assert dashboard.snapshot.display_name == ""
        assert dashboard.drain_notifications() == []
