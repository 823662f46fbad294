"""
Dashboard Aggregation

DESIGN DECISION: Dashboard numbers are DERIVED, never stored.
They are recomputed from the user's raw records every time one of the
underlying collections changes, so they can never drift from the lists
the user sees.

compute_dashboard_stats is a pure function. It accepts typed records or
raw store rows, so a row the list view can't parse (e.g. a type value added
by a newer client) still gets a defined treatment here: it is left out of
every bucket instead of failing the whole dashboard.
"""

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Iterable, Mapping

import structlog
from pydantic import BaseModel, Field

from finance_tracker.models.records import (
    DEBTS,
    TRANSACTIONS,
    DashboardStats,
    DebtStatus,
    DebtType,
    TransactionType,
)
from finance_tracker.services.records import RecordService
from finance_tracker.services.storage import StoreError


logger = structlog.get_logger(__name__)

ZERO = Decimal("0")


def _field(record: Any, name: str) -> Any:
    value = record.get(name) if isinstance(record, Mapping) else getattr(record, name, None)
    return value.value if isinstance(value, Enum) else value


def _amount(record: Any) -> Decimal:
    """Amount as Decimal; missing or unparseable amounts count as zero."""
    value = _field(record, "amount")
    if value is None:
        return ZERO
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        amount = None
    if amount is None or not amount.is_finite():
        logger.warning("unparseable_amount_ignored", record_id=str(_field(record, "id")))
        return ZERO
    return amount


def compute_dashboard_stats(
    transactions: Iterable[Any],
    pending_debts: Iterable[Any],
) -> DashboardStats:
    """
    Aggregate one user's records into dashboard totals.

    Args:
        transactions: All of the user's transactions
        pending_debts: The user's debts with status pending. Debts with any
                       other status are tolerated and contribute nothing.

    Returns:
        DashboardStats with exact Decimal sums (zero for empty input)
    """
    income = expense = borrowed = lent = ZERO

    for transaction in transactions:
        kind = _field(transaction, "type")
        if kind == TransactionType.INCOME.value:
            income += _amount(transaction)
        elif kind == TransactionType.EXPENSE.value:
            expense += _amount(transaction)

    for debt in pending_debts:
        status = _field(debt, "status")
        if status is not None and status != DebtStatus.PENDING.value:
            continue
        kind = _field(debt, "type")
        if kind == DebtType.BORROWED.value:
            borrowed += _amount(debt)
        elif kind == DebtType.LENT.value:
            lent += _amount(debt)

    return DashboardStats(
        total_income=income,
        total_expense=expense,
        balance=income - expense,
        pending_borrowed=borrowed,
        pending_lent=lent,
    )


class DashboardSnapshot(BaseModel):
    """What the dashboard shows: greeting name plus totals."""

    display_name: str = ""
    stats: DashboardStats = Field(default_factory=DashboardStats)


class DashboardQuery:
    """
    Loads the inputs of the aggregation from the record service.

    Raw rows are used on purpose: the totals cover every row the store
    holds for the user, including ones the typed list views skip.
    """

    def __init__(self, records: RecordService):
        self._records = records

    async def load_stats(self) -> DashboardStats:
        transactions = await self._records.fetch_rows(TRANSACTIONS)
        pending_debts = await self._records.fetch_rows(
            DEBTS, [("status", DebtStatus.PENDING.value)]
        )
        return compute_dashboard_stats(transactions, pending_debts)

    async def load(self) -> DashboardSnapshot:
        """
        Fetch everything the dashboard needs.

        A failing profile lookup only costs the greeting name; the totals
        are still returned.

        Raises:
            StoreError: If a transaction or debt query fails
        """
        stats = await self.load_stats()
        try:
            display_name = await self._records.get_display_name()
        except StoreError as e:
            logger.warning("display_name_unavailable", error=str(e))
            display_name = ""
        return DashboardSnapshot(display_name=display_name, stats=stats)
