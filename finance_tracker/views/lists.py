"""
List view-models for transactions and debts.

Both lists re-fetch their whole collection on every change, whether it
comes from their own row actions or from a form elsewhere on the page.
"""

from uuid import UUID

from finance_tracker.models.records import DEBTS, TRANSACTIONS, Debt, Transaction
from finance_tracker.services.records import RecordService
from finance_tracker.views.base import RefreshingView


class TransactionListView(RefreshingView[list[Transaction]]):
    """Transaction history, newest first, with per-row delete."""

    load_error_message = "Failed to load transactions"
    empty_message = "No transactions yet. Add your first transaction above!"

    def __init__(self, records: RecordService):
        super().__init__(records, watch=TRANSACTIONS)
        self.items: list[Transaction] = []

    @property
    def is_empty(self) -> bool:
        return not self.loading and not self.items

    async def _fetch(self) -> list[Transaction]:
        return await self._records.list_transactions()

    def _apply(self, content: list[Transaction]) -> None:
        self.items = content

    async def delete(self, transaction_id: UUID) -> bool:
        return await self.run_action(
            lambda cid: self._records.delete_transaction(transaction_id, cid),
            success="Transaction deleted",
            failure="Failed to delete transaction",
        )


class DebtListView(RefreshingView[list[Debt]]):
    """Debt records, pending first, with per-row settle and delete."""

    load_error_message = "Failed to load debt records"
    empty_message = "No debt records yet. Add your first record above!"

    def __init__(self, records: RecordService):
        super().__init__(records, watch=DEBTS)
        self.items: list[Debt] = []

    @property
    def is_empty(self) -> bool:
        return not self.loading and not self.items

    @staticmethod
    def can_settle(debt: Debt) -> bool:
        """Only pending debts offer the settle action."""
        return debt.is_pending

    async def _fetch(self) -> list[Debt]:
        return await self._records.list_debts()

    def _apply(self, content: list[Debt]) -> None:
        self.items = content

    async def settle(self, debt_id: UUID) -> bool:
        return await self.run_action(
            lambda cid: self._records.settle_debt(debt_id, cid),
            success="Debt marked as settled!",
            failure="Failed to settle debt",
        )

    async def delete(self, debt_id: UUID) -> bool:
        return await self.run_action(
            lambda cid: self._records.delete_debt(debt_id, cid),
            success="Debt record deleted",
            failure="Failed to delete debt record",
        )
