"""
Record Service (data access facade)

Translates the app's logical operations (create, list, settle, delete) into
requests against the record store, scoped to the signed-in user.

BOUNDARIES:
- Input to create_* is always a validated payload (TransactionCreate /
  DebtCreate); this layer never re-validates form input
- The backend's row-level security is authoritative for ownership; we
  additionally filter every read and write by user_id, so backends without
  RLS (the in-memory store) behave the same
- Nothing is retried: a store failure is audited and re-raised as-is
- Every successful write is audited and announced on the event bus
"""

from datetime import date
from typing import Any, Callable, Optional, Type, TypeVar
from uuid import UUID

import structlog
from pydantic import BaseModel, ValidationError as PydanticValidationError

from finance_tracker.audit import AuditLogger
from finance_tracker.events import ChangeAction, RecordChanged, RecordEventBus
from finance_tracker.models.records import (
    DEBTS,
    PROFILES,
    TRANSACTIONS,
    Debt,
    DebtCreate,
    DebtStatus,
    Transaction,
    TransactionCreate,
    User,
)
from finance_tracker.services.auth import AuthError, AuthProviderInterface
from finance_tracker.services.storage import (
    Filters,
    NotFoundError,
    OrderBy,
    RecordStoreInterface,
    SortDirection,
    StoreError,
)


logger = structlog.get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

TRANSACTION_ORDER: OrderBy = (
    ("transaction_date", SortDirection.DESC),
    ("created_at", SortDirection.DESC),
)
# "pending" sorts before "settled"
DEBT_ORDER: OrderBy = (
    ("status", SortDirection.ASC),
    ("debt_date", SortDirection.DESC),
)

_ENTITY = {TRANSACTIONS: "transaction", DEBTS: "debt"}


def _parse_rows(model: Type[M], rows: list[dict[str, Any]]) -> list[M]:
    """Parse store rows, skipping (and logging) rows that don't fit the model."""
    parsed = []
    for row in rows:
        try:
            parsed.append(model.model_validate(row))
        except PydanticValidationError as e:
            logger.warning(
                "malformed_row_skipped",
                model=model.__name__,
                row_id=row.get("id"),
                errors=e.error_count(),
            )
    return parsed


class RecordService:
    """
    Owner-scoped CRUD over the `transactions` and `debts` collections.

    Args:
        store: Record store backend
        auth: Auth provider that knows the current user
        audit_logger: Optional audit trail
        event_bus: Optional bus to announce completed writes
        today: Clock used for settlement dates
    """

    def __init__(
        self,
        store: RecordStoreInterface,
        auth: AuthProviderInterface,
        audit_logger: Optional[AuditLogger] = None,
        event_bus: Optional[RecordEventBus] = None,
        today: Callable[[], date] = date.today,
    ):
        self._store = store
        self._auth = auth
        self._audit_logger = audit_logger
        self._event_bus = event_bus
        self._today = today

    @property
    def auth(self) -> AuthProviderInterface:
        return self._auth

    @property
    def event_bus(self) -> Optional[RecordEventBus]:
        return self._event_bus

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def require_user(
        self,
        operation: str,
        correlation_id: Optional[UUID] = None,
    ) -> User:
        """The current user, or AuthError if nobody is signed in."""
        user = await self._auth.get_current_user()
        if user is None:
            if self._audit_logger:
                await self._audit_logger.log_auth_required(operation, correlation_id)
            raise AuthError("Not authenticated")
        return user

    async def _call_store(self, operation: str, correlation_id: Optional[UUID], call):
        try:
            return await call
        except StoreError as e:
            if self._audit_logger:
                await self._audit_logger.log_store_error(operation, str(e), correlation_id)
            raise

    async def _announce(
        self,
        collection: str,
        action: ChangeAction,
        record_id: Optional[UUID],
    ) -> None:
        if self._event_bus:
            await self._event_bus.publish(
                RecordChanged(collection=collection, action=action, record_id=record_id)
            )

    async def _create(
        self,
        collection: str,
        model: Type[M],
        record: dict[str, Any],
        user: User,
        correlation_id: Optional[UUID],
    ) -> Optional[M]:
        row = await self._call_store(
            f"insert {collection}", correlation_id,
            self._store.insert(collection, record),
        )
        created = _parse_rows(model, [row])
        record_id = created[0].id if created else None

        if self._audit_logger:
            await self._audit_logger.log_record_created(
                entity_type=_ENTITY[collection],
                entity_id=record_id,
                user_id=user.id,
                amount=str(record["amount"]),
                correlation_id=correlation_id,
            )
        await self._announce(collection, ChangeAction.CREATED, record_id)
        return created[0] if created else None

    async def _delete(
        self,
        collection: str,
        record_id: UUID,
        correlation_id: Optional[UUID],
    ) -> bool:
        user = await self.require_user(f"delete {collection}", correlation_id)
        deleted = await self._call_store(
            f"delete {collection}", correlation_id,
            self._store.delete(
                collection,
                [("id", str(record_id)), ("user_id", str(user.id))],
            ),
        )
        if not deleted:
            logger.info("delete_matched_nothing", collection=collection, record_id=str(record_id))
            return False

        if self._audit_logger:
            await self._audit_logger.log_record_deleted(
                entity_type=_ENTITY[collection],
                entity_id=record_id,
                user_id=user.id,
                correlation_id=correlation_id,
            )
        await self._announce(collection, ChangeAction.DELETED, record_id)
        return True

    # ------------------------------------------------------------------
    # Generic reads
    # ------------------------------------------------------------------

    async def fetch_rows(
        self,
        collection: str,
        filters: Filters = (),
        order_by: OrderBy = (),
    ) -> list[dict[str, Any]]:
        """
        Raw rows of a collection belonging to the current user.

        Returns an empty list when nobody is signed in.
        """
        user = await self._auth.get_current_user()
        if user is None:
            return []
        return await self._call_store(
            f"query {collection}", None,
            self._store.query(
                collection,
                [("user_id", str(user.id)), *filters],
                order_by,
            ),
        )

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    async def create_transaction(
        self,
        payload: TransactionCreate,
        correlation_id: Optional[UUID] = None,
    ) -> Optional[Transaction]:
        """
        Insert a validated transaction owned by the current user.

        Raises:
            AuthError: Nobody is signed in
            StoreError: The store rejected the row
        """
        user = await self.require_user("create transaction", correlation_id)
        return await self._create(
            TRANSACTIONS, Transaction, payload.to_record(user.id), user, correlation_id
        )

    async def list_transactions(self) -> list[Transaction]:
        """Newest first: transaction date, then creation time."""
        rows = await self.fetch_rows(TRANSACTIONS, order_by=TRANSACTION_ORDER)
        return _parse_rows(Transaction, rows)

    async def delete_transaction(
        self,
        transaction_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """Delete a transaction. Returns False if nothing matched."""
        return await self._delete(TRANSACTIONS, transaction_id, correlation_id)

    # ------------------------------------------------------------------
    # Debts
    # ------------------------------------------------------------------

    async def create_debt(
        self,
        payload: DebtCreate,
        correlation_id: Optional[UUID] = None,
    ) -> Optional[Debt]:
        """
        Insert a validated debt owned by the current user, status pending.

        Raises:
            AuthError: Nobody is signed in
            StoreError: The store rejected the row
        """
        user = await self.require_user("create debt", correlation_id)
        return await self._create(
            DEBTS, Debt, payload.to_record(user.id), user, correlation_id
        )

    async def list_debts(self, status: Optional[DebtStatus] = None) -> list[Debt]:
        """Pending before settled, then newest debt date first."""
        filters = [("status", status.value)] if status else []
        rows = await self.fetch_rows(DEBTS, filters, DEBT_ORDER)
        return _parse_rows(Debt, rows)

    async def settle_debt(
        self,
        debt_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> Optional[Debt]:
        """
        Mark a debt settled as of today.

        Settling an already-settled debt is allowed and moves its settled
        date to today.

        Raises:
            AuthError: Nobody is signed in
            NotFoundError: No debt with this id belongs to the user
            StoreError: The store rejected the update
        """
        user = await self.require_user("settle debt", correlation_id)
        settled_on = self._today().isoformat()
        rows = await self._call_store(
            "update debts", correlation_id,
            self._store.update(
                DEBTS,
                [("id", str(debt_id)), ("user_id", str(user.id))],
                {"status": DebtStatus.SETTLED.value, "settled_date": settled_on},
            ),
        )
        if not rows:
            raise NotFoundError("Debt record not found")

        if self._audit_logger:
            await self._audit_logger.log_debt_settled(
                debt_id=debt_id,
                user_id=user.id,
                settled_date=settled_on,
                correlation_id=correlation_id,
            )
        await self._announce(DEBTS, ChangeAction.SETTLED, debt_id)
        settled = _parse_rows(Debt, rows)
        return settled[0] if settled else None

    async def delete_debt(
        self,
        debt_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """Delete a debt in any status. Returns False if nothing matched."""
        return await self._delete(DEBTS, debt_id, correlation_id)

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    async def get_display_name(self) -> str:
        """The user's full name from `profiles`, or '' if there is none."""
        user = await self._auth.get_current_user()
        if user is None:
            return ""
        rows = await self._call_store(
            f"query {PROFILES}", None,
            self._store.query(PROFILES, [("id", str(user.id))]),
        )
        if rows and rows[0].get("full_name"):
            return str(rows[0]["full_name"])
        return ""
