"""
Main Orchestrator for Finance Tracker

This module ties together all the components and defines the single page
the user works with:
  auth gate → dashboard → [Transactions | Debts] tabs, each a form + a list

DESIGN DECISION: Components talk through the record service and its event
bus only. A form never references the list it affects; it writes through
the service, the service announces the change, and every subscribed view
(the sibling list and the dashboard) re-fetches itself.
"""

import asyncio
from typing import Optional

import structlog

from finance_tracker.audit import AuditLogger, configure_logging
from finance_tracker.config import get_settings
from finance_tracker.events import RecordEventBus
from finance_tracker.services.auth import (
    AuthProviderInterface,
    StaticAuthProvider,
    SupabaseAuthProvider,
)
from finance_tracker.services.records import RecordService
from finance_tracker.services.storage import (
    InMemoryRecordStore,
    RecordStoreInterface,
    SupabaseClient,
    SupabaseRecordStore,
)
from finance_tracker.views import (
    DashboardView,
    DebtFormView,
    DebtListView,
    Notification,
    SessionView,
    TransactionFormView,
    TransactionListView,
)


logger = structlog.get_logger(__name__)


class FinancePage:
    """
    Page composition: every view on the screen, wired to one record service.

    The page is gated: nothing is fetched until SessionView reports a
    signed-in user.
    """

    def __init__(
        self,
        records: RecordService,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self.records = records
        self.session = SessionView(records, audit_logger)
        self.dashboard = DashboardView(records)
        self.transaction_form = TransactionFormView(records, audit_logger=audit_logger)
        self.transaction_list = TransactionListView(records)
        self.debt_form = DebtFormView(records, audit_logger=audit_logger)
        self.debt_list = DebtListView(records)

    @property
    def refreshing_views(self):
        return [self.dashboard, self.transaction_list, self.debt_list]

    async def load(self) -> bool:
        """
        Run the auth gate and, if it passes, fetch every view.

        Returns True if a user is signed in.
        """
        if await self.session.check() is None:
            return False
        await asyncio.gather(*(view.refresh() for view in self.refreshing_views))
        return True

    async def sign_in(self, email: str, password: str) -> bool:
        if not await self.session.sign_in(email, password):
            return False
        await self.load()
        return True

    async def sign_out(self) -> bool:
        return await self.session.sign_out()

    def drain_notifications(self) -> list[Notification]:
        """Pending notifications of every view, in view order."""
        views = [
            self.session,
            self.dashboard,
            self.transaction_form,
            self.transaction_list,
            self.debt_form,
            self.debt_list,
        ]
        return [note for view in views for note in view.drain_notifications()]

    def close(self) -> None:
        """Discard the page: in-flight fetches are ignored from now on."""
        for view in self.refreshing_views:
            view.close()


def create_app_components(
    use_storage: bool = True,
    store: Optional[RecordStoreInterface] = None,
    auth: Optional[AuthProviderInterface] = None,
) -> tuple[FinancePage, Optional[SupabaseClient]]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to connect to Supabase. Set to False to run
                     against in-memory backends (tests, offline demo).
        store: Explicit record store (overrides use_storage)
        auth: Explicit auth provider (overrides use_storage)

    Returns:
        (page, supabase_client)
    """
    settings = get_settings()
    app_settings = settings.app
    configure_logging("DEBUG" if app_settings.debug_mode else app_settings.log_level)

    supabase_client = None
    if use_storage and (store is None or auth is None):
        try:
            supabase_client = SupabaseClient()
            store = store or SupabaseRecordStore(supabase_client)
            auth = auth or SupabaseAuthProvider(supabase_client)
        except Exception as e:
            # Supabase not configured - continue with in-memory backends
            logger.warning("supabase_not_configured", error=str(e))
            supabase_client = None

    store = store or InMemoryRecordStore()
    auth = auth or StaticAuthProvider()

    audit_logger = AuditLogger()
    records = RecordService(
        store=store,
        auth=auth,
        audit_logger=audit_logger,
        event_bus=RecordEventBus(),
    )
    return FinancePage(records, audit_logger), supabase_client
