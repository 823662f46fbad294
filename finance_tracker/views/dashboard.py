"""Dashboard and session view-models."""

from typing import Optional

import structlog

from finance_tracker.audit import AuditLogger, create_correlation_id
from finance_tracker.events import ALL_COLLECTIONS
from finance_tracker.models.audit import AuditEventType
from finance_tracker.models.records import DashboardStats, User
from finance_tracker.queries import DashboardQuery, DashboardSnapshot
from finance_tracker.services.auth import AuthError
from finance_tracker.services.records import RecordService
from finance_tracker.views.base import NotificationLevel, NotifyingView, RefreshingView


logger = structlog.get_logger(__name__)


class DashboardView(RefreshingView[DashboardSnapshot]):
    """Welcome line plus the five totals; recomputed on any record change."""

    load_error_message = "Failed to load dashboard"

    def __init__(self, records: RecordService, query: Optional[DashboardQuery] = None):
        super().__init__(records, watch=ALL_COLLECTIONS)
        self._query = query or DashboardQuery(records)
        self.snapshot = DashboardSnapshot()

    @property
    def stats(self) -> DashboardStats:
        return self.snapshot.stats

    @property
    def greeting(self) -> str:
        return f"Welcome, {self.snapshot.display_name}!"

    async def _fetch(self) -> DashboardSnapshot:
        return await self._query.load()

    def _apply(self, content: DashboardSnapshot) -> None:
        self.snapshot = content


class SessionView(NotifyingView):
    """The page's auth gate: who is signed in, sign in, sign out."""

    def __init__(self, records: RecordService, audit_logger: Optional[AuditLogger] = None):
        super().__init__()
        self._auth = records.auth
        self._audit_logger = audit_logger
        self.user: Optional[User] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    async def check(self) -> Optional[User]:
        """Refresh and return the signed-in user."""
        self.user = await self._auth.get_current_user()
        return self.user

    async def sign_in(self, email: str, password: str) -> bool:
        try:
            self.user = await self._auth.sign_in(email, password)
        except AuthError as e:
            self.notify(NotificationLevel.ERROR, str(e) or "Sign in failed")
            return False
        if self._audit_logger:
            await self._audit_logger.log_session(
                AuditEventType.USER_SIGNED_IN, self.user.id, create_correlation_id()
            )
        self.notify(NotificationLevel.SUCCESS, "Signed in successfully")
        return True

    async def sign_out(self) -> bool:
        user_id = self.user.id if self.user else None
        try:
            await self._auth.sign_out()
        except AuthError as e:
            logger.warning("sign_out_failed", error=str(e))
            self.notify(NotificationLevel.ERROR, str(e) or "Failed to log out")
            return False
        self.user = None
        if self._audit_logger:
            await self._audit_logger.log_session(
                AuditEventType.USER_SIGNED_OUT, user_id, create_correlation_id()
            )
        self.notify(NotificationLevel.SUCCESS, "Logged out successfully")
        return True
