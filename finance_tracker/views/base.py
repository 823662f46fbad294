"""
View-model building blocks

The UI layer (Streamlit) is a thin renderer over view-models that hold
per-view state: the fetched items, a loading flag, the notifications to
show. View-models never raise to the UI. Every user action ends in exactly
one Notification.

Fetches carry a generation number. Only the completion of the most recently
started fetch is applied, so a slow early fetch can never overwrite the
result of a later one, and nothing is applied once a view is closed.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar
from uuid import UUID

import structlog
from pydantic import BaseModel

from finance_tracker.audit import create_correlation_id
from finance_tracker.events import RecordChanged
from finance_tracker.services.auth import AuthError
from finance_tracker.services.records import RecordService
from finance_tracker.services.storage import StoreError


logger = structlog.get_logger(__name__)

T = TypeVar("T")

ActionFactory = Callable[[UUID], Awaitable[Any]]


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


class Notification(BaseModel):
    """A toast-style message for the user."""

    level: NotificationLevel
    message: str


def error_message(error: Exception, fallback: str) -> str:
    """User-facing text of an error, or the fallback when it has none."""
    message = getattr(error, "message", None) or str(error)
    return message or fallback


class FetchGeneration:
    """Monotonic fetch counter for one view."""

    def __init__(self) -> None:
        self._latest = 0
        self._closed = False

    @property
    def latest(self) -> int:
        return self._latest

    @property
    def closed(self) -> bool:
        return self._closed

    def begin(self) -> int:
        """Start a fetch; returns its generation number."""
        self._latest += 1
        return self._latest

    def is_current(self, generation: int) -> bool:
        """True if a fetch's result may still be applied."""
        return not self._closed and generation == self._latest

    def close(self) -> None:
        self._closed = True


class NotifyingView:
    """Mixin holding the pending notifications of a view."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def notify(self, level: NotificationLevel, message: str) -> None:
        self.notifications.append(Notification(level=level, message=message))

    def drain_notifications(self) -> list[Notification]:
        """Pending notifications, oldest first; clears them."""
        pending, self.notifications = self.notifications, []
        return pending


class RefreshingView(NotifyingView, ABC, Generic[T]):
    """
    A view whose content is re-fetched whole, never patched locally.

    Subclasses say what to fetch and which collections to watch; the base
    class handles the generation guard, loading flag and subscriptions.
    """

    load_error_message = "Failed to load data"

    def __init__(self, records: RecordService, watch: Optional[str] = None):
        super().__init__()
        self._records = records
        self._generation = FetchGeneration()
        self.loading = True
        self._unsubscribe: Optional[Callable[[], None]] = None
        if watch and records.event_bus is not None:
            self._unsubscribe = records.event_bus.subscribe(watch, self._on_change)

    @abstractmethod
    async def _fetch(self) -> T:
        """Load the view's full content from the record service."""

    @abstractmethod
    def _apply(self, content: T) -> None:
        """Replace the view's content with a completed fetch result."""

    async def _on_change(self, event: RecordChanged) -> None:
        await self.refresh()

    async def refresh(self) -> bool:
        """
        Re-fetch and replace the view's content.

        Returns True if this fetch's result was applied.
        """
        generation = self._generation.begin()
        self.loading = True
        try:
            content = await self._fetch()
        except (StoreError, AuthError) as e:
            logger.warning("view_fetch_failed", view=type(self).__name__, error=str(e))
            if self._generation.is_current(generation):
                self.notify(NotificationLevel.ERROR, self.load_error_message)
            return False
        finally:
            if generation == self._generation.latest:
                self.loading = False

        if not self._generation.is_current(generation):
            logger.debug("stale_fetch_dropped", view=type(self).__name__, generation=generation)
            return False
        self._apply(content)
        return True

    async def run_action(self, action: ActionFactory, success: str, failure: str) -> bool:
        """
        Run a write against the store and report it.

        `action` is called with a fresh correlation id, so every audit
        event of this user action shares it. A successful write re-fetches
        the view: through the event bus when the record service has one,
        directly otherwise.
        """
        try:
            await action(create_correlation_id())
        except (StoreError, AuthError) as e:
            logger.warning("view_action_failed", view=type(self).__name__, error=str(e))
            self.notify(NotificationLevel.ERROR, failure)
            return False

        self.notify(NotificationLevel.SUCCESS, success)
        if self._unsubscribe is None:
            await self.refresh()
        return True

    @property
    def closed(self) -> bool:
        return self._generation.closed

    def close(self) -> None:
        """Discard the view: stop listening and ignore in-flight fetches."""
        self._generation.close()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
