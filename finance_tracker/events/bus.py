"""
Record Change Events

Writers (forms, list actions) publish a RecordChanged event after every
successful write; readers (lists, dashboard) subscribe to the collections
they display and re-fetch when told to. Writers never hold a reference to
the readers they affect.

INVARIANT: Subscriber failures are logged, never raised to the publisher.
The write that triggered the event has already succeeded.
"""

import inspect
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union
from uuid import UUID

import structlog
from pydantic import BaseModel


logger = structlog.get_logger(__name__)

ALL_COLLECTIONS = "*"


class ChangeAction(str, Enum):
    CREATED = "created"
    SETTLED = "settled"
    DELETED = "deleted"


class RecordChanged(BaseModel):
    """One completed write against a collection."""

    collection: str
    action: ChangeAction
    record_id: Optional[UUID] = None


Subscriber = Callable[[RecordChanged], Union[None, Awaitable[None]]]


class RecordEventBus:
    """In-process publish/subscribe keyed by collection name."""

    def __init__(self) -> None:
        self._subscribers: dict[str, list[Subscriber]] = {}

    def subscribe(self, collection: str, callback: Subscriber) -> Callable[[], None]:
        """Register a callback for a collection (or ALL_COLLECTIONS).

        Returns a function that removes the subscription.
        """
        self._subscribers.setdefault(collection, []).append(callback)
        return lambda: self.unsubscribe(collection, callback)

    def unsubscribe(self, collection: str, callback: Subscriber) -> None:
        callbacks = self._subscribers.get(collection, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def subscriber_count(self, collection: str) -> int:
        return len(self._subscribers.get(collection, []))

    async def publish(self, event: RecordChanged) -> int:
        """Deliver an event to the collection's subscribers, then to wildcard ones.

        Returns the number of subscribers that handled it without error.
        """
        targets = list(self._subscribers.get(event.collection, []))
        targets += self._subscribers.get(ALL_COLLECTIONS, [])

        delivered = 0
        for callback in targets:
            try:
                result: Any = callback(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:
                logger.warning(
                    "event_subscriber_failed",
                    collection=event.collection,
                    action=event.action.value,
                    error=str(exc),
                )
            else:
                delivered += 1
        return delivered
