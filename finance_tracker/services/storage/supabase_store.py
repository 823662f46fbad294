"""
Supabase Storage Implementation

DESIGN DECISION: Supabase is the storage backend because it gives us, in
one managed service:
1. Hosted Postgres with row-level security (ownership enforced store-side)
2. Hosted auth whose session the database sees as auth.uid()
3. A REST query builder that covers equality filters and ordering

TRADEOFFS:
- Every call is a network round trip (fine for personal use)
- The client is synchronous; calls are pushed to a worker thread so the
  caller's event loop never blocks
- No retries: a failed call surfaces immediately as a StoreError

The implementation follows the abstract interface, so tests and offline
runs can use the in-memory store without changing business logic.
"""

import asyncio
from typing import Any, Optional

import structlog
from postgrest.exceptions import APIError
from supabase import Client, create_client

from finance_tracker.config import get_settings
from finance_tracker.services.storage.interface import (
    ConnectionError,
    Filters,
    OrderBy,
    RecordStoreInterface,
    SortDirection,
    StoreError,
)


logger = structlog.get_logger(__name__)


class SupabaseClient:
    """
    Low-level Supabase client wrapper.

    Creates the client lazily from settings. The same client must back both
    the auth provider and the record store: the store's requests carry the
    signed-in session, which is what row-level security checks against.
    """

    def __init__(self, client: Optional[Client] = None):
        self._client = client
        self._settings = None if client is not None else get_settings().supabase

    def connect(self) -> Client:
        """Establish (or reuse) the Supabase client."""
        if self._client is None:
            try:
                self._client = create_client(self._settings.url, self._settings.anon_key)
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Supabase: {e}")
        return self._client

    def table(self, name: str):
        """Query builder for a collection."""
        return self.connect().table(name)

    @property
    def auth(self):
        return self.connect().auth


def _error_message(error: Exception) -> str:
    """Best human-readable message from a backend exception."""
    if isinstance(error, APIError) and error.message:
        return error.message
    return str(error) or error.__class__.__name__


class SupabaseRecordStore(RecordStoreInterface):
    """
    Supabase implementation of the record store.

    Each collection is a Postgres table; rows go over the wire as JSON,
    so the caller sends Decimals and dates already converted to strings.
    """

    def __init__(self, client: Optional[SupabaseClient] = None):
        self._client = client or SupabaseClient()

    async def _execute(self, builder, operation: str, collection: str) -> list[dict[str, Any]]:
        try:
            response = await asyncio.to_thread(builder.execute)
        except StoreError:
            raise
        except Exception as e:
            message = _error_message(e)
            logger.error(
                "store_request_failed",
                operation=operation,
                collection=collection,
                error=message,
            )
            raise StoreError(message) from e
        return list(response.data or [])

    @staticmethod
    def _apply_filters(builder, filters: Filters):
        for column, value in filters:
            builder = builder.eq(column, value)
        return builder

    async def insert(self, collection: str, record: dict[str, Any]) -> dict[str, Any]:
        """Insert a row and return it as stored."""
        builder = self._client.table(collection).insert(record)
        rows = await self._execute(builder, "insert", collection)
        return rows[0] if rows else dict(record)

    async def query(
        self,
        collection: str,
        filters: Filters = (),
        order_by: OrderBy = (),
    ) -> list[dict[str, Any]]:
        """Select rows with equality filters and ordering."""
        builder = self._apply_filters(self._client.table(collection).select("*"), filters)
        for column, direction in order_by:
            builder = builder.order(column, desc=direction == SortDirection.DESC)
        return await self._execute(builder, "query", collection)

    async def update(
        self,
        collection: str,
        filters: Filters,
        patch: dict[str, Any],
    ) -> list[dict[str, Any]]:
        builder = self._apply_filters(self._client.table(collection).update(patch), filters)
        return await self._execute(builder, "update", collection)

    async def delete(self, collection: str, filters: Filters) -> list[dict[str, Any]]:
        builder = self._apply_filters(self._client.table(collection).delete(), filters)
        return await self._execute(builder, "delete", collection)
