"""
Abstract Record Store Interface

DESIGN DECISION: We define an abstract interface for the data store.
This allows us to:
1. Run against Supabase (hosted Postgres with row-level security)
2. Use in-memory storage for testing and offline use
3. Keep the record service decoupled from the backend client

The interface is intentionally generic: four operations over named
collections, with equality filters and ordering. Rows are plain dicts
keyed by the store-facing column names.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Sequence


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


Filters = Sequence[tuple[str, Any]]
OrderBy = Sequence[tuple[str, SortDirection]]


class RecordStoreInterface(ABC):
    """
    Abstract interface for record storage operations.

    Any storage implementation (Supabase, in-memory, ...)
    must implement these methods.
    """

    @abstractmethod
    async def insert(self, collection: str, record: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a row into a collection.

        Args:
            collection: Collection (table) name
            record: Column values; the store assigns id and created_at

        Returns:
            The stored row as the store sees it

        Raises:
            StoreError: If the store rejects the row
        """
        pass

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: Filters = (),
        order_by: OrderBy = (),
    ) -> list[dict[str, Any]]:
        """
        Fetch rows matching every (column, value) equality filter.

        Args:
            collection: Collection (table) name
            filters: Equality filters, all of which must match
            order_by: Sort keys applied in order (first key is primary)

        Returns:
            Matching rows, possibly empty

        Raises:
            StoreError: If the query fails
        """
        pass

    @abstractmethod
    async def update(
        self,
        collection: str,
        filters: Filters,
        patch: dict[str, Any],
    ) -> list[dict[str, Any]]:
        """
        Apply a patch to every row matching the filters.

        Returns:
            The updated rows (empty if nothing matched)

        Raises:
            StoreError: If the update fails
        """
        pass

    @abstractmethod
    async def delete(self, collection: str, filters: Filters) -> list[dict[str, Any]]:
        """
        Delete every row matching the filters.

        Returns:
            The deleted rows (empty if nothing matched)

        Raises:
            StoreError: If the delete fails
        """
        pass


class StoreError(Exception):
    """Base exception for storage operations. The message is shown to the user."""
    pass


class NotFoundError(StoreError):
    """Entity not found in storage."""
    pass


class ConnectionError(StoreError):
    """Could not connect to storage backend."""
    pass
