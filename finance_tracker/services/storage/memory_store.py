"""
In-Memory Storage Implementation

Used by the test suite and when Supabase is not configured. It mirrors the
parts of Supabase's behaviour the app relies on:
- the store assigns `id` and `created_at` on insert
- ordering follows Postgres (NULLS LAST ascending, NULLS FIRST descending)

It does NOT implement row-level security; owner scoping relies on the
record service always filtering by user_id.
"""

import copy
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from finance_tracker.services.storage.interface import (
    Filters,
    OrderBy,
    RecordStoreInterface,
    SortDirection,
)


def _normalize(value: Any) -> Any:
    """Bring a Python value into the shape it has on the wire."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


class InMemoryRecordStore(RecordStoreInterface):
    """Collections of dict rows held in process memory."""

    def __init__(self):
        self._collections: dict[str, list[dict[str, Any]]] = {}

    def rows(self, collection: str) -> list[dict[str, Any]]:
        """Raw rows of a collection in insertion order (copies)."""
        return copy.deepcopy(self._collections.get(collection, []))

    @staticmethod
    def _matches(row: dict[str, Any], filters: Filters) -> bool:
        return all(
            _normalize(row.get(column)) == _normalize(value)
            for column, value in filters
        )

    async def insert(self, collection: str, record: dict[str, Any]) -> dict[str, Any]:
        row = {column: _normalize(value) for column, value in record.items()}
        row.setdefault("id", str(uuid4()))
        row.setdefault("created_at", datetime.now(timezone.utc).isoformat())
        self._collections.setdefault(collection, []).append(row)
        return copy.deepcopy(row)

    async def query(
        self,
        collection: str,
        filters: Filters = (),
        order_by: OrderBy = (),
    ) -> list[dict[str, Any]]:
        result = [
            copy.deepcopy(row)
            for row in self._collections.get(collection, [])
            if self._matches(row, filters)
        ]
        # Stable sorts applied from the least significant key up
        for column, direction in reversed(list(order_by)):
            result.sort(
                key=lambda row: (
                    row.get(column) is None,
                    "" if row.get(column) is None else row.get(column),
                ),
                reverse=direction == SortDirection.DESC,
            )
        return result

    async def update(
        self,
        collection: str,
        filters: Filters,
        patch: dict[str, Any],
    ) -> list[dict[str, Any]]:
        updated = []
        for row in self._collections.get(collection, []):
            if self._matches(row, filters):
                row.update({column: _normalize(value) for column, value in patch.items()})
                updated.append(copy.deepcopy(row))
        return updated

    async def delete(self, collection: str, filters: Filters) -> list[dict[str, Any]]:
        rows = self._collections.get(collection, [])
        deleted = [row for row in rows if self._matches(row, filters)]
        self._collections[collection] = [row for row in rows if not self._matches(row, filters)]
        return deleted
