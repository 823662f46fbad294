"""
Storage Services Package

Provides the abstract record store interface and concrete implementations.
Supabase is the production backend; the in-memory store backs tests and
offline runs.
"""

from finance_tracker.services.storage.interface import (
    ConnectionError,
    Filters,
    NotFoundError,
    OrderBy,
    RecordStoreInterface,
    SortDirection,
    StoreError,
)
from finance_tracker.services.storage.memory_store import InMemoryRecordStore
from finance_tracker.services.storage.supabase_store import (
    SupabaseClient,
    SupabaseRecordStore,
)

__all__ = [
    # Interface
    "Filters",
    "OrderBy",
    "RecordStoreInterface",
    "SortDirection",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StoreError",
    # Implementations
    "InMemoryRecordStore",
    "SupabaseClient",
    "SupabaseRecordStore",
]
