"""Services package."""

from finance_tracker.services.auth import (
    AuthError,
    AuthProviderInterface,
    StaticAuthProvider,
    SupabaseAuthProvider,
)
from finance_tracker.services.records import RecordService
from finance_tracker.services.storage import (
    ConnectionError,
    InMemoryRecordStore,
    NotFoundError,
    RecordStoreInterface,
    SortDirection,
    StoreError,
    SupabaseClient,
    SupabaseRecordStore,
)

__all__ = [
    # Auth
    "AuthError",
    "AuthProviderInterface",
    "StaticAuthProvider",
    "SupabaseAuthProvider",
    # Records
    "RecordService",
    # Storage
    "ConnectionError",
    "InMemoryRecordStore",
    "NotFoundError",
    "RecordStoreInterface",
    "SortDirection",
    "StoreError",
    "SupabaseClient",
    "SupabaseRecordStore",
]
