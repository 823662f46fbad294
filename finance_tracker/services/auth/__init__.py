"""Auth services package."""

from finance_tracker.services.auth.interface import AuthError, AuthProviderInterface
from finance_tracker.services.auth.static import StaticAuthProvider
from finance_tracker.services.auth.supabase_auth import SupabaseAuthProvider

__all__ = [
    "AuthError",
    "AuthProviderInterface",
    "StaticAuthProvider",
    "SupabaseAuthProvider",
]
