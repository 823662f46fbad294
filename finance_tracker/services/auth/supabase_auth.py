"""
Supabase Auth Provider

Wraps the Supabase auth client. The session lives inside the shared
SupabaseClient, so once a user signs in here every request made by the
SupabaseRecordStore on the same client runs as that user.
"""

import asyncio
from typing import Optional

import structlog

from finance_tracker.models.records import User
from finance_tracker.services.auth.interface import AuthError, AuthProviderInterface
from finance_tracker.services.storage.supabase_store import SupabaseClient


logger = structlog.get_logger(__name__)


def _to_user(auth_user) -> Optional[User]:
    if auth_user is None:
        return None
    return User(id=auth_user.id, email=getattr(auth_user, "email", None))


class SupabaseAuthProvider(AuthProviderInterface):
    """Supabase implementation of the auth provider."""

    def __init__(self, client: Optional[SupabaseClient] = None):
        self._client = client or SupabaseClient()

    async def get_current_user(self) -> Optional[User]:
        """
        Ask Supabase who is signed in.

        A missing or expired session is reported as "nobody", not as an error:
        the page gate shows the sign-in form in that case.
        """
        try:
            response = await asyncio.to_thread(self._client.auth.get_user)
        except Exception as e:
            logger.warning("auth_get_user_failed", error=str(e))
            return None
        return _to_user(getattr(response, "user", None)) if response else None

    async def sign_in(self, email: str, password: str) -> User:
        try:
            response = await asyncio.to_thread(
                self._client.auth.sign_in_with_password,
                {"email": email.strip(), "password": password},
            )
        except Exception as e:
            raise AuthError(str(e) or "Sign in failed") from e

        user = _to_user(getattr(response, "user", None))
        if user is None:
            raise AuthError("Sign in failed")
        return user

    async def sign_out(self) -> None:
        try:
            await asyncio.to_thread(self._client.auth.sign_out)
        except Exception as e:
            raise AuthError(str(e) or "Sign out failed") from e
