"""
Static Auth Provider

Keeps the session in process memory. Used by the test suite and for
offline runs against the in-memory store.
"""

from typing import Optional
from uuid import NAMESPACE_URL, uuid5

from finance_tracker.models.records import User
from finance_tracker.services.auth.interface import AuthError, AuthProviderInterface


class StaticAuthProvider(AuthProviderInterface):
    """
    In-memory session.

    Args:
        user: User signed in from the start (None = signed out)
        accounts: email -> password map. If None, any credentials are
                  accepted and the user id is derived from the email.
    """

    def __init__(
        self,
        user: Optional[User] = None,
        accounts: Optional[dict[str, str]] = None,
    ):
        self._user = user
        self._accounts = accounts

    async def get_current_user(self) -> Optional[User]:
        return self._user

    async def sign_in(self, email: str, password: str) -> User:
        email = email.strip().lower()
        if not email or not password:
            raise AuthError("Email and password are required")
        if self._accounts is not None and self._accounts.get(email) != password:
            raise AuthError("Invalid login credentials")
        self._user = User(id=uuid5(NAMESPACE_URL, f"mailto:{email}"), email=email)
        return self._user

    async def sign_out(self) -> None:
        self._user = None
