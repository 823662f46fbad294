"""
Abstract Auth Provider Interface

Authentication is owned by the backend. The app only needs to know who is
signed in, and to start or end a session.
"""

from abc import ABC, abstractmethod
from typing import Optional

from finance_tracker.models.records import User


class AuthProviderInterface(ABC):
    """Any auth backend (Supabase, static, ...) must implement these methods."""

    @abstractmethod
    async def get_current_user(self) -> Optional[User]:
        """
        Identity of the signed-in principal.

        Returns:
            The user, or None when nobody is signed in
        """
        pass

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> User:
        """
        Start a session with email/password credentials.

        Raises:
            AuthError: If the credentials are rejected
        """
        pass

    @abstractmethod
    async def sign_out(self) -> None:
        """Terminate the current session."""
        pass


class AuthError(Exception):
    """No authenticated user, or the auth backend refused the request."""
    pass
