# src/app/infra/auth/base.py
"""
Abstract base class for identity providers.
This interface allows swapping the user/session backend.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from src.app.domain.models import AuthSession, User


class AuthProvider(ABC):
    """
    Abstract interface for registration and token issuance.

    Implementations:
    - SupabaseAuthProvider: Supabase Auth (GoTrue)
    """

    @abstractmethod
    def register(self, email: str, password: str, username: Optional[str] = None) -> User:
        """
        Create a password user.

        Raises:
            UserAlreadyExistsError: If the e-mail is taken
        """
        pass

    @abstractmethod
    def login(self, email: str, password: str) -> AuthSession:
        """
        Exchange credentials for a bearer token (valid for one hour).

        Raises:
            InvalidCredentialsError: If the credentials do not match
        """
        pass

    @abstractmethod
    def create_guest(self) -> AuthSession:
        """
        Create an ephemeral guest identity and issue a token for it.
        """
        pass
