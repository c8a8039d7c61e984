from __future__ import annotations

import logging
import time
from typing import Any, Optional

from supabase import AuthApiError, Client, create_client

from src.app.domain.errors import AuthError, InvalidCredentialsError, UserAlreadyExistsError
from src.app.domain.models import AuthSession, User
from src.app.infra.auth.base import AuthProvider

logger = logging.getLogger(__name__)

DEFAULT_EXPIRES_IN = 3600
_ALREADY_EXISTS_CODES = {"user_already_exists", "email_exists"}


def _to_user(raw: Any) -> User:
    meta = getattr(raw, "user_metadata", None) or {}
    if not isinstance(meta, dict):
        meta = {}
    return User(
        id=str(raw.id),
        username=meta.get("username"),
        email=getattr(raw, "email", None) or None,
        is_guest=bool(getattr(raw, "is_anonymous", False) or meta.get("is_guest")),
    )


def _to_session(response: Any) -> AuthSession:
    session = getattr(response, "session", None)
    user = getattr(response, "user", None)
    if session is None or user is None:
        raise AuthError("Authentication did not return a session")
    return AuthSession(
        access_token=session.access_token,
        expires_in=int(getattr(session, "expires_in", None) or DEFAULT_EXPIRES_IN),
        user=_to_user(user),
    )


class SupabaseAuthProvider(AuthProvider):
    """
    Sign-up and sign-in through Supabase Auth.

    Each call uses its own short-lived client so a user session never leaks into
    the service-role client shared by the repositories.
    """

    def __init__(self, url: str, key: str):
        self._url = url
        self._key = key

    def _session_client(self) -> Client:
        return create_client(self._url, self._key)

    def register(self, email: str, password: str, username: Optional[str] = None) -> User:
        try:
            response = self._session_client().auth.sign_up(
                {
                    "email": email,
                    "password": password,
                    "options": {"data": {"username": username, "is_guest": False}},
                }
            )
        except AuthApiError as error:
            if error.code in _ALREADY_EXISTS_CODES or "already" in str(error).lower():
                raise UserAlreadyExistsError(email) from error
            logger.error("Sign-up failed for %s: %s", email, error)
            raise AuthError(str(error)) from error

        user = getattr(response, "user", None)
        # with e-mail confirmation enabled an existing address comes back without identities
        if user is None or getattr(user, "identities", None) == []:
            raise UserAlreadyExistsError(email)

        logger.info("Registered user id=%s", user.id)
        return _to_user(user)

    def login(self, email: str, password: str) -> AuthSession:
        try:
            response = self._session_client().auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AuthApiError as error:
            logger.info("Login rejected for %s: %s", email, error)
            raise InvalidCredentialsError() from error
        return _to_session(response)

    def create_guest(self) -> AuthSession:
        username = f"guest_{int(time.time() * 1000)}"
        try:
            response = self._session_client().auth.sign_in_anonymously(
                {"options": {"data": {"username": username, "is_guest": True}}}
            )
        except AuthApiError as error:
            logger.error("Guest sign-in failed: %s", error)
            raise AuthError(str(error)) from error

        auth_session = _to_session(response)
        logger.info("Created guest user id=%s", auth_session.user.id)
        return auth_session
