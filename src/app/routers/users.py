from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from src.app.deps import CurrentUser, get_auth_provider, get_current_user
from src.app.domain.errors import AuthError, InvalidCredentialsError, UserAlreadyExistsError
from src.app.domain.models import AuthSession, User
from src.app.infra.auth.base import AuthProvider
from src.app.schemas.users import (
    LoginRequest,
    RegisterRequest,
    RegisterResponse,
    TokenResponse,
    UserResponse,
)

log = logging.getLogger("users")
router = APIRouter(prefix="/users", tags=["users"])


def _user_response(user: User) -> UserResponse:
    return UserResponse(id=user.id, username=user.username, email=user.email, isGuest=user.is_guest)


def _token_response(session: AuthSession) -> TokenResponse:
    return TokenResponse(
        token=session.access_token,
        expiresIn=session.expires_in,
        user=_user_response(session.user),
    )


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    auth: AuthProvider = Depends(get_auth_provider),
) -> RegisterResponse:
    try:
        user = auth.register(payload.email, payload.password, username=payload.username)
    except UserAlreadyExistsError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except AuthError as exc:
        log.error("Registration failed: %s", exc)
        raise HTTPException(status_code=500, detail="Server error during registration")
    return RegisterResponse(message="User registered", user=_user_response(user))


@router.post("/login", response_model=TokenResponse)
def login(
    payload: LoginRequest,
    auth: AuthProvider = Depends(get_auth_provider),
) -> TokenResponse:
    try:
        session = auth.login(payload.email, payload.password)
    except InvalidCredentialsError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except AuthError as exc:
        log.error("Login failed: %s", exc)
        raise HTTPException(status_code=500, detail="Server error during login")
    return _token_response(session)


@router.post("/guest", response_model=TokenResponse)
def guest_login(auth: AuthProvider = Depends(get_auth_provider)) -> TokenResponse:
    try:
        session = auth.create_guest()
    except AuthError as exc:
        log.error("Guest login failed: %s", exc)
        raise HTTPException(status_code=500, detail="Failed to create guest user")
    return _token_response(session)


@router.get("/me", response_model=CurrentUser)
async def me(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    return user
