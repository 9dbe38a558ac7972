"""Authentication endpoints."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from pixelboard.core.dependencies import get_bearer_token, get_current_identity, get_db, get_optional_identity
from pixelboard.core.errors import AuthenticationError, NotFoundError, ValidationError
from pixelboard.schemas.auth import AuthResponse, LoginRequest, LoginResponse, MeResponse
from pixelboard.schemas.base import MessageResponse
from pixelboard.schemas.user import UserCreate, UserPasswordUpdate, UserRead
from pixelboard.services.auth import ResolvedIdentity
from pixelboard.services.tokens import issue_token, revoke_token
from pixelboard.services.users import authenticate_user, create_user, get_user_by_id, update_user_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _start_session(request: Request, identity: ResolvedIdentity) -> None:
    request.session.clear()
    request.session.update(identity.session_values())


@router.post("/register", response_model=AuthResponse)
async def register_user(
    payload: UserCreate,
    request: Request,
    session: AsyncSession = Depends(get_db),
) -> AuthResponse:
    user = await create_user(session, payload)
    # Registration logs the new user in. The session gets its own stored
    # token so logout can end it.
    token = await issue_token(session, user.id, user.role)
    await session.commit()

    _start_session(
        request,
        ResolvedIdentity(user_id=user.id, username=user.username, role=user.role, token=token.token, source="session"),
    )
    return AuthResponse(message="User registered successfully", user=UserRead.model_validate(user))


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    request: Request,
    session: AsyncSession = Depends(get_db),
) -> LoginResponse:
    if not payload.username or not payload.password:
        raise ValidationError("username", "Username and password are required")

    user = await authenticate_user(session, payload.username, payload.password)
    if not user:
        raise AuthenticationError("Invalid username or password")

    token = await issue_token(session, user.id, user.role)
    await session.commit()

    _start_session(
        request,
        ResolvedIdentity(user_id=user.id, username=user.username, role=user.role, token=token.token, source="session"),
    )
    logger.info("User %s logged in", user.username)
    return LoginResponse(
        message="Login successful",
        token=token.token,
        user=UserRead.model_validate(user),
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(request: Request, session: AsyncSession = Depends(get_db)) -> MessageResponse:
    tokens = {get_bearer_token(request), request.session.get("session_token")}
    for token in tokens - {None}:
        await revoke_token(session, token)
    await session.commit()
    request.session.clear()
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=MeResponse)
async def get_current_user_info(
    session: AsyncSession = Depends(get_db),
    identity: ResolvedIdentity | None = Depends(get_optional_identity),
) -> MeResponse:
    if identity is None:
        return MeResponse(success=False, user=None)
    user = await get_user_by_id(session, identity.user_id)
    if user is None:
        return MeResponse(success=False, user=None)
    return MeResponse(success=True, user=UserRead.model_validate(user))


@router.put("/password", response_model=MessageResponse, status_code=status.HTTP_200_OK)
async def change_password(
    payload: UserPasswordUpdate,
    request: Request,
    session: AsyncSession = Depends(get_db),
    identity: ResolvedIdentity = Depends(get_current_identity),
) -> MessageResponse:
    user = await get_user_by_id(session, identity.user_id)
    if user is None:
        raise NotFoundError("User not found")
    await update_user_password(session, user, payload.current_password, payload.new_password)
    await session.commit()
    # Every token was revoked, so the session must log in again too.
    request.session.clear()
    return MessageResponse(message="Password updated successfully. Please log in again.")
