"""Authentication router: register, login, logout and the current user."""

from typing import Any

from fastapi import APIRouter, Body, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from libs.auth.models import AuthUser
from libs.common.datetime_utils import Clock, get_clock
from libs.common.rate_limit import auth_limit
from libs.db.session import get_async_db
from services.members_service.dependencies import get_current_user
from services.members_service.schemas import (
    LoginResponse,
    LogoutAllResponse,
    MeResponse,
    MessageResponse,
    RegisterResponse,
)
from services.members_service.services import auth_service
from services.members_service.services.views import (
    user_response,
    user_with_profile_response,
)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED
)
@auth_limit
async def register(
    request: Request,
    payload: dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_async_db),
):
    """Create an account. Log in separately to obtain a token."""
    user = await auth_service.register(db, data=payload)
    return RegisterResponse(
        message="User registered successfully.", user=user_response(user)
    )


@router.post("/login", response_model=LoginResponse)
@auth_limit
async def login(
    request: Request,
    payload: dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_async_db),
):
    result = await auth_service.login(db, data=payload)
    return LoginResponse(
        message="Login successful.",
        user=user_response(result.user),
        token=result.token,
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Revoke only the token used for this request."""
    await auth_service.logout(db, actor=current_user)
    return MessageResponse(message="Logout successful.")


@router.post("/logout-all", response_model=LogoutAllResponse)
async def logout_all(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    revoked = await auth_service.logout_all_devices(db, actor=current_user)
    return LogoutAllResponse(
        message="Successfully logged out from all devices.", revoked=revoked
    )


@router.get("/me", response_model=MeResponse)
async def me(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    clock: Clock = Depends(get_clock),
):
    user, profile = await auth_service.get_authenticated_user(db, actor=current_user)
    return MeResponse(user=user_with_profile_response(user, profile, clock.today()))
