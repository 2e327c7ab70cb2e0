"""
Authentication endpoints: admin login, logout and identity.
"""

from fastapi import APIRouter, Depends

from tour_booking.api.deps import get_repositories
from tour_booking.core.config import Settings, get_settings
from tour_booking.core.security import CurrentAdmin, get_current_admin
from tour_booking.repositories.base import Repositories
from tour_booking.schemas.user import AuthUser, LoginRequest, LoginResponse, LogoutResponse
from tour_booking.services import auth_service

router = APIRouter(tags=["Authentication"])


@router.post("/login", response_model=LoginResponse)
async def login(
    login_data: LoginRequest,
    repos: Repositories = Depends(get_repositories),
    settings: Settings = Depends(get_settings),
):
    """Authenticate and receive a JWT bearer token (30 days with rememberMe)."""
    user, token, expires_in = await auth_service.authenticate_admin(repos, login_data, settings)
    return LoginResponse(
        success=True,
        token=token,
        expires_in=expires_in,
        user=AuthUser.model_validate(user),
    )


@router.post("/logout", response_model=LogoutResponse)
async def logout(admin: CurrentAdmin = Depends(get_current_admin)):
    await auth_service.logout(admin)
    return LogoutResponse()


@router.get("/me", response_model=AuthUser)
async def me(admin: CurrentAdmin = Depends(get_current_admin)):
    return AuthUser(id=admin.id, username=admin.username, role=admin.role)
