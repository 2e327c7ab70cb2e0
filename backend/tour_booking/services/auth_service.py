"""
Authentication service handling admin login and bootstrap.
"""

from datetime import timedelta
from typing import Optional

from fastapi import HTTPException, status

from tour_booking.core.config import Settings
from tour_booking.core.logging import get_logger
from tour_booking.core.security import (
    ROLE_SUPERADMIN,
    CurrentAdmin,
    create_access_token,
    decode_access_token,
    hash_password,
    revoke_token,
    verify_password,
)
from tour_booking.models import AdminUser
from tour_booking.repositories.base import Repositories
from tour_booking.schemas.user import LoginRequest
from tour_booking.services import audit_service

logger = get_logger(__name__)


async def authenticate_admin(
    repos: Repositories,
    login_data: LoginRequest,
    settings: Settings,
) -> tuple[AdminUser, str, int]:
    """
    Authenticate an admin and issue a JWT.
    Returns (user, token, lifetime in seconds). Raises 401 on bad credentials.
    """
    user = await repos.users.get_by_username(login_data.username)

    if not user or not verify_password(login_data.password, user.hashed_password):
        logger.warning("login_failed", username=login_data.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    lifetime = (
        timedelta(days=settings.REMEMBER_ME_EXPIRE_DAYS)
        if login_data.remember_me
        else timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    token, expires_in = create_access_token(
        data={"sub": str(user.id), "username": user.username, "role": user.role},
        expires_delta=lifetime,
    )

    user = await repos.users.record_login(user)
    await audit_service.record(
        repos, user.id, audit_service.LOGIN, "user", user.id,
        {"remember_me": login_data.remember_me},
    )
    logger.info("admin_logged_in", user_id=user.id, role=user.role)
    return user, token, expires_in


async def logout(admin: CurrentAdmin) -> None:
    payload = decode_access_token(admin.token)
    await revoke_token(admin.token, payload.get("exp"))
    logger.info("admin_logged_out", user_id=admin.id)


async def list_admins(repos: Repositories) -> list[AdminUser]:
    return await repos.users.list_all()


async def ensure_bootstrap_admin(repos: Repositories, settings: Settings) -> Optional[AdminUser]:
    """Create the configured superadmin if it does not exist yet."""
    username = settings.ADMIN_BOOTSTRAP_USERNAME
    password = settings.ADMIN_BOOTSTRAP_PASSWORD
    if not username or not password:
        return None

    existing = await repos.users.get_by_username(username)
    if existing:
        return existing

    user = await repos.users.create(
        username=username,
        hashed_password=hash_password(password),
        role=ROLE_SUPERADMIN,
    )
    logger.info("bootstrap_admin_created", user_id=user.id, username=username)
    return user
