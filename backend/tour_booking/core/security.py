"""
Password hashing, JWT issuing/verification and admin auth dependencies.

Tokens carry the admin's id, username and role, so request authorization
never touches the database. Logged-out tokens are blacklisted until expiry:
in Redis when available, otherwise in a process-local set.
"""

import hashlib
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from redis.exceptions import RedisError

from tour_booking.core.config import get_settings
from tour_booking.core.logging import get_logger
from tour_booking.infrastructure.redis_client import get_redis

logger = get_logger(__name__)

ROLE_ADMIN = "admin"
ROLE_SUPERADMIN = "superadmin"
ROLES = (ROLE_ADMIN, ROLE_SUPERADMIN)

_bearer = HTTPBearer(auto_error=False)
_local_blacklist: set[str] = set()


@dataclass(frozen=True)
class CurrentAdmin:
    id: int
    username: str
    role: str
    token: str

    @property
    def is_superadmin(self) -> bool:
        return self.role == ROLE_SUPERADMIN


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> tuple[str, int]:
    """Return (token, lifetime in seconds)."""
    settings = get_settings()
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = dict(data)
    payload["exp"] = datetime.now(timezone.utc) + lifetime
    payload.setdefault("jti", uuid.uuid4().hex)
    token = jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return token, int(lifetime.total_seconds())


def decode_access_token(token: str) -> dict:
    settings = get_settings()
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.info("token_rejected", reason=str(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )


def _blacklist_key(token: str) -> str:
    return "auth:revoked:" + hashlib.sha256(token.encode("utf-8")).hexdigest()


async def revoke_token(token: str, expires_at: Optional[int]) -> None:
    ttl = max(int(expires_at - datetime.now(timezone.utc).timestamp()), 1) if expires_at else None
    client = await get_redis()
    if client is not None:
        try:
            await client.set(_blacklist_key(token), "1", ex=ttl)
            return
        except RedisError as e:
            logger.error("token_revocation_redis_failed", error=str(e))
    _local_blacklist.add(token)


async def is_token_revoked(token: str) -> bool:
    if token in _local_blacklist:
        return True
    client = await get_redis()
    if client is None:
        return False
    try:
        return bool(await client.exists(_blacklist_key(token)))
    except RedisError as e:
        logger.error("token_revocation_check_failed", error=str(e))
        return False


async def get_current_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> CurrentAdmin:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = credentials.credentials
    payload = decode_access_token(token)

    if await is_token_revoked(token):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has been revoked",
            headers={"WWW-Authenticate": "Bearer"},
        )

    role = payload.get("role")
    if role not in ROLES:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")

    return CurrentAdmin(
        id=int(payload["sub"]),
        username=payload.get("username", ""),
        role=role,
        token=token,
    )


async def require_superadmin(admin: CurrentAdmin = Depends(get_current_admin)) -> CurrentAdmin:
    if not admin.is_superadmin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Superadmin access required")
    return admin
