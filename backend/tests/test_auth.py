"""
Tests for admin authentication and role checks.
"""

import pytest
from httpx import AsyncClient
from jose import jwt

from tour_booking.core.config import get_settings

# Matches the password conftest gives every admin fixture
ADMIN_PASSWORD = "correct-horse-battery"


@pytest.mark.asyncio
async def test_login_success(client: AsyncClient, staff_admin):
    response = await client.post(
        "/api/login",
        json={"username": "staff", "password": ADMIN_PASSWORD},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["expiresIn"] == 24 * 60 * 60
    assert data["user"] == {"id": staff_admin.id, "username": "staff", "role": "admin"}

    settings = get_settings()
    claims = jwt.decode(data["token"], settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    assert claims["sub"] == str(staff_admin.id)
    assert claims["role"] == "admin"


@pytest.mark.asyncio
async def test_login_remember_me_extends_lifetime(client: AsyncClient, staff_admin):
    response = await client.post(
        "/api/login",
        json={"username": "staff", "password": ADMIN_PASSWORD, "rememberMe": True},
    )
    assert response.json()["expiresIn"] == 30 * 24 * 60 * 60


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, staff_admin):
    response = await client.post(
        "/api/login",
        json={"username": "staff", "password": "wrong-password"},
    )
    assert response.status_code == 401
    assert response.json() == {"message": "Invalid username or password"}


@pytest.mark.asyncio
async def test_login_unknown_user(client: AsyncClient):
    response = await client.post(
        "/api/login",
        json={"username": "nobody", "password": "whatever"},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_records_audit_and_last_login(client: AsyncClient, staff_admin, auth_headers):
    await client.post("/api/login", json={"username": "staff", "password": ADMIN_PASSWORD})

    users = (await client.get("/api/admin/users", headers=auth_headers)).json()
    staff = next(u for u in users if u["username"] == "staff")
    assert staff["lastLogin"] is not None

    logs = (await client.get("/api/admin/audit-logs", headers=auth_headers)).json()
    assert logs[0]["action"] == "LOGIN"
    assert logs[0]["userId"] == staff_admin.id


@pytest.mark.asyncio
async def test_me(client: AsyncClient, staff_headers, staff_admin):
    response = await client.get("/api/me", headers=staff_headers)
    assert response.status_code == 200
    assert response.json() == {"id": staff_admin.id, "username": "staff", "role": "admin"}


@pytest.mark.asyncio
async def test_invalid_token_rejected(client: AsyncClient):
    response = await client.get("/api/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json() == {"message": "Invalid or expired token"}


@pytest.mark.asyncio
async def test_logout_revokes_token(client: AsyncClient, staff_admin):
    login = await client.post("/api/login", json={"username": "staff", "password": ADMIN_PASSWORD})
    headers = {"Authorization": f"Bearer {login.json()['token']}"}

    logout = await client.post("/api/logout", headers=headers)
    assert logout.status_code == 200
    assert logout.json()["success"] is True

    response = await client.get("/api/me", headers=headers)
    assert response.status_code == 401
    assert response.json() == {"message": "Token has been revoked"}


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/api/admin/users", "/api/admin/audit-logs"])
async def test_superadmin_only_endpoints(client: AsyncClient, staff_headers, auth_headers, path):
    forbidden = await client.get(path, headers=staff_headers)
    allowed = await client.get(path, headers=auth_headers)

    assert forbidden.status_code == 403
    assert forbidden.json() == {"message": "Superadmin access required"}
    assert allowed.status_code == 200
