"""
Admin login, bearer guard and login rate limiting.
"""
import os

import pytest
from jose import jwt

from menuboard.core.config import get_settings
from menuboard.core.security import create_admin_token, decode_token

settings = get_settings()
ADMIN_PASSWORD = os.environ["ADMIN_PASSWORD"]


@pytest.mark.asyncio
async def test_login_returns_admin_token(client):
    response = await client.post("/admin/login", json={"password": ADMIN_PASSWORD})

    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["expires_in"] == settings.ADMIN_SESSION_HOURS * 3600
    assert decode_token(body["access_token"])["type"] == "admin"

    me = await client.get("/admin/sync/state", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200

@pytest.mark.asyncio
async def test_wrong_password(client):
    response = await client.post("/admin/login", json={"password": "letmein"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid password."

@pytest.mark.asyncio
async def test_login_is_rate_limited(client):
    for _ in range(settings.RATE_LIMIT_MAX_ATTEMPTS):
        response = await client.post("/admin/login", json={"password": "wrong"})
        assert response.status_code == 401

    blocked = await client.post("/admin/login", json={"password": ADMIN_PASSWORD})
    assert blocked.status_code == 429
    assert blocked.headers["Retry-After"] == str(settings.RATE_LIMIT_WINDOW_SECONDS)

@pytest.mark.asyncio
async def test_token_without_admin_type_is_rejected(client):
    token = jwt.encode({"sub": "viewer", "type": "viewer"}, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    response = await client.get("/admin/sync/state", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401

@pytest.mark.asyncio
async def test_token_signed_with_other_key_is_rejected(client):
    token = jwt.encode({"sub": "admin", "type": "admin"}, "some-other-key", algorithm=settings.JWT_ALGORITHM)
    response = await client.get("/admin/sync/state", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401

def test_admin_token_round_trip():
    claims = decode_token(create_admin_token())
    assert claims["sub"] == "admin"
    assert "exp" in claims
