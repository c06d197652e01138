"""Tests for email + password login."""

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from swadrive.auth.jwt import verify_token
from swadrive.config import get_settings
from swadrive.database import Database
from swadrive.db.models import User
from tests.conftest import register_user


async def _stored_hash(database: Database, email: str) -> str:
    async with database.session_factory() as db:
        result = await db.execute(select(User.password_hash).where(User.email == email))
        return result.scalar_one()


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_success(self, client: AsyncClient):
        registered = await register_user(client, "login@example.com", "helper", full_name="Login Helper")
        response = await client.post("/api/login", json={
            "email": "login@example.com",
            "password": registered["password"],
        })
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Login successful"
        payload = verify_token(data["token"])
        assert payload["sub"] == str(registered["user_id"])
        assert payload["role"] == "helper"

        user = data["user"]
        assert user["user_id"] == registered["user_id"]
        assert user["email"] == "login@example.com"
        assert user["full_name"] == "Login Helper"
        assert user["role"] == "helper"
        assert "password" not in user
        assert "password_hash" not in user

    @pytest.mark.asyncio
    async def test_login_email_case_insensitive(self, client: AsyncClient):
        registered = await register_user(client, "mixed@example.com", "customer")
        response = await client.post("/api/login", json={
            "email": "Mixed@Example.COM",
            "password": registered["password"],
        })
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_unknown_email(self, client: AsyncClient):
        response = await client.post("/api/login", json={
            "email": "ghost@example.com",
            "password": "whatever",
        })
        assert response.status_code == 400
        assert response.json() == {"message": "User not found"}

    @pytest.mark.asyncio
    async def test_wrong_password(self, client: AsyncClient):
        await register_user(client, "wrongpw@example.com", "customer")
        response = await client.post("/api/login", json={
            "email": "wrongpw@example.com",
            "password": "not-the-password",
        })
        assert response.status_code == 400
        assert response.json() == {"message": "Wrong password"}

    @pytest.mark.asyncio
    async def test_login_token_reaches_guarded_route(self, client: AsyncClient):
        registered = await register_user(client, "roundtrip@example.com", "customer")
        login = await client.post("/api/login", json={
            "email": "roundtrip@example.com",
            "password": registered["password"],
        })
        token = login.json()["token"]
        response = await client.get("/api/my-tasks", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_login_upgrades_outdated_hash(self, client: AsyncClient, database: Database, monkeypatch):
        registered = await register_user(client, "upgrade@example.com", "customer")
        old_hash = await _stored_hash(database, "upgrade@example.com")

        monkeypatch.setenv("SWADRIVE_PASSWORD_HASH_TIME_COST", "2")
        get_settings.cache_clear()
        response = await client.post("/api/login", json={
            "email": "upgrade@example.com",
            "password": registered["password"],
        })

        assert response.status_code == 200
        new_hash = await _stored_hash(database, "upgrade@example.com")
        assert new_hash != old_hash
        assert "t=2" in new_hash
