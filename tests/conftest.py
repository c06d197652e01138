"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from swadrive.auth import service as auth_service
from swadrive.config import Settings, get_settings
from swadrive.database import Database
from swadrive.db.enums import Role
from swadrive.db.models import Task, User
from swadrive.main import create_app
from swadrive.tasks import service as task_service

TEST_JWT_SECRET = "test-secret-key-for-swadrive-tests-0123456789abcdef"
TEST_PASSWORD = "SecureP@ss1"


@pytest.fixture
def settings(tmp_path, monkeypatch) -> Generator[Settings, None, None]:
    """Point the app at a throwaway SQLite file, a fixed signing secret and a cheap hash."""
    monkeypatch.setenv("SWADRIVE_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'swadrive.db'}")
    monkeypatch.setenv("SWADRIVE_JWT_SECRET", TEST_JWT_SECRET)
    monkeypatch.setenv("SWADRIVE_LOG_FORMAT", "console")
    monkeypatch.setenv("SWADRIVE_PASSWORD_HASH_TIME_COST", "1")
    monkeypatch.setenv("SWADRIVE_PASSWORD_HASH_MEMORY_COST", "1024")
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncGenerator[FastAPI, None]:
    """App with a freshly created schema."""
    application = create_app(settings)
    database: Database = application.state.database
    await database.create_all()
    yield application
    await database.dispose()


@pytest_asyncio.fixture
async def database(app: FastAPI) -> Database:
    return app.state.database


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """Get a direct database session for service calls and assertions."""
    async with database.session_factory() as session:
        yield session


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def register_user(
    client: AsyncClient,
    email: str,
    role: str,
    password: str = TEST_PASSWORD,
    full_name: str | None = None,
) -> dict:
    """Helper to register a user via the API."""
    response = await client.post("/api/register", json={
        "full_name": full_name or email.split("@")[0].title(),
        "email": email,
        "phone": "+910000000000",
        "password": password,
        "role": role,
    })
    assert response.status_code == 200, response.text
    data = response.json()
    return {
        "email": email,
        "password": password,
        "role": role,
        "user_id": data["user_id"],
        "token": data["token"],
        "headers": bearer(data["token"]),
    }


async def create_task(client: AsyncClient, customer: dict, **fields) -> int:
    """Helper to post a task as a customer; returns its id."""
    body = {
        "category": "Plumbing",
        "specific_problem": "Leaking tap",
        "description": "Kitchen tap drips all night",
        "location": "Pune",
        "urgency": "today",
        "reward_amount": 0,
    }
    body.update(fields)
    body = {key: value for key, value in body.items() if value is not None}
    response = await client.post("/api/tasks", json=body, headers=customer["headers"])
    assert response.status_code == 200, response.text
    return response.json()["task_id"]


@pytest_asyncio.fixture
async def customer(client: AsyncClient) -> dict:
    return await register_user(client, "customer@example.com", "customer")


@pytest_asyncio.fixture
async def helper(client: AsyncClient) -> dict:
    return await register_user(client, "helper@example.com", "helper")


@pytest_asyncio.fixture
async def second_helper(client: AsyncClient) -> dict:
    return await register_user(client, "helper2@example.com", "helper")


async def make_user(db: AsyncSession, email: str, role: Role) -> User:
    """Helper to insert a user through the service layer."""
    return await auth_service.register_user(db, None, email, None, TEST_PASSWORD, role=role)


async def make_task(db: AsyncSession, owner_id: int, title: str = "Plumbing - Leaking tap") -> Task:
    """Helper to insert an open task through the service layer."""
    return await task_service.create_task(
        db, owner_id, title=title, description=None, location="Pune", reward_amount=100
    )
