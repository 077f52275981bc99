"""
Pytest configuration and fixtures for Legacy API tests.
"""
import os
from typing import Any, AsyncGenerator, Awaitable, Callable, Dict, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

# Set test environment variables
os.environ["ENV"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key"

from legacyapi import LegacyAPI, create_app
from legacyapi.core.config import Settings
from legacyapi.core.security import PasswordHasher
from legacyapi.db import Admin, Database, FamilyMember

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
ADMIN_EMAIL = "admin@x.com"
ADMIN_PASSWORD = "secret123"


@pytest.fixture
def test_settings() -> Settings:
    """Settings for an isolated in-memory application."""
    return Settings(
        ENV="test",
        DATABASE_URL=TEST_DATABASE_URL,
        SECRET_KEY="test-secret-key",
        BCRYPT_ROUNDS=4,
        COOKIE_SECURE=False,
        INITIAL_ADMIN_EMAIL=None,
        INITIAL_ADMIN_PASSWORD=None,
    )


@pytest.fixture
def hasher(test_settings: Settings) -> PasswordHasher:
    return PasswordHasher(rounds=test_settings.BCRYPT_ROUNDS)


@pytest_asyncio.fixture
async def database(test_settings: Settings) -> AsyncGenerator[Database, None]:
    """A fresh in-memory database with every table created."""
    database = Database(test_settings.DATABASE_URL)
    await database.create_tables()
    yield database
    await database.close()


@pytest_asyncio.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """A session on the test database, committed when the test ends."""
    async with database.get_session() as session:
        yield session


@pytest_asyncio.fixture
async def app(test_settings: Settings, database: Database) -> AsyncGenerator[LegacyAPI, None]:
    """The application with its startup and shutdown hooks running."""
    test_app = create_app(settings=test_settings, database=database)
    async with test_app.router.lifespan_context(test_app):
        yield test_app


@pytest_asyncio.fixture
async def client(app: LegacyAPI) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client talking to the app in-process; keeps cookies between calls."""
    transport = ASGITransport(app=app, client=("127.0.0.1", 50000))
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def make_admin(database: Database, hasher: PasswordHasher) -> Callable[..., Awaitable[Admin]]:
    """Factory that inserts an admin row."""
    async def _make_admin(
        email: str = ADMIN_EMAIL,
        password: Optional[str] = ADMIN_PASSWORD,
        role: str = "admin",
        username: Optional[str] = None,
        is_active: bool = True,
        **fields: Any,
    ) -> Admin:
        async with database.get_session() as session:
            admin = Admin(
                email=email,
                username=username,
                role=role,
                password_hash=hasher.hash(password) if password else None,
                is_active=is_active,
                password_changed=True,
                **fields,
            )
            session.add(admin)
            await session.flush()
        return admin

    return _make_admin


@pytest.fixture
def make_member(database: Database, hasher: PasswordHasher) -> Callable[..., Awaitable[FamilyMember]]:
    """Factory that inserts a family member; the password defaults to the username."""
    async def _make_member(
        first_name: str = "Jane",
        last_name: str = "Doe",
        username: Optional[str] = "jane.doe",
        password: Optional[str] = None,
        is_active: bool = True,
        password_changed: bool = False,
        **fields: Any,
    ) -> FamilyMember:
        password = password if password is not None else username
        async with database.get_session() as session:
            member = FamilyMember(
                first_name=first_name,
                last_name=last_name,
                username=username,
                password_hash=hasher.hash(password) if password else None,
                is_active=is_active,
                password_changed=password_changed,
                **fields,
            )
            session.add(member)
            await session.flush()
        return member

    return _make_member


@pytest_asyncio.fixture
async def admin_user(make_admin) -> Admin:
    return await make_admin()


@pytest_asyncio.fixture
async def family_user(make_member) -> FamilyMember:
    return await make_member()


@pytest.fixture
def login(client: AsyncClient) -> Callable[[str, str], Awaitable[Dict[str, Any]]]:
    """Log in and return the response body; the client keeps the cookie."""
    async def _login(username: str, password: str) -> Dict[str, Any]:
        response = await client.post(
            "/api/auth/login", json={"username": username, "password": password}
        )
        assert response.status_code == 200, response.text
        return response.json()

    return _login


@pytest_asyncio.fixture
async def admin_client(client: AsyncClient, admin_user: Admin, login) -> AsyncClient:
    """Client holding an admin session cookie."""
    await login(ADMIN_EMAIL, ADMIN_PASSWORD)
    return client
