"""
Pytest configuration and fixtures
Shared test setup for all test modules
"""

import os

# Settings are read at import time; set them before the app is imported
os.environ.setdefault("ENCRYPTION_KEY", "this-is-a-32-character-test-key!")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ENVIRONMENT", "test")

import uuid
from types import SimpleNamespace

import pytest
from typing import AsyncGenerator
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from portal_jai1.main import app
from portal_jai1.api.dependencies import get_current_user, get_field_cipher
from portal_jai1.core.encryption import FieldCipher
from portal_jai1.db.base import Base
from portal_jai1.db.models.client_profile import ClientProfile
from portal_jai1.db.database import get_db

TEST_ENCRYPTION_KEY = "this-is-a-32-character-test-key!"  # 32 chars
TEST_DATABASE_URL = "sqlite+aiosqlite://"
ADMIN_USER_ID = uuid.UUID("00000000-0000-4000-8000-000000000001")


@pytest.fixture
def cipher() -> FieldCipher:
    return FieldCipher(TEST_ENCRYPTION_KEY)


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Clean in-memory database for each test"""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory, cipher) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client with database and cipher overrides"""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_field_cipher] = lambda: cipher

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
async def plaintext_profile(db_session: AsyncSession) -> ClientProfile:
    """Profile written before encryption existed: bank data and TurboTax email in plaintext"""
    profile = ClientProfile(
        user_email="legacy@example.com",
        first_name="Legacy",
        last_name="Client",
        bank_routing_number="021000021",
        bank_account_number="123456789012",
        turbotax_email="legacy.client@gmail.com",
    )
    db_session.add(profile)
    await db_session.commit()
    await db_session.refresh(profile)
    return profile


@pytest.fixture
def as_admin(client) -> SimpleNamespace:
    """Requests carry an authenticated admin identity"""
    admin = SimpleNamespace(id=ADMIN_USER_ID, role="admin")
    app.dependency_overrides[get_current_user] = lambda: admin
    return admin


@pytest.fixture
def as_client_user(client) -> SimpleNamespace:
    """Requests carry an authenticated identity without the admin role"""
    user = SimpleNamespace(id=uuid.uuid4(), role="client")
    app.dependency_overrides[get_current_user] = lambda: user
    return user
