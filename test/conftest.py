import sys
import os
from pathlib import Path
import logging

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from asgi_lifespan import LifespanManager

# Add src to the Python path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

# Set environment variables before importing modules
os.environ.setdefault('SESSION_SECRET_KEY', 'test-secret-key')

from auth.session import MemoryStoreConfig, SessionManager, SessionSettings
from service.service import create_app
from users import InMemoryUserStore, PasswordHasher


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """Configure logging for tests."""
    logging.basicConfig(level=logging.INFO)


@pytest.fixture
def session_settings() -> SessionSettings:
    # Plain HTTP test client, so the cookie must not be marked secure
    return SessionSettings(
        secret_key="test-secret-key",
        secure=False,
        remember_me_days=7,
        store=MemoryStoreConfig(check_period_ms=60_000),
    )


@pytest.fixture
def session_manager(session_settings) -> SessionManager:
    return SessionManager(session_settings)


@pytest.fixture
def user_store() -> InMemoryUserStore:
    # Minimum bcrypt cost keeps the suite fast
    return InMemoryUserStore(PasswordHasher(rounds=4))


@pytest_asyncio.fixture
async def app(session_manager, user_store):
    app = create_app(user_store=user_store, session_manager=session_manager)
    async with LifespanManager(app):
        yield app


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client


@pytest.fixture
def signup_body():
    return {
        "email": "ada@example.com",
        "firstName": "Ada",
        "lastName": "Lovelace",
        "password": "analytical-engine",
    }
