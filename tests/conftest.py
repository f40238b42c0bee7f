from collections.abc import AsyncGenerator, Callable
from datetime import datetime

import httpx
import pytest
import pytest_asyncio
from dotenv import load_dotenv
from httpx import ASGITransport, AsyncClient

# Load environment variables from .env file
load_dotenv()

from app.core import http_client as http_client_module
from app.core import redis_client as redis_client_module
from app.core.redis_client import get_redis_client
from app.core.session import SessionContext
from app.main import app
from app.services.gateway import BackendGateway
from app.services.token_resolver import TokenResolver
from tests.helpers import NOW, FakeBackend, FakeRedis

BACKEND_URL = "http://backend.test"


@pytest.fixture
def backend() -> FakeBackend:
    """Fake backend API."""
    return FakeBackend()


@pytest_asyncio.fixture
async def http_client(backend: FakeBackend) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Backend HTTP client routed to the fake backend."""
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(backend.handle),
        base_url=BACKEND_URL,
    ) as client:
        yield client


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def resolver(http_client: httpx.AsyncClient) -> TokenResolver:
    return TokenResolver(http_client)


@pytest.fixture
def gateway(http_client: httpx.AsyncClient, resolver: TokenResolver) -> BackendGateway:
    return BackendGateway(http_client, resolver)


@pytest.fixture
def make_session() -> Callable[..., SessionContext]:
    """Build a session from cookies with a fixed clock."""

    def _make(now: datetime = NOW, **cookies: str) -> SessionContext:
        return SessionContext.from_cookies(cookies, clock=lambda: now)

    return _make


@pytest_asyncio.fixture
async def client(
    http_client: httpx.AsyncClient,
    fake_redis: FakeRedis,
    monkeypatch: pytest.MonkeyPatch,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client for the app, wired to the fake backend and Redis."""
    monkeypatch.setattr(http_client_module, "_http_client", http_client)
    monkeypatch.setattr(redis_client_module, "_redis_client", fake_redis)
    app.dependency_overrides[get_redis_client] = lambda: fake_redis

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
