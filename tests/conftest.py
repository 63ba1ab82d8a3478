"""Shared test fixtures."""

import os

os.environ.setdefault("JWT_SECRET", "test-secret-do-not-use-in-production")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from tests.support import Market, build_market  # noqa: E402


@pytest.fixture
def market() -> Market:
    return build_market()


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints."""
    from src.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
