"""Pytest configuration and fixtures for the portfolio workflow service.

HTTP tests build a fresh app per test (in-memory document store, log-only
notifications). Unit tests use the initiative factory and fixed clock below.
"""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from portfolio.core.config import get_settings
from portfolio.core.limiter import limiter
from portfolio.domain.entities import Initiative
from portfolio.infrastructure.persistence.repositories import InitiativeRepository
from portfolio.main import create_app

# Fixed reference time for engine tests: today is 2025-06-15.
NOW = datetime(2025, 6, 15, 12, 0, 0, tzinfo=UTC)
TODAY = "2025-06-15"


@pytest.fixture(autouse=True)
def _reset_settings_and_limits() -> None:
    """Each test sees settings from its own env and a clean rate-limit window."""
    get_settings.cache_clear()
    limiter.reset()
    yield
    get_settings.cache_clear()


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_initiative() -> Callable[..., Initiative]:
    """Factory for initiatives with sensible defaults; override any field by keyword."""
    counter = {"n": 0}

    def _make(**overrides: Any) -> Initiative:
        counter["n"] += 1
        values: dict[str, Any] = {
            "id": f"ini_{counter['n']}",
            "title": f"Initiative {counter['n']}",
            "owner_id": "u_owner",
            "last_updated": TODAY,
        }
        values.update(overrides)
        return Initiative(**values)

    return _make


@pytest.fixture
def app() -> FastAPI:
    return create_app()


@pytest.fixture
async def client(app: FastAPI) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def seed_initiatives(app: FastAPI) -> Callable[[list[Initiative]], Any]:
    """Write initiatives straight into the app's document store."""

    async def _seed(initiatives: list[Initiative]) -> None:
        await InitiativeRepository(app.state.document_store).save_initiatives(initiatives)

    return _seed
