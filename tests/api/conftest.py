"""Shared fixtures for API endpoint tests."""

import httpx
import pytest
import pytest_asyncio

from datacollections.api.middleware.rate_limit import limiter
from datacollections.query.record_query import RecordQueryService


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests to avoid 429s."""
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def api_app(test_config, test_database, record_store, maintenance_progress, maintenance_service):
    """The application with its state wired to a temporary store.

    The lifespan does not run under ASGITransport, so state is set here.
    """
    from datacollections.main import app

    app.state.config = test_config
    app.state.db = test_database
    app.state.store = record_store
    app.state.query_service = RecordQueryService(record_store)
    app.state.maintenance_progress = maintenance_progress
    app.state.maintenance_service = maintenance_service
    return app


@pytest_asyncio.fixture
async def client(api_app):
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=api_app),
        base_url="http://test",
    ) as client:
        yield client
