import os
import tempfile

import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# ------------------------------------------------------------------
# FORCE TESTING MODE
# This must be done BEFORE importing app.main so database.py builds
# the engine against a throwaway SQLite file with NullPool.
# ------------------------------------------------------------------
_TEST_DB = os.path.join(tempfile.mkdtemp(prefix="dashboard-tests-"), "dashboard.db")
os.environ["TESTING"] = "true"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DB}"
os.environ["WIDGET_API_BASE_URL"] = "http://widgets.test/api/v1"

from sqlmodel import SQLModel

from app.main import app
from app.api.deps import get_widget_client
from app.core.database import AsyncSessionLocal, engine, init_db
from app.core.seeding_logic import seed_all


@pytest_asyncio.fixture
async def seeded_db():
    """Fresh tables for every test, seeded with the catalog and the SuperAdmin layout."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await init_db()
    await seed_all()
    yield


@pytest_asyncio.fixture
async def db_session(seeded_db):
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
def widget_backend():
    """
    Canned widget endpoints, keyed by URL path.
    Values are httpx.Response objects or callables taking the request.
    """
    return {}


@pytest.fixture
def widget_transport(widget_backend):
    def handler(request: httpx.Request) -> httpx.Response:
        route = widget_backend.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"message": f"No route for {request.url.path}"})
        if callable(route):
            return route(request)
        return route

    return httpx.MockTransport(handler)


@pytest_asyncio.fixture
async def client(seeded_db, widget_transport):
    """
    Correct fixture for httpx >= 0.27
    Uses ASGITransport() instead of app=...
    ASGITransport does not fire startup events, so seeded_db prepares the tables.
    """
    async def widget_client():
        async with httpx.AsyncClient(transport=widget_transport) as widget_http:
            yield widget_http

    app.dependency_overrides[get_widget_client] = widget_client
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()
