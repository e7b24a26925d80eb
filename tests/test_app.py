import pytest
from unittest.mock import AsyncMock, MagicMock
from httpx import AsyncClient
from pymongo.errors import ServerSelectionTimeoutError

from main import app
from reminders.scheduler import build_scheduler

pytestmark = pytest.mark.asyncio


async def test_root(async_client: AsyncClient):
    resp = await async_client.get("/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "online"
    assert "X-Request-ID" in resp.headers


async def test_store_outage_maps_to_503(async_client: AsyncClient, auth_headers: dict):
    scheduler = build_scheduler()
    broken = MagicMock()
    broken.count_documents = AsyncMock(side_effect=ServerSelectionTimeoutError("no servers"))
    scheduler.pipeline.store.collection = broken
    app.state.scheduler = scheduler

    resp = await async_client.get("/api/notifications/unread-count", headers=auth_headers)

    assert resp.status_code == 503
    assert "unavailable" in resp.json()["detail"]


async def test_user_lookup_outage_maps_to_503(async_client: AsyncClient, auth_headers: dict, monkeypatch):
    users = MagicMock()
    users.find_one = AsyncMock(side_effect=ServerSelectionTimeoutError("no servers"))
    monkeypatch.setattr("routes.deps.users_collection", users)

    resp = await async_client.get("/api/notifications/unread-count", headers=auth_headers)

    assert resp.status_code == 503
    assert "unavailable" in resp.json()["detail"]
