import pytest
from unittest.mock import patch, MagicMock
from httpx import AsyncClient

from config import config
from errors import DispatchError
from utils.push import send_push_notification

pytestmark = pytest.mark.asyncio

SUBSCRIPTION = {
    "endpoint": "https://fcm.googleapis.com/fcm/send/test-endpoint-123",
    "keys": {
        "p256dh": "p256dh-key-test",
        "auth": "auth-key-test"
    }
}


@pytest.fixture
def vapid(monkeypatch):
    monkeypatch.setattr(config, "VAPID_PUBLIC_KEY", "public-key-test")
    monkeypatch.setattr(config, "VAPID_PRIVATE_KEY", "private-key-test")
    monkeypatch.setattr(config, "VAPID_CLAIM_EMAIL", "mailto:ops@nutrimind.ai")


async def test_get_vapid_public_key(async_client: AsyncClient, auth_headers: dict, vapid):
    """Test that the VAPID public key is returned."""
    resp = await async_client.get("/api/push/vapid-public-key", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["public_key"] == "public-key-test"


async def test_vapid_public_key_missing(async_client: AsyncClient, monkeypatch):
    monkeypatch.setattr(config, "VAPID_PUBLIC_KEY", None)
    resp = await async_client.get("/api/push/vapid-public-key")
    assert resp.status_code == 500


async def test_subscribe_unsubscribe_push(async_client: AsyncClient, auth_headers: dict, mongo):
    """Test creating and removing a push subscription."""
    # 1. Subscribe
    resp = await async_client.post("/api/push/subscribe", json=SUBSCRIPTION, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["message"] == "Subscription saved"

    # 2. Subscribe again (Idempotent upsert)
    resp = await async_client.post("/api/push/subscribe", json=SUBSCRIPTION, headers=auth_headers)
    assert resp.status_code == 200
    assert await mongo.push_subscriptions.count_documents({"user_id": "test_user_id"}) == 1

    # 3. Unsubscribe
    resp = await async_client.request("DELETE", "/api/push/subscribe", json={"endpoint": SUBSCRIPTION["endpoint"]}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["message"] == "Subscription removed"
    assert await mongo.push_subscriptions.count_documents({}) == 0


async def test_subscribe_invalid_payload(async_client: AsyncClient, auth_headers: dict):
    resp = await async_client.post("/api/push/subscribe", json={"endpoint": "x"}, headers=auth_headers)
    assert resp.status_code == 400


async def test_unsubscribe_missing_endpoint(async_client: AsyncClient, auth_headers: dict):
    """Test standard validation."""
    resp = await async_client.request("DELETE", "/api/push/subscribe", json={}, headers=auth_headers)
    assert resp.status_code == 400


# ── Sending ───────────────────────────────────────────────────────────────────

async def test_send_without_vapid_keys(monkeypatch):
    monkeypatch.setattr(config, "VAPID_PRIVATE_KEY", None)
    with pytest.raises(DispatchError):
        await send_push_notification("user_1", "Title", "Body")


async def test_send_without_subscriptions(vapid):
    with pytest.raises(DispatchError, match="No push subscriptions"):
        await send_push_notification("user_1", "Title", "Body")


async def test_send_to_every_subscription(vapid, mongo):
    await mongo.push_subscriptions.insert_one({"user_id": "user_1", **SUBSCRIPTION})
    await mongo.push_subscriptions.insert_one({"user_id": "user_1", "endpoint": "https://push.example/2", "keys": {}})

    with patch("utils.push.webpush") as webpush:
        delivered = await send_push_notification("user_1", "Lunch Time!", "Eat", "/notifications")

    assert delivered == 2
    assert webpush.call_count == 2
    assert '"url": "/notifications"' in webpush.call_args.kwargs["data"]


async def test_expired_subscriptions_are_pruned(vapid, mongo):
    from pywebpush import WebPushException

    await mongo.push_subscriptions.insert_one({"user_id": "user_1", **SUBSCRIPTION})
    gone = WebPushException("Gone", response=MagicMock(status_code=410))

    with patch("utils.push.webpush", side_effect=gone):
        with pytest.raises(DispatchError):
            await send_push_notification("user_1", "Title", "Body")

    assert await mongo.push_subscriptions.count_documents({"user_id": "user_1"}) == 0
