import os
import tempfile
from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient, ASGITransport
from mongomock_motor import AsyncMongoMockClient

# Set up test environment variables before anything else
os.environ["ENV"] = "testing"
os.environ["DB_NAME"] = "nutrimind_test"
os.environ["SECRET_KEY"] = "test_secret_key_12345"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["EMAIL_PROVIDER"] = "smtp"
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="nutrimind-logs-"))

from config import config
config.ENV = "testing"
config.SMTP_USER = None
config.SMTP_PASS = None
config.RESEND_API_KEY = None

from main import app
from database import client, db
from routes.deps import create_access_token
from models.context import UserContext
from models.user import UserModel


class FakeClock:
    """Injectable wall clock. Call it for the current time; advance() moves it forward."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta):
        self.now = self.now + timedelta(**delta)
        return self.now


class FakeContextProvider:
    """In-memory stand-in for the collaborator services."""

    def __init__(self, users=None, contexts=None, weekly_logs=None, activities=None):
        self.users = users or []
        self.contexts = contexts or {}
        self.weekly_logs = weekly_logs or {}
        self.activities = activities or {}
        self.weekly_calls = 0
        self.activity_calls = 0

    async def get_user_list(self):
        return list(self.users)

    async def get_user_context(self, user_id, profile=None, now=None):
        context = self.contexts.get(user_id)
        if context is not None:
            return context.model_copy(deep=True)
        return UserContext(profile=profile or UserModel(id=user_id))

    async def get_weekly_logs(self, user_id, now=None):
        self.weekly_calls += 1
        return list(self.weekly_logs.get(user_id, []))

    async def get_upcoming_activities(self, user_id, start, end):
        self.activity_calls += 1
        return [a for a in self.activities.get(user_id, []) if start <= a.scheduled_start <= end]


@pytest.fixture
def clock():
    # A Wednesday
    return FakeClock(datetime(2026, 10, 14, 11, 0, 0))


@pytest.fixture
def profile():
    return UserModel(id="user_1", email="maya@example.com", name="Maya", weight=70, country="India")


@pytest.fixture(autouse=True)
def mongo():
    """Fresh in-memory Motor client per test."""
    client.use(AsyncMongoMockClient())
    app.state.scheduler = None
    yield db
    app.state.scheduler = None
    client._client = None
    client._db = None


@pytest.fixture
async def async_client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client


@pytest.fixture
async def test_user(mongo):
    user_data = {
        "id": "test_user_id",
        "email": "owner@example.com",
        "name": "Test Owner",
        "weight": 70,
        "country": "India",
    }
    await mongo.users.insert_one(dict(user_data))
    return user_data


@pytest.fixture
async def other_user(mongo):
    user_data = {
        "id": "other_user_id",
        "email": "other@example.com",
        "name": "Other User",
        "weight": 80,
    }
    await mongo.users.insert_one(dict(user_data))
    return user_data


def _token_for(user_id: str) -> str:
    return create_access_token(data={"sub": user_id}, expires_delta=timedelta(minutes=60))


@pytest.fixture
def auth_headers(test_user):
    return {"Authorization": f"Bearer {_token_for(test_user['id'])}"}


@pytest.fixture
def other_auth_headers(other_user):
    return {"Authorization": f"Bearer {_token_for(other_user['id'])}"}
