from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, Literal
from datetime import datetime
import uuid


class NotificationCandidate(BaseModel):
    """A reminder a strategy decided to emit. Not persisted yet."""
    type: str
    title: str
    message: str
    scheduled_time: datetime
    metadata: dict = Field(default_factory=dict)


class NotificationModel(BaseModel):
    """Persisted reminder, one row per generated candidate. Never deleted."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str  # Who receives the notification
    type: str = "general"

    # Content
    title: str = "Notification"
    message: str
    scheduled_time: datetime

    # Context
    metadata: dict = Field(default_factory=dict)

    # State
    status: Literal['pending', 'sent', 'dismissed'] = 'pending'
    created_at: datetime = Field(default_factory=datetime.now)
    sent_time: Optional[datetime] = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ChannelResult(BaseModel):
    """Outcome of delivering one notification over one channel."""
    channel: str
    ok: bool
    error: Optional[str] = None
    test: bool = False


class InjectNotificationRequest(BaseModel):
    type: str = "test"
    title: str = "Test Notification"
    message: str = "This is a test notification"
