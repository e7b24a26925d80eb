from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class PushSubscriptionKeys(BaseModel):
    p256dh: str
    auth: str


class PushSubscriptionRequest(BaseModel):
    """Browser PushSubscription.toJSON() as posted by the frontend."""
    endpoint: str = Field(min_length=1)
    keys: PushSubscriptionKeys
    expiration_time: Optional[int] = Field(default=None, alias="expirationTime")

    model_config = {"populate_by_name": True, "extra": "ignore"}


class PushSubscriptionModel(BaseModel):
    """One stored subscription. A user may hold several (one per browser/device)."""
    user_id: str
    endpoint: str
    keys: PushSubscriptionKeys
    created_at: datetime = Field(default_factory=datetime.now)
