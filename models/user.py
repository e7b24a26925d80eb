from pydantic import BaseModel, Field, EmailStr, ConfigDict
from typing import Optional
from datetime import datetime
import uuid

class UserModel(BaseModel):
    """Profile fields the reminder engine reads. The users collection is owned by the accounts service."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    email: Optional[EmailStr] = None
    name: Optional[str] = None
    last_name: Optional[str] = None

    weight: Optional[float] = None  # kg
    height: Optional[float] = None  # cm
    age: Optional[int] = None
    gender: Optional[str] = None
    country: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.now)

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        extra="ignore"
    )

    @property
    def display_name(self) -> str:
        if self.email:
            return self.email.split("@")[0]
        return self.name or "there"
