from datetime import datetime
from typing import List, Protocol

from models.context import UserContext
from models.notification import NotificationCandidate
from models.notification_settings import NotificationSettingsModel, parse_time
from models.user import UserModel


class ReminderStrategy(Protocol):
    """Anything with this evaluate() qualifies. Strategies hold no mutable state."""

    notification_type: str

    def evaluate(
        self,
        profile: UserModel,
        context: UserContext,
        settings: NotificationSettingsModel,
        now: datetime,
    ) -> List[NotificationCandidate]:
        ...


def today_at(now: datetime, time_str: str) -> datetime:
    hour, minute = parse_time(time_str)
    return now.replace(hour=hour, minute=minute, second=0, microsecond=0)


def minutes_from(now: datetime, time_str: str) -> int:
    """Absolute distance in minutes between the wall-clock minute of `now` and HH:MM today."""
    hour, minute = parse_time(time_str)
    return abs((now.hour * 60 + now.minute) - (hour * 60 + minute))
