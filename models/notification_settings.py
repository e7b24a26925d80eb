from pydantic import BaseModel, Field, field_validator
from typing import Dict
import copy
import re

from defaults import DEFAULT_NOTIFICATION_SETTINGS

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def _default(key):
    return lambda: copy.deepcopy(DEFAULT_NOTIFICATION_SETTINGS[key])


class NotificationChannels(BaseModel):
    in_app: bool = True
    email: bool = True
    push: bool = False

    def enabled(self) -> list:
        return [name for name, on in self.model_dump().items() if on]


class NotificationSettingsModel(BaseModel):
    user_id: str

    meal_reminders: bool = True
    hydration_reminders: bool = True
    exercise_reminders: bool = True
    progress_reminders: bool = True
    activity_reminders: bool = True

    meal_times: Dict[str, str] = Field(default_factory=_default("meal_times"))
    hydration_interval: int = Field(default=2, ge=1, le=12)
    exercise_time: str = "18:00"
    progress_day: str = "sunday"

    notification_channels: NotificationChannels = Field(default_factory=NotificationChannels)

    @field_validator("meal_times")
    @classmethod
    def validate_meal_times(cls, value: Dict[str, str]) -> Dict[str, str]:
        for meal, time_str in value.items():
            if not isinstance(time_str, str) or not _TIME_RE.match(time_str):
                raise ValueError(f"meal_times.{meal} must be HH:MM, got {time_str!r}")
        return value

    @field_validator("exercise_time")
    @classmethod
    def validate_exercise_time(cls, value: str) -> str:
        if not _TIME_RE.match(value):
            raise ValueError(f"exercise_time must be HH:MM, got {value!r}")
        return value

    @field_validator("progress_day")
    @classmethod
    def validate_progress_day(cls, value: str) -> str:
        day = value.strip().lower()
        # "sun", "sunday" and "Sunday" all name the same day
        for weekday in WEEKDAYS:
            if len(day) >= 3 and weekday.startswith(day):
                return weekday
        raise ValueError(f"progress_day must be a weekday, got {value!r}")

    def is_enabled(self, notification_type: str) -> bool:
        return getattr(self, f"{notification_type}_reminders", True) is not False

    @classmethod
    def defaults_for(cls, user_id: str) -> "NotificationSettingsModel":
        return cls(user_id=user_id, **copy.deepcopy(DEFAULT_NOTIFICATION_SETTINGS))


def parse_time(time_str: str):
    """'08:30' -> (8, 30)"""
    hour, minute = time_str.split(":")
    return int(hour), int(minute)
