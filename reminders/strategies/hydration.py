import math
from datetime import datetime
from typing import List

from constants import (
    NotificationTypes,
    ML_PER_KG,
    GLASS_ML,
    DEFAULT_WEIGHT_KG,
    HYDRATION_ACTIVE_HOURS,
    HYDRATION_REMINDER_HOURS,
)
from models.context import UserContext
from models.notification import NotificationCandidate
from models.notification_settings import NotificationSettingsModel
from models.user import UserModel


def water_target_ml(profile: UserModel) -> int:
    weight = profile.weight or DEFAULT_WEIGHT_KG
    return round(weight * ML_PER_KG)


class HydrationReminderStrategy:
    notification_type = NotificationTypes.HYDRATION

    def evaluate(
        self,
        profile: UserModel,
        context: UserContext,
        settings: NotificationSettingsModel,
        now: datetime,
    ) -> List[NotificationCandidate]:
        target = water_target_ml(profile)
        consumed = context.today_log.water_intake or 0
        if consumed >= target:
            return []

        first_hour, last_hour = HYDRATION_ACTIVE_HOURS
        if now.hour < first_hour or now.hour > last_hour:
            return []

        # Top of a reminder hour only, so a 1-minute tick fires once per hour
        if now.hour not in HYDRATION_REMINDER_HOURS or now.minute != 0:
            return []

        remaining = round(target - consumed)
        glasses_needed = math.ceil(remaining / GLASS_ML)

        return [
            NotificationCandidate(
                type=self.notification_type,
                title="Hydration Reminder",
                message=(
                    f"Time to hydrate! You need {remaining}ml more water "
                    f"({glasses_needed} glasses) to reach your daily goal."
                ),
                scheduled_time=now,
                metadata={
                    "remaining": remaining,
                    "glasses_needed": glasses_needed,
                    "progress": round(consumed / target * 100),
                    "water_target": target,
                },
            )
        ]
