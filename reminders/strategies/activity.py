import math
from datetime import datetime
from typing import List

from constants import NotificationTypes, ACTIVITY_REMINDER_MINUTES
from models.context import UserContext, UpcomingActivity
from models.notification import NotificationCandidate
from models.notification_settings import NotificationSettingsModel
from models.user import UserModel


def minutes_until(start: datetime, now: datetime) -> int:
    return math.floor((start - now).total_seconds() / 60)


class ActivityReminderStrategy:
    """Live group activities. The only strategy that can emit several candidates per tick."""

    notification_type = NotificationTypes.ACTIVITY

    def evaluate(
        self,
        profile: UserModel,
        context: UserContext,
        settings: NotificationSettingsModel,
        now: datetime,
    ) -> List[NotificationCandidate]:
        candidates = []
        for activity in context.upcoming_activities:
            minutes = minutes_until(activity.scheduled_start, now)
            if minutes not in ACTIVITY_REMINDER_MINUTES:
                continue
            candidates.append(self._build(activity, minutes, profile, now))
        return candidates

    def _build(self, activity: UpcomingActivity, minutes: int, profile: UserModel, now: datetime):
        starting = minutes == 0
        reminder_type = "starting" if starting else f"{minutes} minutes"
        title = f"Activity Starting: {activity.title}" if starting else f"Activity Reminder: {activity.title}"

        return NotificationCandidate(
            type=self.notification_type,
            title=title,
            message=self._message(activity, starting, reminder_type, profile.display_name),
            scheduled_time=now,
            metadata={
                "activity_id": activity.id,
                "activity_type": activity.activity_type,
                "reminder_type": reminder_type,
                "is_joined": activity.is_joined,
                "start_time": activity.scheduled_start.isoformat(),
            },
        )

    def _message(self, activity: UpcomingActivity, starting: bool, reminder_type: str, user_name: str) -> str:
        session = activity.activity_type.replace("_", " ")

        if not activity.is_joined:
            when = "starting now" if starting else f"starting in {reminder_type}"
            return f"Hi {user_name}! {activity.title} is {when}! Don't forget to join if you're interested."

        if starting:
            return f"Hi {user_name}! {activity.title} is starting now! Get ready for your {session} session."
        return f"Hi {user_name}! {activity.title} starts in {reminder_type}! Prepare for your {session} session."
