from datetime import datetime
from typing import List

from constants import NotificationTypes, PROGRESS_HOUR
from models.context import UserContext, WeeklyLogRow
from models.notification import NotificationCandidate
from models.notification_settings import NotificationSettingsModel
from models.user import UserModel


def summarize_week(rows: List[WeeklyLogRow]) -> dict:
    total_days = len(rows)
    days_logged = sum(1 for row in rows if row.foods)
    total_water = sum(row.water_intake or 0 for row in rows)
    return {
        "total_days": total_days,
        "days_logged": days_logged,
        "logged_ratio": round(days_logged / total_days, 2) if total_days else 0.0,
        "avg_water": round(total_water / total_days) if total_days else 0,
        "total_workouts": sum(len(row.exercises) for row in rows),
    }


class ProgressReminderStrategy:
    notification_type = NotificationTypes.PROGRESS

    def is_due(self, settings: NotificationSettingsModel, now: datetime) -> bool:
        """Whether this evaluation can fire; the pipeline only loads weekly logs when it can."""
        today = now.strftime("%A").lower()
        return today[:3] == settings.progress_day[:3] and now.hour == PROGRESS_HOUR

    def evaluate(
        self,
        profile: UserModel,
        context: UserContext,
        settings: NotificationSettingsModel,
        now: datetime,
    ) -> List[NotificationCandidate]:
        if not self.is_due(settings, now):
            return []

        summary = summarize_week(context.weekly_logs)
        message = (
            f"Weekly Summary: You logged food {summary['days_logged']}/{summary['total_days']} days. "
            f"Average water intake: {summary['avg_water']}ml/day. "
            f"Total workouts: {summary['total_workouts']}. Keep up the great work!"
        )

        return [
            NotificationCandidate(
                type=self.notification_type,
                title="Weekly Progress Check-in",
                message=message,
                scheduled_time=now.replace(hour=PROGRESS_HOUR, minute=0, second=0, microsecond=0),
                metadata={
                    "week_summary": summary,
                    "progress_day": settings.progress_day,
                },
            )
        ]
