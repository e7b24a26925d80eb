from datetime import datetime
from typing import List

from constants import NotificationTypes, TIME_MATCH_TOLERANCE_MINUTES, WeightGoals
from defaults import get_country_exercises
from models.context import UserContext
from models.notification import NotificationCandidate
from models.notification_settings import NotificationSettingsModel
from models.user import UserModel
from reminders.strategies.base import minutes_from, today_at

_GOAL_ALIASES = {
    "loss": WeightGoals.LOSE,
    "lose": WeightGoals.LOSE,
    "lose_weight": WeightGoals.LOSE,
    "gain": WeightGoals.GAIN,
    "gain_weight": WeightGoals.GAIN,
}


def normalize_weight_goal(goal) -> str:
    if not goal:
        return WeightGoals.MAINTAIN
    return _GOAL_ALIASES.get(str(goal).lower(), WeightGoals.MAINTAIN)


class ExerciseReminderStrategy:
    notification_type = NotificationTypes.EXERCISE

    def evaluate(
        self,
        profile: UserModel,
        context: UserContext,
        settings: NotificationSettingsModel,
        now: datetime,
    ) -> List[NotificationCandidate]:
        if minutes_from(now, settings.exercise_time) > TIME_MATCH_TOLERANCE_MINUTES:
            return []
        if context.today_log.exercises:
            return []

        weight_goal = normalize_weight_goal(context.goals.weight_goal)
        suggestion = self._suggestion(profile.country, now)

        return [
            NotificationCandidate(
                type=self.notification_type,
                title="Exercise Reminder",
                message=self._message(weight_goal, suggestion),
                scheduled_time=today_at(now, settings.exercise_time),
                metadata={
                    "weight_goal": weight_goal,
                    "country": profile.country,
                    "suggestion": suggestion,
                    "has_exercised": False,
                },
            )
        ]

    def _suggestion(self, country, now: datetime) -> str:
        # Rotates daily instead of randomly so evaluation stays deterministic
        exercises = get_country_exercises(country)
        return exercises[now.toordinal() % len(exercises)]

    def _message(self, weight_goal: str, suggestion: str) -> str:
        if weight_goal == WeightGoals.LOSE:
            return f"Time for your workout! Try {suggestion} for effective calorie burning."
        if weight_goal == WeightGoals.GAIN:
            return f"Let's build some strength! Today's perfect for {suggestion} and resistance training."
        return f"Stay active! How about some {suggestion} today?"
