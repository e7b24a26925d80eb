from datetime import datetime
from typing import List

from constants import NotificationTypes, TIME_MATCH_TOLERANCE_MINUTES, DEFAULT_CALORIE_TARGET
from defaults import get_country_meals
from models.context import UserContext
from models.notification import NotificationCandidate
from models.notification_settings import NotificationSettingsModel
from models.user import UserModel
from reminders.strategies.base import minutes_from, today_at

MEAL_ORDER = ("breakfast", "lunch", "dinner")


class MealReminderStrategy:
    notification_type = NotificationTypes.MEAL

    def evaluate(
        self,
        profile: UserModel,
        context: UserContext,
        settings: NotificationSettingsModel,
        now: datetime,
    ) -> List[NotificationCandidate]:
        for meal_type, time_str in self._ordered_meals(settings.meal_times):
            if minutes_from(now, time_str) > TIME_MATCH_TOLERANCE_MINUTES:
                continue

            # Overlapping windows still produce a single meal reminder per tick
            return [self._build(meal_type, time_str, profile, context, now)]

        return []

    def _ordered_meals(self, meal_times: dict):
        known = [(meal, meal_times[meal]) for meal in MEAL_ORDER if meal in meal_times]
        extra = [(meal, time_str) for meal, time_str in meal_times.items() if meal not in MEAL_ORDER]
        return known + extra

    def _build(self, meal_type, time_str, profile, context, now) -> NotificationCandidate:
        suggestions = get_country_meals(profile.country).get(meal_type, [])

        calorie_target = context.goals.calories or DEFAULT_CALORIE_TARGET
        remaining_calories = round(calorie_target - (context.today_log.calories or 0))

        return NotificationCandidate(
            type=self.notification_type,
            title=f"{meal_type.capitalize()} Time!",
            message=self._message(profile.display_name, meal_type, suggestions, remaining_calories),
            scheduled_time=today_at(now, time_str),
            metadata={
                "meal_type": meal_type,
                "country": profile.country,
                "remaining_calories": remaining_calories,
                "suggestions": suggestions[:3],
            },
        )

    def _message(self, user_name, meal_type, suggestions, remaining_calories) -> str:
        base = f"Hi {user_name}! It's time for {meal_type}!"
        if suggestions:
            return (
                f"{base} Try: {', '.join(suggestions[:2])}. "
                f"You have {remaining_calories} calories remaining today."
            )
        return f"{base} Enjoy a nutritious meal! You have {remaining_calories} calories remaining today."
