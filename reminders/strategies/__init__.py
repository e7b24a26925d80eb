from reminders.strategies.base import ReminderStrategy
from reminders.strategies.meal import MealReminderStrategy
from reminders.strategies.hydration import HydrationReminderStrategy
from reminders.strategies.exercise import ExerciseReminderStrategy
from reminders.strategies.progress import ProgressReminderStrategy
from reminders.strategies.activity import ActivityReminderStrategy


def default_strategies() -> list:
    """Strategies in evaluation order: meal, hydration, exercise, progress, activity."""
    return [
        MealReminderStrategy(),
        HydrationReminderStrategy(),
        ExerciseReminderStrategy(),
        ProgressReminderStrategy(),
        ActivityReminderStrategy(),
    ]


__all__ = [
    "ReminderStrategy",
    "MealReminderStrategy",
    "HydrationReminderStrategy",
    "ExerciseReminderStrategy",
    "ProgressReminderStrategy",
    "ActivityReminderStrategy",
    "default_strategies",
]
