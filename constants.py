# Global Constants

class NotificationTypes:
    MEAL = "meal"
    HYDRATION = "hydration"
    EXERCISE = "exercise"
    PROGRESS = "progress"
    ACTIVITY = "activity"
    TEST = "test"
    GENERAL = "general"

    # Evaluation order of the reminder strategies
    REMINDERS = (MEAL, HYDRATION, EXERCISE, PROGRESS, ACTIVITY)


class NotificationStatus:
    PENDING = "pending"
    SENT = "sent"
    DISMISSED = "dismissed"


class Channels:
    IN_APP = "in_app"
    EMAIL = "email"
    PUSH = "push"

    ALL = (IN_APP, EMAIL, PUSH)


class WeightGoals:
    LOSE = "lose"
    GAIN = "gain"
    MAINTAIN = "maintain"


# Hydration
ML_PER_KG = 33
GLASS_ML = 250
DEFAULT_WEIGHT_KG = 70
HYDRATION_ACTIVE_HOURS = (8, 22)
HYDRATION_REMINDER_HOURS = (9, 11, 14, 16, 18, 20)

# Meal / exercise matching tolerance
TIME_MATCH_TOLERANCE_MINUTES = 15
DEFAULT_CALORIE_TARGET = 2000

# Weekly progress
PROGRESS_HOUR = 18
PROGRESS_LOOKBACK_DAYS = 7

# Live activities
ACTIVITY_LOOKAHEAD_MINUTES = 60
ACTIVITY_REMINDER_MINUTES = (15, 0)

HISTORY_DEFAULT_LIMIT = 50
HISTORY_MAX_LIMIT = 200
