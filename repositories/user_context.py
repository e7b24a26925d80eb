"""
Read-only access to data owned by other services (profiles, daily logs,
goals, live activities). The reminder engine depends only on the four
methods below, so tests and other deployments can swap the provider.
"""

from datetime import datetime, timedelta
from typing import List, Optional

from constants import PROGRESS_LOOKBACK_DAYS
from database import (
    users_collection,
    daily_logs_collection,
    user_goals_collection,
    live_activities_collection,
    live_activity_participants_collection,
)
from logging_config import get_logger
from models.context import TodayLog, UserContext, UserGoals, UpcomingActivity, WeeklyLogRow
from models.user import UserModel
from repositories import store_errors

logger = get_logger("user_context")


def _start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def _food_calories(foods: list) -> float:
    return sum(float(food.get("calories") or 0) for food in foods if isinstance(food, dict))


class MongoUserContextProvider:
    def __init__(
        self,
        users=users_collection,
        daily_logs=daily_logs_collection,
        goals=user_goals_collection,
        activities=live_activities_collection,
        participants=live_activity_participants_collection,
    ):
        self.users = users
        self.daily_logs = daily_logs
        self.goals = goals
        self.activities = activities
        self.participants = participants

    async def get_user_list(self) -> List[UserModel]:
        with store_errors("get_user_list"):
            docs = await self.users.find({"id": {"$ne": None}}, {"_id": 0}).to_list(length=None)
        users = []
        for doc in docs:
            try:
                users.append(UserModel(**doc))
            except ValueError:
                # One malformed profile is skipped, not fatal for the tick
                logger.warning("Skipping malformed user profile", extra={"data": {"user_id": doc.get("id")}})
        return users

    async def get_user(self, user_id: str) -> Optional[UserModel]:
        with store_errors("get_user"):
            doc = await self.users.find_one({"id": user_id}, {"_id": 0})
        return UserModel(**doc) if doc else None

    async def get_user_context(self, user_id: str, profile: Optional[UserModel] = None, now: Optional[datetime] = None) -> UserContext:
        now = now or datetime.now()
        if profile is None:
            profile = await self.get_user(user_id)
            if profile is None:
                profile = UserModel(id=user_id)

        day = _start_of_day(now)
        with store_errors("get_user_context"):
            log_doc = await self.daily_logs.find_one(
                {"user_id": user_id, "date": {"$gte": day, "$lt": day + timedelta(days=1)}},
                {"_id": 0}
            )
            goals_doc = await self.goals.find_one({"user_id": user_id}, {"_id": 0})

        today_log = TodayLog()
        if log_doc:
            foods = log_doc.get("foods") or []
            today_log = TodayLog(
                foods=foods,
                exercises=log_doc.get("exercises") or [],
                water_intake=log_doc.get("water_intake") or 0,
                calories=log_doc.get("calories") or _food_calories(foods),
            )

        goals = UserGoals(**goals_doc) if goals_doc else UserGoals(target_weight=profile.weight)
        return UserContext(profile=profile, today_log=today_log, goals=goals)

    async def get_weekly_logs(self, user_id: str, now: Optional[datetime] = None) -> List[WeeklyLogRow]:
        now = now or datetime.now()
        since = _start_of_day(now) - timedelta(days=PROGRESS_LOOKBACK_DAYS - 1)
        with store_errors("get_weekly_logs"):
            docs = await self.daily_logs.find(
                {"user_id": user_id, "date": {"$gte": since}}, {"_id": 0}
            ).sort("date", -1).to_list(length=PROGRESS_LOOKBACK_DAYS)
        return [WeeklyLogRow(**doc) for doc in docs]

    async def get_upcoming_activities(self, user_id: str, start: datetime, end: datetime) -> List[UpcomingActivity]:
        with store_errors("get_upcoming_activities"):
            activities = await self.activities.find(
                {"is_active": True, "scheduled_start": {"$gte": start, "$lte": end}},
                {"_id": 0}
            ).sort("scheduled_start", 1).to_list(length=None)

            if not activities:
                return []

            joined = await self.participants.find(
                {"user_id": user_id, "activity_id": {"$in": [a["id"] for a in activities]}},
                {"_id": 0, "activity_id": 1}
            ).to_list(length=None)

        joined_ids = {row["activity_id"] for row in joined}
        return [
            UpcomingActivity(**{**activity, "is_joined": activity["id"] in joined_ids})
            for activity in activities
        ]
