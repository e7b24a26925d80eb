from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from datetime import datetime

from models.user import UserModel


class TodayLog(BaseModel):
    foods: List[dict] = Field(default_factory=list)
    exercises: List[dict] = Field(default_factory=list)
    water_intake: float = 0  # ml
    calories: float = 0

    model_config = ConfigDict(extra="ignore")


class UserGoals(BaseModel):
    calories: Optional[float] = None
    weight_goal: str = "maintain"  # lose | gain | maintain
    target_weight: Optional[float] = None

    model_config = ConfigDict(extra="ignore")


class WeeklyLogRow(BaseModel):
    date: datetime
    foods: List[dict] = Field(default_factory=list)
    exercises: List[dict] = Field(default_factory=list)
    water_intake: float = 0

    model_config = ConfigDict(extra="ignore")


class UpcomingActivity(BaseModel):
    id: str
    title: str
    activity_type: str = "activity"
    scheduled_start: datetime
    host_email: Optional[str] = None
    is_joined: bool = False

    model_config = ConfigDict(extra="ignore")


class UserContext(BaseModel):
    """Snapshot of everything the strategies may read for one user at one instant."""
    profile: UserModel
    today_log: TodayLog = Field(default_factory=TodayLog)
    goals: UserGoals = Field(default_factory=UserGoals)

    # Filled by the pipeline only when the matching strategy needs them
    weekly_logs: List[WeeklyLogRow] = Field(default_factory=list)
    upcoming_activities: List[UpcomingActivity] = Field(default_factory=list)
