from datetime import datetime
from typing import List, Optional

from errors import StrategyError
from logging_config import get_logger
from models.context import UserContext
from models.notification import NotificationCandidate
from models.notification_settings import NotificationSettingsModel
from models.user import UserModel
from reminders.dedup import DeduplicationCache
from reminders.strategies import ReminderStrategy, default_strategies

logger = get_logger("generator")


class NotificationGenerator:
    def __init__(self, dedup: DeduplicationCache, strategies: Optional[List[ReminderStrategy]] = None):
        self.dedup = dedup
        self.strategies = strategies if strategies is not None else default_strategies()

    def strategy_for(self, notification_type: str) -> Optional[ReminderStrategy]:
        return next((s for s in self.strategies if s.notification_type == notification_type), None)

    def generate_all(
        self,
        profile: UserModel,
        context: UserContext,
        settings: NotificationSettingsModel,
        now: datetime,
    ) -> List[NotificationCandidate]:
        """
        Run every enabled strategy in order and drop anything fired within the dedup window.
        Survivors are not recorded; the caller marks each one fired after storing it.
        """
        candidates = []

        for strategy in self.strategies:
            if not settings.is_enabled(strategy.notification_type):
                continue

            try:
                produced = strategy.evaluate(profile, context, settings, now) or []
            except Exception as e:
                error = StrategyError(strategy.notification_type, e)
                logger.error(
                    error.message,
                    exc_info=True,
                    extra={"data": {"user_id": profile.id, "strategy": strategy.notification_type}}
                )
                continue

            candidates.extend(produced)

        fresh = []
        seen = set()
        for c in candidates:
            key = (c.type, c.title)
            if key in seen or self.dedup.is_suppressed(profile.id, c.type, c.title, now):
                continue
            seen.add(key)
            fresh.append(c)

        if len(fresh) != len(candidates):
            logger.debug(
                f"Suppressed {len(candidates) - len(fresh)} duplicate reminders",
                extra={"data": {"user_id": profile.id}}
            )
        return fresh
