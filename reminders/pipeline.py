from datetime import datetime, timedelta
from typing import Callable, List, Optional

from pydantic import BaseModel

from constants import Channels, NotificationTypes, ACTIVITY_LOOKAHEAD_MINUTES
from logging_config import get_logger
from models.context import UserContext
from models.notification import ChannelResult, NotificationModel
from models.notification_settings import NotificationSettingsModel
from models.user import UserModel
from reminders.dispatcher import ChannelDispatcher
from reminders.generator import NotificationGenerator
from repositories.notifications import NotificationStore
from repositories.settings import NotificationSettingsStore

logger = get_logger("pipeline")


class DeliveryReport(BaseModel):
    notification: NotificationModel
    results: List[ChannelResult]


class ReminderPipeline:
    """settings -> context -> generate -> persist -> dispatch, for one user."""

    def __init__(
        self,
        provider,
        generator: NotificationGenerator,
        store: NotificationStore,
        settings_store: NotificationSettingsStore,
        dispatcher: ChannelDispatcher,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.provider = provider
        self.generator = generator
        self.store = store
        self.settings_store = settings_store
        self.dispatcher = dispatcher
        self.clock = clock

    async def run_for_user(self, user: UserModel, now: Optional[datetime] = None) -> List[DeliveryReport]:
        now = now or self.clock()
        settings = await self.settings_store.get(user.id)
        context = await self.build_context(user, settings, now)

        candidates = self.generator.generate_all(user, context, settings, now)
        if not candidates:
            return []

        channels = settings.notification_channels.enabled()
        reports = []
        for candidate in candidates:
            # Persist first: the stored row survives any delivery failure
            notification = await self.store.persist(user.id, candidate)
            self.generator.dedup.mark_fired(user.id, candidate.type, candidate.title, now)
            results = await self.dispatcher.dispatch(user, notification, channels)

            delivered_externally = any(r.ok for r in results if r.channel != Channels.IN_APP)
            if delivered_externally and Channels.IN_APP not in channels:
                notification = await self.store.mark_sent(notification.id, user.id)

            reports.append(DeliveryReport(notification=notification, results=results))

        logger.info(
            f"Generated {len(reports)} reminders",
            extra={"data": {
                "user_id": user.id,
                "types": [r.notification.type for r in reports],
                "failed_channels": [res.channel for r in reports for res in r.results if not res.ok],
            }}
        )
        return reports

    async def build_context(self, user: UserModel, settings: NotificationSettingsModel, now: datetime) -> UserContext:
        context = await self.provider.get_user_context(user.id, profile=user, now=now)

        progress = self.generator.strategy_for(NotificationTypes.PROGRESS)
        if progress is not None and settings.is_enabled(NotificationTypes.PROGRESS) and progress.is_due(settings, now):
            context.weekly_logs = await self.provider.get_weekly_logs(user.id, now=now)

        if settings.is_enabled(NotificationTypes.ACTIVITY) and self.generator.strategy_for(NotificationTypes.ACTIVITY):
            context.upcoming_activities = await self.provider.get_upcoming_activities(
                user.id, now, now + timedelta(minutes=ACTIVITY_LOOKAHEAD_MINUTES)
            )

        return context
