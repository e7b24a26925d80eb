import asyncio
import uuid
from datetime import datetime, timedelta
from typing import Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from pydantic import BaseModel

from config import config
from logging_config import get_logger, tick_context, user_id_var
from models.user import UserModel
from reminders.dedup import DeduplicationCache
from reminders.dispatcher import ChannelDispatcher
from reminders.generator import NotificationGenerator
from reminders.pipeline import ReminderPipeline
from repositories.notifications import NotificationStore
from repositories.settings import NotificationSettingsStore
from repositories.user_context import MongoUserContextProvider

logger = get_logger("scheduler")

TICK_JOB_ID = "notification_tick"


class TickSummary(BaseModel):
    tick_id: str
    started_at: datetime
    users: int = 0
    notifications: int = 0
    failed_users: int = 0
    skipped: bool = False


class NotificationScheduler:
    """
    Periodic driver: Stopped -> Running -> Stopped.

    start() runs one tick right away, then every `interval_minutes`. stop()
    only prevents future ticks; a tick already in flight finishes its users.
    """

    def __init__(
        self,
        provider,
        pipeline: ReminderPipeline,
        dedup: DeduplicationCache,
        max_workers: int = 8,
        user_timeout: float = 30.0,
        clock: Callable[[], datetime] = datetime.now,
        scheduler_factory: Callable[[], AsyncIOScheduler] = AsyncIOScheduler,
    ):
        self.provider = provider
        self.pipeline = pipeline
        self.dedup = dedup
        self.max_workers = max_workers
        self.user_timeout = user_timeout
        self.clock = clock
        self._scheduler_factory = scheduler_factory
        self._scheduler: Optional[AsyncIOScheduler] = None

        self.is_running = False
        self.interval_minutes: Optional[int] = None
        self.next_run_at: Optional[datetime] = None
        self.last_run_at: Optional[datetime] = None
        self.tick_count = 0
        # Bumped by stop(); a start() whose run was stopped meanwhile must not arm a timer
        self._generation = 0

    async def start(self, interval_minutes: int = 1):
        if self.is_running:
            logger.info("Scheduler already running")
            return

        logger.info(f"Starting notification scheduler (runs every {interval_minutes} minute(s))")
        self.is_running = True
        self.interval_minutes = interval_minutes
        generation = self._generation

        await self.tick()

        if generation != self._generation or self._scheduler is not None:
            # stop() arrived during the first tick, possibly followed by another start()
            return

        self._scheduler = self._scheduler_factory()
        self._scheduler.add_job(
            self._scheduled_tick,
            IntervalTrigger(minutes=interval_minutes),
            id=TICK_JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self._scheduler.start()
        self.next_run_at = self.clock() + timedelta(minutes=interval_minutes)

    def stop(self):
        self._generation += 1
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None

        if self.is_running:
            logger.info("Notification scheduler stopped")
        self.is_running = False
        self.next_run_at = None

    async def _scheduled_tick(self):
        # A timer fire that lands after stop() is dropped
        if not self.is_running:
            logger.debug("Ignoring timer fire on a stopped scheduler")
            return
        await self.tick()
        if self.is_running:
            self.next_run_at = self.clock() + timedelta(minutes=self.interval_minutes)

    async def tick(self) -> TickSummary:
        started_at = self.clock()
        self.last_run_at = started_at
        self.tick_count += 1
        summary = TickSummary(tick_id=uuid.uuid4().hex[:8], started_at=started_at)

        with tick_context(summary.tick_id):
            logger.info(f"Processing notifications at {started_at.isoformat()}")
            try:
                users = await self.provider.get_user_list()
            except Exception as e:
                logger.error(f"Could not load users, skipping tick: {e}", exc_info=True)
                summary.skipped = True
                return summary

            semaphore = asyncio.Semaphore(self.max_workers)
            outcomes = await asyncio.gather(
                *(self._run_user(user, started_at, semaphore) for user in users)
            )

            summary.users = len(users)
            summary.notifications = sum(count for count, ok in outcomes)
            summary.failed_users = sum(1 for count, ok in outcomes if not ok)
            logger.info(
                "Notification processing completed",
                extra={"data": summary.model_dump(exclude={"tick_id"})}
            )
            return summary

    async def _run_user(self, user: UserModel, now: datetime, semaphore: asyncio.Semaphore):
        async with semaphore:
            # gather() gives each user its own context copy
            user_id_var.set(user.id)
            try:
                reports = await asyncio.wait_for(self.pipeline.run_for_user(user, now), timeout=self.user_timeout)
                return len(reports), True
            except asyncio.TimeoutError:
                logger.error(f"Reminder pipeline timed out after {self.user_timeout}s", extra={"data": {"user_id": user.id}})
            except Exception as e:
                logger.error(f"Error processing notifications for user: {e}", exc_info=True, extra={"data": {"user_id": user.id}})
            return 0, False

    def status(self) -> dict:
        return {
            "is_running": self.is_running,
            "interval_minutes": self.interval_minutes,
            "next_run": self.next_run_at,
            "last_run": self.last_run_at,
            "tick_count": self.tick_count,
            "dedup_entries": len(self.dedup),
        }


def build_scheduler(clock: Callable[[], datetime] = datetime.now, dispatcher: Optional[ChannelDispatcher] = None) -> NotificationScheduler:
    """Wire the engine against the Mongo-backed stores. The dedup cache belongs to the returned scheduler."""
    provider = MongoUserContextProvider()
    dedup = DeduplicationCache(window=timedelta(minutes=config.DEDUP_WINDOW_MINUTES), clock=clock)
    pipeline = ReminderPipeline(
        provider=provider,
        generator=NotificationGenerator(dedup),
        store=NotificationStore(clock=clock),
        settings_store=NotificationSettingsStore(),
        dispatcher=dispatcher or ChannelDispatcher(),
        clock=clock,
    )
    return NotificationScheduler(
        provider=provider,
        pipeline=pipeline,
        dedup=dedup,
        max_workers=config.SCHEDULER_MAX_WORKERS,
        user_timeout=config.USER_PIPELINE_TIMEOUT_SECONDS,
        clock=clock,
    )
