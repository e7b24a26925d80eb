from reminders.dedup import DeduplicationCache
from reminders.dispatcher import ChannelDispatcher
from reminders.generator import NotificationGenerator
from reminders.pipeline import ReminderPipeline, DeliveryReport
from reminders.scheduler import NotificationScheduler, TickSummary, build_scheduler

__all__ = [
    "DeduplicationCache",
    "ChannelDispatcher",
    "NotificationGenerator",
    "ReminderPipeline",
    "DeliveryReport",
    "NotificationScheduler",
    "TickSummary",
    "build_scheduler",
]
