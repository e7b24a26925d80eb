from datetime import datetime
from typing import Callable, List

from pymongo import ASCENDING, DESCENDING, ReturnDocument

from constants import NotificationStatus, HISTORY_DEFAULT_LIMIT, HISTORY_MAX_LIMIT
from database import notification_logs_collection
from errors import NotFoundError
from logging_config import get_logger
from models.notification import NotificationCandidate, NotificationModel
from repositories import store_errors

logger = get_logger("notification_store")

_NO_ID = {"_id": 0}


class NotificationStore:
    """
    Append-mostly log of generated reminders. Rows are never deleted and their
    content never changes; only status (and sent_time) transitions.
    """

    def __init__(self, collection=notification_logs_collection, clock: Callable[[], datetime] = datetime.now):
        self.collection = collection
        self._clock = clock

    async def persist(self, user_id: str, candidate: NotificationCandidate, status: str = NotificationStatus.PENDING) -> NotificationModel:
        notification = NotificationModel(
            user_id=user_id,
            type=candidate.type or "general",
            title=candidate.title or "Notification",
            message=candidate.message,
            scheduled_time=candidate.scheduled_time,
            metadata=candidate.metadata or {},
            status=status,
            created_at=self._clock(),
        )
        with store_errors("persist"):
            # insert_one mutates the dict it is given (adds _id)
            await self.collection.insert_one(notification.model_dump())
        logger.info(
            "Notification persisted",
            extra={"data": {"notification_id": notification.id, "user_id": user_id, "type": notification.type}}
        )
        return notification

    async def mark_sent(self, notification_id: str, user_id: str) -> NotificationModel:
        with store_errors("mark_sent"):
            doc = await self.collection.find_one_and_update(
                {"id": notification_id, "user_id": user_id, "status": NotificationStatus.PENDING},
                {"$set": {"status": NotificationStatus.SENT, "sent_time": self._clock()}},
                projection=_NO_ID,
                return_document=ReturnDocument.AFTER,
            )
            if doc is None:
                doc = await self.collection.find_one({"id": notification_id, "user_id": user_id}, _NO_ID)
        if doc is None:
            raise NotFoundError("Notification not found", notification_id=notification_id)
        return NotificationModel(**doc)

    async def dismiss(self, notification_id: str, user_id: str) -> NotificationModel:
        """Dismiss one of the user's own notifications. Dismissing twice is a no-op."""
        with store_errors("dismiss"):
            doc = await self.collection.find_one_and_update(
                {"id": notification_id, "user_id": user_id, "status": {"$ne": NotificationStatus.DISMISSED}},
                {"$set": {"status": NotificationStatus.DISMISSED, "sent_time": self._clock()}},
                projection=_NO_ID,
                return_document=ReturnDocument.AFTER,
            )
            if doc is None:
                doc = await self.collection.find_one({"id": notification_id, "user_id": user_id}, _NO_ID)

        if doc is None:
            logger.warning("Notification not found for dismiss", extra={"data": {"notification_id": notification_id}})
            raise NotFoundError("Notification not found", notification_id=notification_id)
        return NotificationModel(**doc)

    async def get(self, notification_id: str, user_id: str) -> NotificationModel:
        with store_errors("get"):
            doc = await self.collection.find_one({"id": notification_id, "user_id": user_id}, _NO_ID)
        if doc is None:
            raise NotFoundError("Notification not found", notification_id=notification_id)
        return NotificationModel(**doc)

    async def list_pending(self, user_id: str) -> List[NotificationModel]:
        with store_errors("list_pending"):
            cursor = self.collection.find(
                {"user_id": user_id, "status": NotificationStatus.PENDING}, _NO_ID
            ).sort("scheduled_time", ASCENDING)
            docs = await cursor.to_list(length=None)
        return [NotificationModel(**doc) for doc in docs]

    async def list_history(self, user_id: str, limit: int = HISTORY_DEFAULT_LIMIT) -> List[NotificationModel]:
        limit = max(1, min(int(limit), HISTORY_MAX_LIMIT))
        with store_errors("list_history"):
            cursor = self.collection.find({"user_id": user_id}, _NO_ID).sort("created_at", DESCENDING).limit(limit)
            docs = await cursor.to_list(length=limit)
        return [NotificationModel(**doc) for doc in docs]

    async def unread_count(self, user_id: str) -> int:
        with store_errors("unread_count"):
            return await self.collection.count_documents({"user_id": user_id, "status": NotificationStatus.PENDING})
