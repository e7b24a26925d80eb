from datetime import datetime
from fastapi import APIRouter, Body, Depends, Query
from typing import List, Optional

from constants import HISTORY_DEFAULT_LIMIT, HISTORY_MAX_LIMIT
from errors import ValidationError
from models.notification import InjectNotificationRequest, NotificationCandidate, NotificationModel
from models.notification_settings import NotificationSettingsModel
from models.user import UserModel
from reminders.scheduler import NotificationScheduler
from repositories.notifications import NotificationStore
from repositories.settings import NotificationSettingsStore
from routes.deps import get_current_user, get_notification_store, get_scheduler, get_settings_store
from logging_config import get_logger

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])
logger = get_logger("notifications")


@router.get("/settings", response_model=NotificationSettingsModel)
async def get_notification_settings(
    current_user: UserModel = Depends(get_current_user),
    settings_store: NotificationSettingsStore = Depends(get_settings_store),
):
    """Get the current user's reminder settings (defaults when never saved)."""
    return await settings_store.get(current_user.id)


@router.put("/settings", response_model=NotificationSettingsModel)
async def update_notification_settings(
    updates: dict = Body(...),
    current_user: UserModel = Depends(get_current_user),
    settings_store: NotificationSettingsStore = Depends(get_settings_store),
):
    """Upsert the current user's reminder settings. Partial payloads keep the other fields."""
    if not updates:
        raise ValidationError("No settings to update")
    return await settings_store.upsert(current_user.id, updates)


@router.get("/pending", response_model=List[NotificationModel])
async def get_pending_notifications(
    current_user: UserModel = Depends(get_current_user),
    store: NotificationStore = Depends(get_notification_store),
):
    return await store.list_pending(current_user.id)


@router.get("/history", response_model=List[NotificationModel])
async def get_notification_history(
    limit: int = Query(HISTORY_DEFAULT_LIMIT, ge=1, le=HISTORY_MAX_LIMIT),
    current_user: UserModel = Depends(get_current_user),
    store: NotificationStore = Depends(get_notification_store),
):
    """Most recent notifications first."""
    return await store.list_history(current_user.id, limit)


@router.get("/unread-count")
async def get_unread_count(
    current_user: UserModel = Depends(get_current_user),
    store: NotificationStore = Depends(get_notification_store),
):
    """Get count of pending notifications."""
    return {"count": await store.unread_count(current_user.id)}


@router.put("/{notification_id}/dismiss", response_model=NotificationModel)
async def dismiss_notification(
    notification_id: str,
    current_user: UserModel = Depends(get_current_user),
    store: NotificationStore = Depends(get_notification_store),
):
    """Dismiss one of the current user's notifications."""
    return await store.dismiss(notification_id, current_user.id)


@router.post("/generate")
async def generate_notifications(
    current_user: UserModel = Depends(get_current_user),
    scheduler: NotificationScheduler = Depends(get_scheduler),
):
    """Run the reminder pipeline for the current user right now, outside the scheduled tick."""
    reports = await scheduler.pipeline.run_for_user(current_user)
    logger.info(f"Manual generation produced {len(reports)} notifications", extra={"data": {"user_id": current_user.id}})
    return {
        "message": f"Generated {len(reports)} notifications",
        "notifications": [r.notification for r in reports],
        "deliveries": [{"notification_id": r.notification.id, "results": r.results} for r in reports],
    }


@router.post("/test", response_model=NotificationModel)
async def create_test_notification(
    payload: Optional[InjectNotificationRequest] = Body(None),
    current_user: UserModel = Depends(get_current_user),
    store: NotificationStore = Depends(get_notification_store),
):
    """Persist a notification directly, bypassing the strategies."""
    payload = payload or InjectNotificationRequest()
    candidate = NotificationCandidate(
        type=payload.type,
        title=payload.title,
        message=payload.message,
        scheduled_time=datetime.now(),
        metadata={"test": True},
    )
    return await store.persist(current_user.id, candidate)


@router.get("/scheduler/status")
async def get_scheduler_status(
    current_user: UserModel = Depends(get_current_user),
    scheduler: NotificationScheduler = Depends(get_scheduler),
):
    return scheduler.status()
