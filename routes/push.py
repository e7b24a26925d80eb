from fastapi import APIRouter, Depends, HTTPException, Body
from pydantic import ValidationError as PydanticValidationError
from models.push_subscription import PushSubscriptionModel, PushSubscriptionRequest
from models.user import UserModel
from routes.deps import get_current_user
from database import push_subscriptions_collection
from config import config
from logging_config import get_logger

router = APIRouter(prefix="/api/push", tags=["Push Notifications"])
logger = get_logger("push")


@router.get("/vapid-public-key")
async def get_vapid_public_key():
    """Public VAPID key the browser needs for PushManager.subscribe()."""
    if not config.VAPID_PUBLIC_KEY:
        raise HTTPException(status_code=500, detail="VAPID_PUBLIC_KEY is not configured on the server")
    return {"public_key": config.VAPID_PUBLIC_KEY}


@router.post("/subscribe")
async def subscribe_push(
    subscription: dict = Body(...),
    current_user: UserModel = Depends(get_current_user),
):
    """Register this browser for push reminders. Re-subscribing the same endpoint only refreshes its keys."""
    try:
        request = PushSubscriptionRequest(**subscription)
    except PydanticValidationError:
        raise HTTPException(status_code=400, detail="Invalid push subscription payload")

    record = PushSubscriptionModel(user_id=current_user.id, endpoint=request.endpoint, keys=request.keys)
    result = await push_subscriptions_collection.update_one(
        {"user_id": record.user_id, "endpoint": record.endpoint},
        {
            "$set": {"keys": record.keys.model_dump()},
            "$setOnInsert": {"created_at": record.created_at},
        },
        upsert=True
    )

    logger.info(
        f"Push subscription {'created' if result.upserted_id else 'refreshed'}",
        extra={"data": {"user_id": current_user.id}}
    )
    return {"message": "Subscription saved"}


@router.delete("/subscribe")
async def unsubscribe_push(
    subscription: dict = Body(...),
    current_user: UserModel = Depends(get_current_user),
):
    """Forget one of the current user's push endpoints. Unknown endpoints are not an error."""
    endpoint = subscription.get("endpoint")
    if not endpoint:
        raise HTTPException(status_code=400, detail="Endpoint is required")

    result = await push_subscriptions_collection.delete_one({"user_id": current_user.id, "endpoint": endpoint})
    if result.deleted_count:
        logger.info("Push subscription removed", extra={"data": {"user_id": current_user.id}})
    return {"message": "Subscription removed"}
