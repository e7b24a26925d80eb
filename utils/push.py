import asyncio
import json
from pywebpush import webpush, WebPushException
from config import config
from database import push_subscriptions_collection
from errors import DispatchError
from logging_config import get_logger

logger = get_logger("push_utils")

# Push services answer these for subscriptions that will never work again
GONE_STATUSES = (404, 410)
MAX_SUBSCRIPTIONS_PER_USER = 10


def build_payload(title: str, message: str, url: str = "/") -> str:
    """JSON body the service worker's 'push' handler expects."""
    return json.dumps({
        "title": title,
        "body": message,
        "data": {"url": url},
    })


async def _deliver(subscription: dict, payload: str) -> None:
    # webpush is blocking (requests under the hood)
    await asyncio.to_thread(
        webpush,
        subscription_info={"endpoint": subscription["endpoint"], "keys": subscription["keys"]},
        data=payload,
        vapid_private_key=config.VAPID_PRIVATE_KEY,
        vapid_claims={"sub": config.VAPID_CLAIM_EMAIL},
    )


async def send_push_notification(user_id: str, title: str, message: str, url: str = "/", subscriptions_collection=push_subscriptions_collection) -> int:
    """
    Web Push one reminder to every browser the user subscribed from.

    Returns how many subscriptions accepted it. Expired subscriptions are
    pruned on the way. Raises DispatchError when none accepted it.
    """
    if not config.VAPID_PRIVATE_KEY or not config.VAPID_CLAIM_EMAIL:
        raise DispatchError("push", "VAPID keys not configured")

    subscriptions = await subscriptions_collection.find({"user_id": user_id}).to_list(MAX_SUBSCRIPTIONS_PER_USER)
    if not subscriptions:
        raise DispatchError("push", "No push subscriptions for user")

    payload = build_payload(title, message, url)
    delivered = 0
    expired = []
    last_error = None

    for sub in subscriptions:
        try:
            await _deliver(sub, payload)
            delivered += 1
        except WebPushException as ex:
            status_code = ex.response.status_code if ex.response is not None else None
            if status_code in GONE_STATUSES:
                expired.append(sub["endpoint"])
            else:
                logger.error(f"Web Push rejected: {ex!r}", extra={"data": {"user_id": user_id, "status": status_code}})
            last_error = str(ex)
        except Exception as e:
            logger.error(f"Unexpected error sending Web Push: {e}", extra={"data": {"user_id": user_id}})
            last_error = str(e)

    if expired:
        await subscriptions_collection.delete_many({"user_id": user_id, "endpoint": {"$in": expired}})
        logger.info(f"Removed {len(expired)} expired push subscriptions", extra={"data": {"user_id": user_id}})

    if delivered == 0:
        raise DispatchError("push", last_error or "No push subscription accepted the message")
    return delivered
