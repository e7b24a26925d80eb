import copy
from datetime import datetime

from pydantic import ValidationError as PydanticValidationError

from database import notification_settings_collection
from defaults import DEFAULT_NOTIFICATION_SETTINGS
from errors import ValidationError
from logging_config import get_logger
from models.notification_settings import NotificationSettingsModel
from repositories import store_errors

logger = get_logger("settings_store")


def _merge(defaults: dict, stored: dict) -> dict:
    merged = copy.deepcopy(defaults)
    for key, value in stored.items():
        if value is None:
            continue
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


class NotificationSettingsStore:
    def __init__(self, collection=notification_settings_collection):
        self.collection = collection

    async def get(self, user_id: str) -> NotificationSettingsModel:
        """Stored settings merged over the defaults. Never fails for a user without settings."""
        with store_errors("get_settings"):
            stored = await self.collection.find_one({"user_id": user_id}, {"_id": 0})

        if not stored:
            return NotificationSettingsModel.defaults_for(user_id)

        merged = _merge(DEFAULT_NOTIFICATION_SETTINGS, stored)
        merged["user_id"] = user_id
        try:
            return NotificationSettingsModel(**merged)
        except PydanticValidationError:
            # A hand-edited or legacy row should not take the user's reminders down
            logger.warning("Stored notification settings invalid, using defaults", extra={"data": {"user_id": user_id}}, exc_info=True)
            return NotificationSettingsModel.defaults_for(user_id)

    async def upsert(self, user_id: str, payload: dict) -> NotificationSettingsModel:
        """Validate a (possibly partial) settings payload and save it. Idempotent."""
        if not isinstance(payload, dict):
            raise ValidationError("Settings payload must be an object")

        current = await self.get(user_id)
        merged = _merge(current.model_dump(), {k: v for k, v in payload.items() if k != "user_id"})
        merged["user_id"] = user_id

        try:
            settings = NotificationSettingsModel(**merged)
        except PydanticValidationError as e:
            errors = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
            raise ValidationError("; ".join(errors), fields=errors) from e

        document = settings.model_dump()
        document["updated_at"] = datetime.now()
        with store_errors("upsert_settings"):
            await self.collection.update_one(
                {"user_id": user_id},
                {"$set": document},
                upsert=True
            )
        logger.info(
            "Notification settings updated",
            extra={"data": {"user_id": user_id, "fields": sorted(k for k in payload if k != "user_id")}}
        )
        return settings
