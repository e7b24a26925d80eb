from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from datetime import datetime, timedelta
from typing import Optional
from database import users_collection
from models.user import UserModel
from logging_config import get_logger
from config import config
from reminders.scheduler import NotificationScheduler, build_scheduler
from repositories import store_errors
from repositories.notifications import NotificationStore
from repositories.settings import NotificationSettingsStore

logger = get_logger("auth")

DEFAULT_TOKEN_LIFETIME = timedelta(minutes=15)

# Tokens are issued by the accounts service with the same secret; this service only verifies them
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth/login")

_credentials_exception = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Could not validate credentials",
    headers={"WWW-Authenticate": "Bearer"},
)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Used by tests and the dev token script."""
    claims = {**data, "exp": datetime.utcnow() + (expires_delta or DEFAULT_TOKEN_LIFETIME)}
    return jwt.encode(claims, config.SECRET_KEY, algorithm=config.ALGORITHM)


def decode_subject(token: str) -> str:
    """User id carried in the token's 'sub' claim. Raises 401 on a bad or expired token."""
    try:
        payload = jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT decode failed: {e}")
        raise _credentials_exception

    user_id = payload.get("sub")
    if not user_id:
        logger.warning("Token decoded but missing 'sub' claim")
        raise _credentials_exception
    return user_id


async def get_current_user(token: str = Depends(oauth2_scheme)) -> UserModel:
    user_id = decode_subject(token)
    with store_errors("get_current_user"):
        user = await users_collection.find_one({"id": user_id}, {"_id": 0})
    if user is None:
        logger.warning("Token valid but user not found in DB", extra={"data": {"user_id": user_id}})
        raise _credentials_exception
    return UserModel(**user)


def get_scheduler(request: Request) -> NotificationScheduler:
    """The app-wide scheduler (and with it the shared dedup cache), created on first use."""
    scheduler = getattr(request.app.state, "scheduler", None)
    if scheduler is None:
        scheduler = build_scheduler()
        request.app.state.scheduler = scheduler
    return scheduler


def get_notification_store(scheduler: NotificationScheduler = Depends(get_scheduler)) -> NotificationStore:
    return scheduler.pipeline.store


def get_settings_store(scheduler: NotificationScheduler = Depends(get_scheduler)) -> NotificationSettingsStore:
    return scheduler.pipeline.settings_store
