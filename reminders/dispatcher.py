import asyncio
from typing import Callable, Iterable, List, Optional

from config import config
from constants import Channels
from errors import DispatchError
from logging_config import get_logger
from models.notification import ChannelResult, NotificationModel
from models.user import UserModel
from utils.email import render_notification_email, send_email
from utils.push import send_push_notification

logger = get_logger("dispatcher")


class ChannelDispatcher:
    """
    Delivers a persisted notification over the requested channels.

    dispatch() never raises: each channel's failure is logged and reported in
    its ChannelResult, and the remaining channels still run.
    """

    def __init__(
        self,
        email_sender: Callable = send_email,
        push_sender: Callable = send_push_notification,
        email_timeout: Optional[float] = None,
    ):
        self.email_sender = email_sender
        self.push_sender = push_sender
        self.email_timeout = email_timeout if email_timeout is not None else config.EMAIL_TIMEOUT_SECONDS
        self._handlers = {
            Channels.IN_APP: self._send_in_app,
            Channels.EMAIL: self._send_email,
            Channels.PUSH: self._send_push,
        }

    async def dispatch(self, user: UserModel, notification: NotificationModel, channels: Iterable[str]) -> List[ChannelResult]:
        results = []
        for channel in channels:
            handler = self._handlers.get(channel)
            try:
                if handler is None:
                    raise DispatchError(channel, f"Unknown channel '{channel}'")
                result = await handler(user, notification)
            except DispatchError as e:
                result = ChannelResult(channel=channel, ok=False, error=e.message)
            except asyncio.TimeoutError:
                result = ChannelResult(channel=channel, ok=False, error=f"{channel} delivery timed out")
            except Exception as e:
                logger.error(f"Unexpected {channel} dispatch failure: {e}", exc_info=True)
                result = ChannelResult(channel=channel, ok=False, error=str(e) or e.__class__.__name__)

            if not result.ok:
                logger.warning(
                    f"Delivery failed on {channel}",
                    extra={"data": {"notification_id": notification.id, "user_id": user.id, "error": result.error}}
                )
            results.append(result)
        return results

    async def _send_in_app(self, user: UserModel, notification: NotificationModel) -> ChannelResult:
        # The persisted row is the in-app notification; clients poll for it
        return ChannelResult(channel=Channels.IN_APP, ok=True)

    async def _send_email(self, user: UserModel, notification: NotificationModel) -> ChannelResult:
        if not user.email:
            raise DispatchError(Channels.EMAIL, "User has no email address")

        subject, html = render_notification_email(notification.title, notification.message)
        # smtplib and the resend SDK block; keep them off the event loop
        outcome = await asyncio.wait_for(
            asyncio.to_thread(self.email_sender, user.email, subject, html, notification.message),
            timeout=self.email_timeout,
        )
        return ChannelResult(channel=Channels.EMAIL, ok=True, test=bool((outcome or {}).get("test")))

    async def _send_push(self, user: UserModel, notification: NotificationModel) -> ChannelResult:
        await self.push_sender(user.id, notification.title, notification.message, "/notifications")
        return ChannelResult(channel=Channels.PUSH, ok=True)
