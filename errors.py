"""
Error taxonomy for the reminders engine.

Routes let these propagate; main.py maps them onto HTTP status codes. The
engine itself swallows StrategyError and DispatchError at the seam where
they happen, so one user's (or one strategy's, or one channel's) failure
never reaches anyone else.
"""


class NotificationError(Exception):
    status_code = 500

    def __init__(self, message: str = "", **context):
        super().__init__(message)
        self.message = message
        self.context = context


class ValidationError(NotificationError):
    """Malformed settings or notification payload."""
    status_code = 400


class NotFoundError(NotificationError):
    status_code = 404


class StoreUnavailable(NotificationError):
    """Persistence layer unreachable. Not retried internally."""
    status_code = 503


class StrategyError(NotificationError):
    def __init__(self, strategy: str, cause: Exception):
        super().__init__(f"Strategy '{strategy}' failed: {cause}", strategy=strategy)
        self.strategy = strategy
        self.cause = cause


class DispatchError(NotificationError):
    def __init__(self, channel: str, message: str):
        super().__init__(message, channel=channel)
        self.channel = channel
