"""
Centralized logging configuration for the NutriMind reminders backend.

Every record carries the request id (API calls) or tick id (scheduler runs)
plus the user being processed, so one tick can be followed across all the
users it touched. Engine loggers additionally land in their own rotating
file, reminders.log.
"""

import logging
import logging.handlers
import json
import os
from contextlib import contextmanager
from datetime import datetime, timezone
from contextvars import ContextVar

# --- Context Variables (set by the middleware per request, by the scheduler per tick and per user) ---
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")
user_id_var: ContextVar[str] = ContextVar("user_id", default="-")
tick_id_var: ContextVar[str] = ContextVar("tick_id", default="-")

APP_NAMESPACE = "nutrimind"
ENGINE_LOGGERS = ("scheduler", "pipeline", "generator", "dedup", "dispatcher", "email", "push_utils")


def current_context() -> dict:
    return {
        "request_id": request_id_var.get(),
        "tick_id": tick_id_var.get(),
        "user_id": user_id_var.get(),
    }


@contextmanager
def tick_context(tick_id: str):
    """Tag every record logged inside the block with `tick_id`."""
    token = tick_id_var.set(tick_id)
    try:
        yield tick_id
    finally:
        tick_id_var.reset(token)


class JSONFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, logger, context ids, message, data."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            **current_context(),
            "message": record.getMessage(),
        }

        # logger.info("msg", extra={"data": {...}})
        data = getattr(record, "data", None)
        if data:
            log_entry["data"] = data

        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class DevFormatter(logging.Formatter):
    """Colorized single-line output for local development."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        ctx = current_context()
        # Scheduler records show the tick, API records the request
        trace = f"tick={ctx['tick_id']}" if ctx["tick_id"] != "-" else f"req={ctx['request_id']}"
        name = record.name[len(APP_NAMESPACE) + 1:] if record.name.startswith(APP_NAMESPACE + ".") else record.name

        msg = f"{color}{record.levelname:<7}{self.RESET} {name} [{trace} user={ctx['user_id']}] {record.getMessage()}"

        data = getattr(record, "data", None)
        if data:
            msg += f"  | data={data}"

        if record.exc_info and record.exc_info[0] is not None:
            msg += f"\n{self.formatException(record.exc_info)}"

        return msg


class EngineFilter(logging.Filter):
    """Passes only records from the reminder engine loggers."""

    def __init__(self):
        super().__init__()
        self.prefixes = tuple(f"{APP_NAMESPACE}.{name}" for name in ENGINE_LOGGERS)

    def filter(self, record: logging.LogRecord) -> bool:
        return record.name.startswith(self.prefixes)


def _rotating_file(path: str, level: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=10 * 1024 * 1024,  # 10 MB
        backupCount=5,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())
    return handler


def setup_logging():
    """Initialize logging for the application. Safe to call more than once."""
    env = os.getenv("ENV", "development").lower()
    log_level = os.getenv("LOG_LEVEL", "DEBUG" if env == "development" else "INFO").upper()
    log_format = os.getenv("LOG_FORMAT", "json" if env == "production" else "dev").lower()

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(JSONFormatter() if log_format == "json" else DevFormatter())
    root_logger.addHandler(console_handler)

    log_dir = os.getenv("LOG_DIR", os.path.join(os.path.dirname(os.path.abspath(__file__)), "logs"))
    os.makedirs(log_dir, exist_ok=True)

    root_logger.addHandler(_rotating_file(os.path.join(log_dir, "app.log"), logging.INFO))

    engine_handler = _rotating_file(os.path.join(log_dir, "reminders.log"), logging.DEBUG)
    engine_handler.addFilter(EngineFilter())
    root_logger.addHandler(engine_handler)

    # Silence noisy third-party loggers
    for name, level in (
        ("uvicorn.access", logging.WARNING),
        ("uvicorn.error", logging.INFO),
        ("motor", logging.WARNING),
        ("pymongo", logging.WARNING),
        ("apscheduler", logging.WARNING),
        ("urllib3", logging.WARNING),
    ):
        logging.getLogger(name).setLevel(level)

    logging.getLogger(APP_NAMESPACE).info(
        f"Logging initialized | env={env} level={log_level} format={log_format} dir={log_dir}"
    )


def get_logger(name: str) -> logging.Logger:
    """Get a named logger under the nutrimind namespace."""
    return logging.getLogger(f"{APP_NAMESPACE}.{name}")
