from logging_config import setup_logging

# Initialize logging BEFORE anything else
setup_logging()

import asyncio
from contextlib import asynccontextmanager

from logging_config import get_logger
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from middleware import RequestLifecycleMiddleware
from routes import notifications, push
from errors import NotificationError
from reminders.scheduler import build_scheduler
from config import config

logger = get_logger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    scheduler = build_scheduler()
    app.state.scheduler = scheduler

    start_task = None
    if config.SCHEDULER_ENABLED:
        # The first tick runs inside start(); don't hold up startup for it
        start_task = asyncio.create_task(scheduler.start(config.SCHEDULER_INTERVAL_MINUTES))
    else:
        logger.info("Reminder scheduler disabled by configuration")

    yield

    logger.info("Shutdown signal received, stopping scheduler...")
    scheduler.stop()
    if start_task is not None:
        # stop() does not cancel a tick in flight; let it finish
        results = await asyncio.gather(start_task, return_exceptions=True)
        if isinstance(results[0], Exception):
            logger.error(f"Scheduler start failed: {results[0]}")


app = FastAPI(title="NutriMind Reminders API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[config.FRONTEND_URL] if config.ENV == "production" else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request lifecycle middleware (request ID, context vars, duration logging)
app.add_middleware(RequestLifecycleMiddleware)


@app.exception_handler(NotificationError)
async def notification_error_handler(request: Request, exc: NotificationError):
    if exc.status_code >= 500:
        logger.error(f"{exc.__class__.__name__}: {exc.message}", extra={"data": exc.context})
    content = {"detail": exc.message or exc.__class__.__name__}
    if exc.context.get("fields"):
        content["errors"] = exc.context["fields"]
    return JSONResponse(status_code=exc.status_code, content=content)


app.include_router(notifications.router)
app.include_router(push.router)

logger.info("All routers registered, NutriMind Reminders API ready")

@app.get("/")
async def root():
    return {"status": "online", "message": "NutriMind reminders are running"}
