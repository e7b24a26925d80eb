"""
Per-request tracing for the reminders API: assigns a request id, binds the
caller's user id for log records, and logs one line in and one line out.
"""

import time
import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response, JSONResponse
from jose import JWTError, jwt
from logging_config import get_logger, request_id_var, user_id_var
from config import config

logger = get_logger("middleware")

REQUEST_ID_HEADER = "X-Request-ID"

# Polled constantly by the frontend and health checks; logged at DEBUG only
QUIET_PATHS = {"/", "/api/notifications/unread-count", "/api/notifications/pending"}


def _bearer_subject(request: Request) -> str:
    """'sub' of the bearer token, or '-'. Authentication itself happens in the route dependency."""
    scheme, _, token = request.headers.get("authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        return "-"
    try:
        return jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM]).get("sub") or "-"
    except JWTError:
        return "-"


class RequestLifecycleMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        # Honour an id set by the gateway so traces line up across services
        req_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        request_id_var.set(req_id)
        user_id_var.set(_bearer_subject(request))

        path = request.url.path
        label = f"{request.method} {path}"
        quiet = path in QUIET_PATHS
        started = time.perf_counter()

        (logger.debug if quiet else logger.info)(f"→ {label}")

        try:
            response = await call_next(request)
        except Exception as exc:
            elapsed_ms = round((time.perf_counter() - started) * 1000, 1)
            logger.error(
                f"✖ {label} unhandled error after {elapsed_ms}ms: {exc}",
                exc_info=True,
                extra={"data": {"duration_ms": elapsed_ms}}
            )
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal server error", "request_id": req_id},
                headers={REQUEST_ID_HEADER: req_id}
            )

        elapsed_ms = round((time.perf_counter() - started) * 1000, 1)
        status_code = response.status_code
        if status_code >= 500:
            log = logger.error
        elif status_code >= 400:
            log = logger.warning
        else:
            log = logger.debug if quiet else logger.info
        log(f"← {label} {status_code} ({elapsed_ms}ms)", extra={"data": {"status": status_code, "duration_ms": elapsed_ms}})

        response.headers[REQUEST_ID_HEADER] = req_id
        return response
