"""Structured logging for the gateway and its per-request middleware."""

import logging
import sys
import time
import uuid
from collections.abc import Callable, MutableMapping
from typing import Any

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import settings
from app.core.security import ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE

SECRET_KEYS = frozenset(
    {"access_token", "refresh_token", "authorization", "cookie", "password", "new_password"}
)

# Polled by monitors; logged at DEBUG to keep request logs readable
QUIET_PATHS = frozenset({"/metrics", f"{settings.api_v1_prefix}/ping"})


def redact_secrets(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Replace session secrets in an event with a marker."""
    for key in event_dict.keys() & SECRET_KEYS:
        if event_dict[key]:
            event_dict[key] = "[redacted]"
    return event_dict


def configure_logging() -> None:
    """Configure structlog on top of the standard library root logger."""
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        redact_secrets,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
    ]
    if settings.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper()),
    )

    # httpx logs every outbound request at INFO, including refresh calls
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _level_for(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Log each request with a request id bound to every event it emits.

    Only the presence of session cookies is logged, never their values.
    The response log notes when the request left with a refreshed access
    token cookie.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Bind the request id, time the request and log its outcome."""
        logger = structlog.get_logger()
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        path = request.url.path
        quiet = path in QUIET_PATHS

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        started = time.perf_counter()
        logger.log(
            logging.DEBUG if quiet else logging.INFO,
            "request_started",
            method=request.method,
            path=path,
            has_access_cookie=ACCESS_TOKEN_COOKIE in request.cookies,
            has_refresh_cookie=REFRESH_TOKEN_COOKIE in request.cookies,
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(
                "request_failed",
                method=request.method,
                path=path,
                error=str(e),
                duration=time.perf_counter() - started,
            )
            raise

        duration = time.perf_counter() - started
        refreshed = any(
            value.startswith(f"{ACCESS_TOKEN_COOKIE}=") and "Max-Age=0" not in value
            for value in response.headers.getlist("set-cookie")
        )
        logger.log(
            logging.DEBUG if quiet else _level_for(response.status_code),
            "request_completed",
            method=request.method,
            path=path,
            status_code=response.status_code,
            cookie_refreshed=refreshed,
            duration=duration,
        )

        response.headers["X-Process-Time"] = f"{duration:.6f}"
        response.headers["X-Request-ID"] = request_id
        return response
