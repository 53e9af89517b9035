"""JSON logging for the ContentDesk API.

Every record is written to stdout as one JSON object. The request middleware
binds a request id to the current context, so domain events logged further
down (``invoice_sent``, ``project_deleted``) carry the same id as the access
line of the request that caused them.
"""

from __future__ import annotations

import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Request, Response
from jose import JWTError
from starlette.middleware.base import BaseHTTPMiddleware

from contentdesk.core.security import decode_token

_current_request_id: ContextVar[Optional[str]] = ContextVar("contentdesk_request_id", default=None)

# Record attributes copied into the JSON payload when set.
CONTEXT_FIELDS = (
    "request_id",
    "user_id",
    "path",
    "method",
    "status_code",
    "latency_ms",
    "entity",
    "entity_id",
    "invoice_id",
    "invoice_number",
    "status",
)


class RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = _current_request_id.get()
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(level: str = "INFO") -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    handler.addFilter(RequestContextFilter())
    logging.basicConfig(level=level.upper(), handlers=[handler], force=True)
    # One access line per request comes from RequestLoggingMiddleware.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def bearer_user_id(request: Request) -> Optional[int]:
    """Best-effort user id for log lines; never raises on a bad token."""
    scheme, _, token = (request.headers.get("authorization") or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    try:
        raw_user_id = decode_token(token.strip()).get("sub")
        return int(raw_user_id) if raw_user_id is not None else None
    except (JWTError, ValueError, TypeError):
        return None


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, logger_name: str = "contentdesk.request") -> None:
        super().__init__(app)
        self.logger = logging.getLogger(logger_name)

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.request_id = request_id
        context_token = _current_request_id.set(request_id)
        context = {
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "user_id": bearer_user_id(request),
        }
        start = time.perf_counter()
        try:
            try:
                response = await call_next(request)
            except Exception:
                self.logger.exception(
                    "unhandled_exception",
                    extra={**context, "latency_ms": round((time.perf_counter() - start) * 1000, 2)},
                )
                raise

            self.logger.info(
                "request",
                extra={
                    **context,
                    "status_code": response.status_code,
                    "latency_ms": round((time.perf_counter() - start) * 1000, 2),
                },
            )
            response.headers["X-Request-Id"] = request_id
            return response
        finally:
            _current_request_id.reset(context_token)
