from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from contentdesk.core.logging import RequestLoggingMiddleware, configure_logging
from contentdesk.core.metrics import METRICS_PATH, PrometheusMiddleware, metrics_endpoint
from contentdesk.core.settings import Settings, settings
from contentdesk.db.session import get_db
from contentdesk.routers.registry import include_all_routers

configure_logging(level=settings.log_level)
logger = logging.getLogger(__name__)

# Any localhost port may call the API outside production.
_LOCALHOST_ORIGIN_REGEX = r"^http://(localhost|127\.0\.0\.1)(:\d+)?$"


def production_config_errors(config: Settings) -> List[str]:
    errors = []
    if any(origin.strip() == "*" for origin in config.allow_origins):
        errors.append("ALLOW_ORIGINS cannot include '*' in production")
    if config.jwt_secret.startswith("change_me"):
        errors.append("JWT_SECRET must be set in production")
    if config.database_url.startswith("sqlite"):
        logger.warning("sqlite_in_production", extra={"path": config.database_url})
    return errors


def _origin_regex(config: Settings) -> Optional[str]:
    if config.is_production:
        errors = production_config_errors(config)
        if errors:
            raise RuntimeError("; ".join(errors))
        return None
    return _LOCALHOST_ORIGIN_REGEX


app = FastAPI(title=settings.project_name, version=settings.project_version)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allow_origins,
    allow_origin_regex=_origin_regex(settings),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Request-Id", "Accept"],
    expose_headers=["X-Request-Id"],
)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(PrometheusMiddleware)

include_all_routers(app)
app.add_route(METRICS_PATH, metrics_endpoint, methods=["GET"], include_in_schema=False)


@app.get("/healthz", tags=["health"])
def healthcheck(db: Session = Depends(get_db)) -> dict[str, str]:
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error("healthcheck_failed", exc_info=True)
        raise HTTPException(status_code=503, detail="Database unavailable") from exc
    return {"status": "ok", "database": "ok", "version": settings.project_version}
