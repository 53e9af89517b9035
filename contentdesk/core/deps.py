from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.orm import Session

from contentdesk.core.security import decode_token
from contentdesk.db.session import get_db
from contentdesk.models.user import User

# Token issuance lives outside this service; the URL only documents the flow.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")
logger = logging.getLogger("contentdesk.auth")


def _log_auth_event(event: str, *, request: Request, user_id: Optional[int] = None) -> None:
    # request_id is attached by the logging context filter.
    logger.warning(
        event,
        extra={
            "path": request.url.path,
            "method": request.method,
            "user_id": user_id,
        },
    )


def get_current_user(
    request: Request,
    token: str = Security(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_token(token)
        raw_user_id: Optional[int | str] = payload.get("sub")
        if raw_user_id is None:
            _log_auth_event("token_missing_sub", request=request)
            raise credentials_exception
        user_id = int(raw_user_id)
    except (JWTError, ValueError, TypeError):
        _log_auth_event("token_invalid", request=request)
        raise credentials_exception

    user = db.get(User, user_id)
    if not user or not user.is_active:
        _log_auth_event("user_inactive_or_missing", request=request, user_id=user_id)
        raise credentials_exception
    return user
