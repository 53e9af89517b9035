"""Bearer tokens. Accounts are provisioned outside the API; this module only
signs and verifies the HS256 tokens that carry a user id in ``sub``."""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict, Optional

from jose import jwt

from contentdesk.core.settings import settings
from contentdesk.db.base import utcnow


def create_access_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    issued = utcnow()
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims = {"sub": str(user_id), "iat": issued, "exp": issued + lifetime}
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.algorithm)


def decode_token(token: str) -> Dict[str, Any]:
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.algorithm])
