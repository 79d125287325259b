"""
Session auth: signs and verifies the JWT carried in the auth cookie.

Login and OTP verification live upstream; this module only issues tokens for
an already-verified user and turns a token back into {user_id, role}.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from ..config import Settings, settings as default_settings
from ..errors import AuthError
from ..models.user import Role

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurrentUser:
    """
    Verified caller identity. The role is the one signed into the token.
    """

    user_id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def create_access_token(
    user_id: int,
    role: Role | str,
    *,
    settings: Optional[Settings] = None,
    expires_in: Optional[timedelta] = None,
) -> str:
    cfg = settings or default_settings
    now = datetime.now(timezone.utc)
    ttl = expires_in if expires_in is not None else timedelta(minutes=cfg.access_token_ttl_minutes)
    payload: Dict[str, Any] = {
        "sub": str(int(user_id)),
        "role": Role(role).value,
        "iat": now,
        "exp": now + ttl,
    }
    return jwt.encode(payload, cfg.jwt_secret, algorithm=cfg.jwt_algorithm)


def decode_access_token(token: str, *, settings: Optional[Settings] = None) -> CurrentUser:
    cfg = settings or default_settings
    if not token:
        raise AuthError("Unauthorized")

    try:
        payload = jwt.decode(token, cfg.jwt_secret, algorithms=[cfg.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise AuthError("Session expired")
    except jwt.InvalidTokenError as exc:
        logger.info("rejected auth token: %s", exc)
        raise AuthError("Invalid token")

    try:
        user_id = int(payload["sub"])
        role = Role(payload["role"])
    except (KeyError, TypeError, ValueError):
        raise AuthError("Invalid token payload")

    return CurrentUser(user_id=user_id, role=role)
