from __future__ import annotations

from typing import Callable, Optional

from fastapi import Depends, Request

from ..config import settings
from ..errors import ForbiddenError
from ..models.user import Role
from ..services.auth import CurrentUser, decode_access_token
from ..services.roles import has_at_least


def _token_from_request(request: Request) -> Optional[str]:
    token = request.cookies.get(settings.auth_cookie_name)
    if token:
        return token

    header = request.headers.get("authorization") or ""
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return None


def get_current_user(request: Request) -> CurrentUser:
    """
    FastAPI dependency: verified caller from the auth cookie (or a Bearer header).
    """
    return decode_access_token(_token_from_request(request) or "")


def require_role(minimum: Role) -> Callable[..., CurrentUser]:
    """
    Dependency factory: caller must rank at least `minimum`.

        def route(user: CurrentUser = Depends(require_role(Role.VOLUNTEER))): ...
    """

    def _checker(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if not has_at_least(user.role, minimum):
            raise ForbiddenError(f"Requires {minimum.value} role or higher")
        return user

    return _checker
