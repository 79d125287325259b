from __future__ import annotations

from datetime import timedelta

import jwt
import pytest

from templehub.config import settings
from templehub.errors import AuthError
from templehub.models import Role
from templehub.services.auth import CurrentUser, create_access_token, decode_access_token


class TestTokens:
    def test_round_trip(self):
        token = create_access_token(42, Role.VOLUNTEER)
        assert decode_access_token(token) == CurrentUser(user_id=42, role=Role.VOLUNTEER)

    def test_expired(self):
        token = create_access_token(1, Role.ADMIN, expires_in=timedelta(seconds=-5))
        with pytest.raises(AuthError, match="Session expired"):
            decode_access_token(token)

    def test_wrong_secret(self):
        token = jwt.encode({"sub": "1", "role": "admin"}, "a-different-secret-0123456789abcdefgh", algorithm="HS256")
        with pytest.raises(AuthError, match="Invalid token"):
            decode_access_token(token)

    def test_garbage(self):
        with pytest.raises(AuthError):
            decode_access_token("not-a-jwt")

    def test_empty(self):
        with pytest.raises(AuthError):
            decode_access_token("")

    def test_unknown_role_in_payload(self):
        token = jwt.encode({"sub": "1", "role": "wizard"}, settings.jwt_secret, algorithm=settings.jwt_algorithm)
        with pytest.raises(AuthError, match="Invalid token payload"):
            decode_access_token(token)


class TestRequestAuth:
    def test_missing_token(self, client):
        r = client.get("/outreach/followups/volunteers-by-programs", params={"programs": "1"})
        assert r.status_code == 401
        assert r.json() == {"detail": "Unauthorized"}

    def test_cookie_is_accepted(self, client, make):
        program = make.program(make.admin())
        v = make.volunteer("Asha", program)

        cookie = f"{settings.auth_cookie_name}={create_access_token(v.id, v.role)}"
        r = client.get(
            "/outreach/followups/volunteers-by-programs",
            params={"programs": str(program.id)},
            headers={"Cookie": cookie},
        )

        assert r.status_code == 200
        assert [x["id"] for x in r.json()["volunteers"]] == [v.id]

    def test_role_below_minimum_is_forbidden(self, client, make, headers_for):
        p = make.user("Pat", Role.PARTICIPANT)
        r = client.get(
            "/outreach/followups/volunteers-by-programs",
            params={"programs": "1"},
            headers=headers_for(p),
        )
        assert r.status_code == 403
        assert "volunteer" in r.json()["detail"]
