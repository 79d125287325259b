"""
Shared fixtures: in-memory SQLite, a fresh schema per test, factories and auth headers.
"""

from __future__ import annotations

import os

# Must be set before templehub.config is imported.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "templehub-test-secret-0123456789abcdef"
os.environ["LOCAL_TIMEZONE"] = "UTC"

from datetime import date, datetime, timedelta
from typing import Dict, Iterator, Optional

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from templehub.database import engine, register_models
from templehub.main import app
from templehub.models import (
    OutreachContact,
    OutreachFollowUp,
    Program,
    ProgramFollowUp,
    ProgramMembership,
    Role,
    User,
)
from templehub.services.auth import create_access_token


@pytest.fixture(autouse=True)
def _schema() -> Iterator[None]:
    register_models()
    SQLModel.metadata.create_all(engine)
    yield
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def db() -> Iterator[Session]:
    with Session(engine) as session:
        yield session


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


class Factory:
    """
    Row builders. created_at advances one second per row so creation order is explicit.
    """

    def __init__(self, db: Session) -> None:
        self.db = db
        self._clock = datetime(2025, 1, 1, 8, 0, 0)

    def _tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    def _save(self, obj):  # noqa: ANN001
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def user(self, name: str, role: Role = Role.PARTICIPANT, *, is_active: bool = True, phone: Optional[str] = None) -> User:
        email = f"{name.lower().replace(' ', '.')}@example.org"
        return self._save(
            User(name=name, email=email, phone=phone, role=role, is_active=is_active, created_at=self._tick())
        )

    def admin(self, name: str = "Admin") -> User:
        return self.user(name, Role.ADMIN)

    def volunteer(self, name: str, program: Optional[Program] = None) -> User:
        v = self.user(name, Role.VOLUNTEER)
        if program is not None:
            self.enroll(program, v)
        return v

    def program(self, admin: User, name: str = "Youth Forum") -> Program:
        return self._save(Program(name=name, created_by_user_id=admin.id, created_at=self._tick()))

    def enroll(self, program: Program, user: User) -> ProgramMembership:
        return self._save(ProgramMembership(program_id=program.id, user_id=user.id, joined_at=self._tick()))

    def participant(self, program: Program, name: str, role: Role = Role.PARTICIPANT, **kw) -> User:  # noqa: ANN003
        u = self.user(name, role, **kw)
        self.enroll(program, u)
        return u

    def contact(self, admin: User, name: str, phone: str = "+910000000000") -> OutreachContact:
        return self._save(
            OutreachContact(name=name, phone=phone, admin_user_id=admin.id, created_at=self._tick())
        )

    def program_followup(self, program: Program, user: User, day: date, **kw) -> ProgramFollowUp:  # noqa: ANN003
        return self._save(ProgramFollowUp(program_id=program.id, user_id=user.id, follow_up_date=day, **kw))

    def outreach_followup(self, contact: OutreachContact, day: date, **kw) -> OutreachFollowUp:  # noqa: ANN003
        return self._save(OutreachFollowUp(outreach_contact_id=contact.id, follow_up_date=day, **kw))


@pytest.fixture
def make(db: Session) -> Factory:
    return Factory(db)


def auth_headers(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


@pytest.fixture
def headers_for():
    return auth_headers
