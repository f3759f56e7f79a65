import os

# Settings are read (and the engine created) at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-only-min-32-chars")

from datetime import date
from typing import Callable
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from app.core.password import get_password_hash
from app.core.security import create_access_token
from app.database.database import get_session
from app.main import app
from app.models.enums import EmailProvider, HostStatus, OpportunityStatus, UserRole
from app.models.host import Host
from app.models.opportunity import Opportunity, OpportunityStatusHistory
from app.models.user import User
from app.services.email import EmailResponse, email_service

TEST_PASSWORD = "Password123!"
# Hashing is deliberately slow; hash once per test run
TEST_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine shared by every connection of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """
    TestClient whose requests use the test session.

    The lifespan is not run, so no logging setup, MinIO or telemetry.
    """
    app.dependency_overrides[get_session] = lambda: session
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="email_sender", autouse=True)
def email_sender_fixture():
    """Replace real email delivery with an AsyncMock for every test."""
    with patch.object(
        email_service,
        "send_email",
        new=AsyncMock(
            return_value=EmailResponse(success=True, provider=EmailProvider.BREVO)
        ),
    ) as mocked:
        yield mocked


@pytest.fixture(name="make_user")
def make_user_fixture(session: Session) -> Callable[..., User]:
    def create(
        username: str, role: UserRole = UserRole.USER, is_active: bool = True
    ) -> User:
        user = User(
            username=username,
            email=f"{username}@example.com",
            name=username.title(),
            role=role,
            is_active=is_active,
            hashed_password=TEST_PASSWORD_HASH,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return create


@pytest.fixture(name="make_host")
def make_host_fixture(session: Session, make_user) -> Callable[..., User]:
    """Factory for HOST users that own an ACTIVE host profile."""

    def create(username: str) -> User:
        user = make_user(username, UserRole.HOST)
        host = Host(
            id_user=user.id_user,
            name=f"{username.title()} Farm",
            slug=f"{username}-farm",
            city="Hualien",
            status=HostStatus.ACTIVE,
            verified=True,
        )
        session.add(host)
        session.commit()
        session.refresh(user)
        return user

    return create


@pytest.fixture(name="host_user")
def host_user_fixture(make_host) -> User:
    return make_host("farmer")


@pytest.fixture(name="other_host_user")
def other_host_user_fixture(make_host) -> User:
    return make_host("hostel")


@pytest.fixture(name="volunteer")
def volunteer_fixture(make_user) -> User:
    return make_user("volunteer")


@pytest.fixture(name="admin_user")
def admin_user_fixture(make_user) -> User:
    return make_user("moderator", UserRole.ADMIN)


@pytest.fixture(name="make_opportunity")
def make_opportunity_fixture(session: Session) -> Callable[..., Opportunity]:
    """
    Factory for opportunities already in a given status.

    A single history row matching the status is written so the
    status-equals-last-history invariant holds from the start.
    """
    counter = {"n": 0}

    def create(
        host_user: User,
        status: OpportunityStatus = OpportunityStatus.DRAFT,
        **fields,
    ) -> Opportunity:
        counter["n"] += 1
        opportunity = Opportunity(
            id_host=host_user.host_profile.id_host,
            title=fields.pop("title", f"Farm helper {counter['n']}"),
            slug=fields.pop("slug", f"farm-helper-{counter['n']}"),
            description=fields.pop("description", "Help with the rice harvest."),
            short_description=fields.pop("short_description", "Rice harvest"),
            city=fields.pop("city", "Hualien"),
            status=status,
            **fields,
        )
        session.add(opportunity)
        session.flush()
        session.add(
            OpportunityStatusHistory(
                id_opportunity=opportunity.id_opportunity,
                status=status,
                changed_by=host_user.id_user,
            )
        )
        session.commit()
        session.refresh(opportunity)
        return opportunity

    return create


@pytest.fixture(name="auth_headers")
def auth_headers_fixture() -> Callable[[User], dict]:
    def build(user: User) -> dict:
        token = create_access_token({"sub": user.username, "role": user.role.value})
        return {"Authorization": f"Bearer {token}"}

    return build


@pytest.fixture(name="application_payload")
def application_payload_fixture() -> Callable[[int], dict]:
    def build(opportunity_id: int, submit: bool = True) -> dict:
        return {
            "id_opportunity": opportunity_id,
            "message": "I grew up on a farm and would love to help.",
            "start_date": date(2026, 11, 1).isoformat(),
            "duration_days": 30,
            "submit": submit,
        }

    return build


@pytest.fixture(name="password")
def password_fixture() -> str:
    """Plaintext password of every user built by make_user."""
    return TEST_PASSWORD
