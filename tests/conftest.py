"""
Test configuration and fixtures.

Provides:
- Fresh in-memory SQLite schema per test
- Centers and users for every role (plus a second center for tenant checks)
- JWT token minting for authenticated tests
- HTTPX AsyncClient per role with the Authorization header set
"""
import os
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncGenerator, Generator

# Must be set before nestflow modules read settings
os.environ["TESTING"] = "1"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ.setdefault("JWT_SECRET", "test-secret-key-that-is-long-enough-for-hs256")
os.environ["ENV"] = "test"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.orm import Session

from nestflow.main import app
from nestflow.core.deps import get_db
from nestflow.core.security import create_access_token, hash_password
from nestflow.db.base import Base
from nestflow.db.enums import Role
from nestflow.db.models import Center, Child, Classroom, User
from nestflow.db.session import SessionLocal, engine

TEST_PASSWORD = "password123"
# Hashing once keeps per-test setup fast
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Creates the schema and a session for one test.

    The in-memory database lives on a single shared connection, so the app
    (through the get_db override) and the test see the same data.
    """
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def test_center(db: Session) -> Center:
    """Create a test center."""
    center = Center(name="Test Center", timezone="America/Los_Angeles")
    db.add(center)
    db.commit()
    return center


@pytest.fixture(scope="function")
def other_center(db: Session) -> Center:
    """A second tenant for isolation checks."""
    center = Center(name="Other Center", timezone="America/New_York")
    db.add(center)
    db.commit()
    return center


def make_user(db: Session, center: Center, role: Role, email: str, first_name: str) -> User:
    user = User(
        center_id=center.id,
        email=email,
        password_hash=TEST_PASSWORD_HASH,
        role=role.value,
        first_name=first_name,
        last_name="Tester",
    )
    db.add(user)
    db.commit()
    return user


@pytest.fixture(scope="function")
def admin_user(db: Session, test_center: Center) -> User:
    return make_user(db, test_center, Role.ADMIN, "admin@test.com", "Ada")


@pytest.fixture(scope="function")
def teacher_user(db: Session, test_center: Center) -> User:
    return make_user(db, test_center, Role.TEACHER, "teacher@test.com", "Tess")


@pytest.fixture(scope="function")
def parent_user(db: Session, test_center: Center) -> User:
    return make_user(db, test_center, Role.PARENT, "parent@test.com", "Pat")


@pytest.fixture(scope="function")
def other_admin(db: Session, other_center: Center) -> User:
    return make_user(db, other_center, Role.ADMIN, "admin@other.com", "Otto")


@pytest.fixture(scope="function")
def classroom(db: Session, test_center: Center) -> Classroom:
    room = Classroom(center_id=test_center.id, name="Toddlers 1A", capacity=12, age_group="1-2 years")
    db.add(room)
    db.commit()
    return room


@pytest.fixture(scope="function")
def child(db: Session, test_center: Center, classroom: Classroom) -> Child:
    """An enrolled child in the test classroom."""
    kid = Child(
        center_id=test_center.id,
        classroom_id=classroom.id,
        first_name="Emma",
        last_name="Stone",
        allergies=["peanuts"],
        enrollment_status="ENROLLED",
    )
    db.add(kid)
    db.commit()
    return kid


@pytest.fixture(scope="function")
def other_child(db: Session, other_center: Center) -> Child:
    kid = Child(
        center_id=other_center.id,
        first_name="Liam",
        last_name="North",
        enrollment_status="ENROLLED",
    )
    db.add(kid)
    db.commit()
    return kid


# =============================================================================
# Auth Fixtures
# =============================================================================

@dataclass
class TestAuth:
    """Test authentication context."""
    user: User
    token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


def mint_token(user: User) -> str:
    return create_access_token(
        user_id=user.id,
        center_id=user.center_id,
        role=user.role,
        email=user.email,
    )


@pytest.fixture(scope="function")
def admin_auth(admin_user: User) -> TestAuth:
    return TestAuth(user=admin_user, token=mint_token(admin_user))


@pytest.fixture(scope="function")
def teacher_auth(teacher_user: User) -> TestAuth:
    return TestAuth(user=teacher_user, token=mint_token(teacher_user))


@pytest.fixture(scope="function")
def parent_auth(parent_user: User) -> TestAuth:
    return TestAuth(user=parent_user, token=mint_token(parent_user))


@pytest.fixture(scope="function")
def other_auth(other_admin: User) -> TestAuth:
    return TestAuth(user=other_admin, token=mint_token(other_admin))


# =============================================================================
# Client Fixtures
# =============================================================================

@asynccontextmanager
async def api_client(db: Session, token: str | None = None) -> AsyncGenerator[AsyncClient, None]:
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
            headers=headers,
        ) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def client(db: Session) -> AsyncGenerator[AsyncClient, None]:
    """Create unauthenticated AsyncClient for testing public endpoints."""
    async with api_client(db) as c:
        yield c


@pytest.fixture(scope="function")
async def admin_client(db: Session, admin_auth: TestAuth) -> AsyncGenerator[AsyncClient, None]:
    async with api_client(db, admin_auth.token) as c:
        yield c


@pytest.fixture(scope="function")
async def teacher_client(db: Session, teacher_auth: TestAuth) -> AsyncGenerator[AsyncClient, None]:
    async with api_client(db, teacher_auth.token) as c:
        yield c


@pytest.fixture(scope="function")
async def parent_client(db: Session, parent_auth: TestAuth) -> AsyncGenerator[AsyncClient, None]:
    async with api_client(db, parent_auth.token) as c:
        yield c


@pytest.fixture(scope="function")
async def other_client(db: Session, other_auth: TestAuth) -> AsyncGenerator[AsyncClient, None]:
    async with api_client(db, other_auth.token) as c:
        yield c
