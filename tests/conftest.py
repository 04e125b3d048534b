from pathlib import Path

from dotenv import load_dotenv

env_file = Path(__file__).parent.parent / ".env.test"
load_dotenv(env_file)

from unittest.mock import AsyncMock  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.auth.models.user_profile import UserRole  # noqa: E402
from app.auth.services.identity_provider import (  # noqa: E402
    IdentityProvider,
    get_identity_provider,
)
from app.core.storage import LocalStorage, get_storage  # noqa: E402
from app.db.session import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from tests.utils.factories import create_profile_factory  # noqa: E402
from tests.utils.helpers import create_provider_token  # noqa: E402


@pytest.fixture
def test_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db_session(test_engine):
    session = sessionmaker(bind=test_engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(str(tmp_path / "videos"))


@pytest.fixture
def identity_provider():
    return AsyncMock(spec=IdentityProvider)


@pytest.fixture
async def test_app(db_session, storage, identity_provider):
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_identity_provider] = lambda: identity_provider

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
async def test_client(test_app):
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as client:
        yield client


@pytest.fixture
def test_admin(db_session):
    return create_profile_factory(
        db_session, email="admin@example.com", full_name="Admin User", role=UserRole.ADMIN
    )


@pytest.fixture
def test_instructor(db_session):
    return create_profile_factory(
        db_session,
        email="instructor@example.com",
        full_name="Instructor User",
        role=UserRole.INSTRUCTOR,
    )


@pytest.fixture
def test_student(db_session):
    return create_profile_factory(
        db_session, email="student@example.com", full_name="Student User", role=UserRole.STUDENT
    )


@pytest.fixture
def test_admin_token(test_admin):
    return create_provider_token(test_admin.id, test_admin.email)


@pytest.fixture
def test_instructor_token(test_instructor):
    return create_provider_token(test_instructor.id, test_instructor.email)


@pytest.fixture
def test_student_token(test_student):
    return create_provider_token(test_student.id, test_student.email)
