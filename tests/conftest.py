import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("COOKIE_SECURE", "false")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("EMAIL_API_KEY", "")
os.environ.setdefault("REDIS_URL", "")
os.environ.setdefault("YOUTUBE_API_KEY", "")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from acrossmedia.auth import create_access_token, hash_password
from acrossmedia.config import get_settings
from acrossmedia.database import Base, get_db, init_db
from acrossmedia.main import app
from acrossmedia.models import Admin, AdminRole, AdminStatus
from acrossmedia.services.security_store import MemorySecurityStore, get_security_store

PASSWORD = "Med1a!Portal"


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0):
        self.t = start

    def __call__(self) -> float:
        return self.t

    def advance(self, seconds: float) -> None:
        self.t += seconds


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return MemorySecurityStore(clock=clock)


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db_session, store):
    def override_get_db():
        yield db_session

    async def override_store():
        return store

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_security_store] = override_store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_admin(db_session):
    def _make(
        username: str,
        role: str = AdminRole.ADMIN.value,
        status: str = AdminStatus.ACTIVE.value,
        email: str | None = None,
        password: str = PASSWORD,
        **extra,
    ) -> Admin:
        admin = Admin(
            username=username,
            email=email or f"{username}@acrossmedia.test",
            password=hash_password(password),
            role=role,
            status=status,
            **extra,
        )
        db_session.add(admin)
        db_session.commit()
        db_session.refresh(admin)
        return admin

    return _make


def login_as(client: TestClient, admin: Admin) -> TestClient:
    client.cookies.set(get_settings().auth_cookie_name, create_access_token(admin))
    return client


@pytest.fixture
def superadmin(make_admin):
    return make_admin("chief", role=AdminRole.SUPERADMIN.value)


@pytest.fixture
def admin_user(make_admin):
    return make_admin("editor")


@pytest.fixture
def superadmin_client(client, superadmin):
    return login_as(client, superadmin)


@pytest.fixture
def admin_client(client, admin_user):
    return login_as(client, admin_user)
