import os
import sys
from email.message import EmailMessage
from pathlib import Path

import pytest

from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient, ASGITransport

# Test environment, applied before the app modules are imported.
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("LOG_LEVEL", "WARNING")

# Make the `newshub` package importable without installing it.
repo_root = Path(__file__).resolve().parents[2]
backend_path = repo_root / "backend"
if str(backend_path) not in sys.path:
    sys.path.insert(0, str(backend_path))

from newshub.main import app
from newshub.config import Settings, get_settings
from newshub.database import Base
from newshub.database import get_db as real_get_db
from newshub.contact.service import get_mail_transport
from newshub.users import service as user_service
from newshub.users.models import Role

TEST_SETTINGS = Settings(
    ENVIRONMENT="test",
    DATABASE_URL="sqlite+aiosqlite:///:memory:",
    JWT_SECRET_KEY="test-secret",
    ADMIN_EMAIL="admin@example.com",
    SMTP_USER="mailer@example.com",
    DEFAULT_PAGE_SIZE=10,
    MAX_PAGE_SIZE=100,
)

ARTICLE_CONTENT = "Local reporters gathered detailed accounts from residents about the flooding downtown. " * 2


class RecordingMailTransport:
    def __init__(self):
        self.sent: list[EmailMessage] = []
        self.fail_with: Exception | None = None

    def send(self, message: EmailMessage) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(message)


@pytest.fixture()
async def test_engine():
    # Fresh in-memory SQLite per test; StaticPool keeps the single connection alive.
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
async def db(test_engine):
    async_session = sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture()
def mail_transport():
    return RecordingMailTransport()


@pytest.fixture(autouse=True)
async def override_dependencies(db, mail_transport):
    async def _get_db():
        yield db
    app.dependency_overrides[real_get_db] = _get_db
    app.dependency_overrides[get_settings] = lambda: TEST_SETTINGS
    app.dependency_overrides[get_mail_transport] = lambda: mail_transport
    yield
    app.dependency_overrides.clear()


@pytest.fixture()
def settings():
    return TEST_SETTINGS


@pytest.fixture()
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def signup(client, username: str, email: str | None = None, password: str = "secret1") -> dict:
    resp = await client.post(
        "/api/auth/signup",
        json={"username": username, "email": email or f"{username}@example.com", "password": password},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def article_payload(**overrides) -> dict:
    payload = {
        "title": "Flooding closes downtown streets",
        "description": "Heavy rain overnight flooded several downtown intersections.",
        "content": ARTICLE_CONTENT,
        "thumbnail": "https://img.example.com/flood.jpg",
        "type": "article",
        "location": {"city": "Austin", "state": "Texas", "country": "USA"},
        "categories": ["Weather", "Local"],
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
async def alice(client):
    return await signup(client, "alice", "a@x.com")


@pytest.fixture()
async def bob(client):
    return await signup(client, "bob", "bob@example.com")


@pytest.fixture()
async def admin(client, db):
    data = await signup(client, "root_admin", "root@example.com")
    await user_service.set_role(db, data["user"]["id"], Role.ADMIN)
    return data
