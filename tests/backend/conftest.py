import os
import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

TEST_DB_URL = "sqlite://:memory:"
os.environ["DATABASE_URL"] = TEST_DB_URL

from app.api import deps  # noqa: E402
from app.config import Settings  # noqa: E402
from app.core import db as db_module  # noqa: E402
from app.core.errors import UploadError  # noqa: E402
from app.core.pubsub import Channel  # noqa: E402
from app.core.security import hash_password  # noqa: E402
from app.main import app  # noqa: E402
from app.models.user import User  # noqa: E402

db_module.DB_URL = TEST_DB_URL
db_module.TORTOISE_ORM["connections"]["default"] = TEST_DB_URL

TEST_SECRET = "test-secret-for-signing-tokens-0123456789"


class FakeStorage:
    """Stands in for GCSStorage; records uploads or fails on demand."""

    def __init__(self):
        self.uploads: list[tuple[bytes, str, str]] = []
        self.fail = False

    async def upload_profile_picture(self, data: bytes, filename: str | None, content_type: str) -> str:
        if self.fail:
            raise UploadError()
        self.uploads.append((data, filename, content_type))
        return f"https://storage.googleapis.com/test-bucket/profilePictures/{len(self.uploads)}_{filename}"


class RecordingWebSocket:
    """Minimal subscriber that records every frame it is sent."""

    def __init__(self):
        self.frames: list[dict] = []

    async def send_json(self, data: dict):
        self.frames.append(data)


async def _init_test_db() -> None:
    """
    Initialize a clean in-memory SQLite database for every test.
    Ensures tables are recreated from scratch.
    """
    if Tortoise._inited:
        await Tortoise.close_connections()
    await Tortoise.init(config=db_module.TORTOISE_ORM)
    await Tortoise.generate_schemas()


@pytest.fixture
def test_settings():
    return Settings(jwt_secret=TEST_SECRET, database_url=TEST_DB_URL, gcs_bucket="test-bucket")


@pytest.fixture
def fake_storage():
    return FakeStorage()


@pytest.fixture
def test_channel():
    chan = Channel()
    return chan


@pytest_asyncio.fixture
async def subscriber(test_channel):
    """A realtime client connected to the test channel."""
    ws = RecordingWebSocket()
    await test_channel.subscribe(ws)
    return ws


@pytest_asyncio.fixture
async def client(test_settings, fake_storage, test_channel):
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with a fresh DB
    and test doubles for settings, object storage and the broadcast channel.
    """
    await _init_test_db()
    app.dependency_overrides[deps.get_settings] = lambda: test_settings
    app.dependency_overrides[deps.get_storage] = lambda: fake_storage
    app.dependency_overrides[deps.get_channel] = lambda: test_channel
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client
    app.dependency_overrides.clear()
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def create_user(client):
    """
    Factory fixture to create users directly via ORM.
    """

    async def _create_user(password: str = "UserPass!23", name: str = "Tester") -> tuple[User, str]:
        user = await User.create(
            name=name,
            email=f"{uuid.uuid4().hex[:8]}@example.com",
            password_hash=hash_password(password),
        )
        return user, password

    return _create_user


@pytest_asyncio.fixture
async def auth_header_factory(client):
    """
    Helper fixture to obtain Authorization headers via the login endpoint.
    """

    async def _get_headers(email: str, password: str) -> dict[str, str]:
        resp = await client.post(
            "/api/auth/login",
            json={"email": email, "password": password},
        )
        assert resp.status_code == 200, resp.text
        token = resp.json()["token"]
        return {"Authorization": f"Bearer {token}"}

    return _get_headers
