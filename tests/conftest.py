"""Pytest fixtures for unit and integration tests."""
import os
import tempfile

# The static mount and the disk blob store read UPLOAD_DIR at import time.
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="nested-students-"))

from typing import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from nested_students.api.deps import get_blob_store  # noqa: E402
from nested_students.database import get_db  # noqa: E402
from nested_students.exceptions import BlobNotFound  # noqa: E402
from nested_students.main import app  # noqa: E402
from nested_students.models.base import Base  # noqa: E402
from nested_students.services.blob_store import BlobUpload, safe_blob_name  # noqa: E402
from nested_students.services.student_service import StudentService  # noqa: E402

# Use in-memory SQLite for tests (aiomysql requires MySQL/MariaDB)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class InMemoryBlobStore:
    """Dict-backed stand-in for LocalBlobStore."""

    def __init__(self):
        self.blobs: dict[str, bytes] = {}

    async def save(self, upload: BlobUpload) -> str:
        name = safe_blob_name(upload.filename)
        self.blobs[name] = upload.file.read()
        return name

    async def delete(self, name: str) -> None:
        try:
            del self.blobs[name]
        except KeyError as e:
            raise BlobNotFound(name) from e


@pytest_asyncio.fixture
async def test_engine():
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db(test_engine) -> AsyncGenerator[AsyncSession, None]:
    TestSession = async_sessionmaker(
        bind=test_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with TestSession() as session:
        yield session
        await session.rollback()


@pytest.fixture
def blobs() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def service(db, blobs) -> StudentService:
    return StudentService(db, blobs)


@pytest_asyncio.fixture
async def client(db, blobs) -> AsyncGenerator[AsyncClient, None]:
    """HTTP test client with DB and blob store overrides."""
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_blob_store] = lambda: blobs
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_client(
    session_factory, blobs, monkeypatch
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP test client running the real get_db against the test engine."""
    monkeypatch.setattr("nested_students.database.AsyncSessionLocal", session_factory)
    app.dependency_overrides[get_blob_store] = lambda: blobs
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
    app.dependency_overrides.clear()
