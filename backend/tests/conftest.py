import asyncio
import os
import tempfile

import pytest

# Settings are read on first import, so point them at scratch locations first.
_scratch = tempfile.mkdtemp(prefix="pixelboard-tests-")
os.environ.setdefault("PIXELBOARD_DATABASE_URL", f"sqlite+aiosqlite:///{_scratch}/app.db")
os.environ.setdefault("PIXELBOARD_UPLOAD_DIR", os.path.join(_scratch, "uploads"))

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

import pixelboard.models  # noqa: E402,F401
from pixelboard.core.dependencies import get_db  # noqa: E402
from pixelboard.db.base import Base  # noqa: E402
from pixelboard.main import app  # noqa: E402


# ============================================================================
# Test database setup
# ============================================================================
# Every test gets its own SQLite file. NullPool opens a fresh connection per
# checkout, so the same database works from pytest-asyncio's loop and from the
# loops TestClient spins up per request.
def _make_engine(tmp_path):
    return create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/test.db", poolclass=NullPool)


async def _create_tables(engine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
async def db_session(tmp_path):
    """Async session on a fresh database, for service-level tests."""
    engine = _make_engine(tmp_path)
    await _create_tables(engine)
    factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    async with factory() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def session_factory(tmp_path):
    engine = _make_engine(tmp_path)
    asyncio.run(_create_tables(engine))
    yield async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    asyncio.run(engine.dispose())


@pytest.fixture
def run_db(session_factory):
    """Run ``fn(session)`` against the API's database and commit."""

    def _run(fn):
        async def _inner():
            async with session_factory() as session:
                result = await fn(session)
                await session.commit()
                return result

        return asyncio.run(_inner())

    return _run


@pytest.fixture(name="client")
def client_fixture(session_factory):
    """Test client whose routes use the per-test database.

    The client is not entered as a context manager, so the lifespan (table
    creation on the default engine, scheduler) does not run.
    """

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_client(client):
    response = client.post(
        "/api/auth/register",
        json={"username": "Root", "email": "root@example.com", "password": "secret123", "role": "admin"},
    )
    assert response.status_code == 200
    return client


@pytest.fixture
def admin_token(client):
    client.post(
        "/api/auth/register",
        json={"username": "boss", "email": "boss@example.com", "password": "secret123", "role": "admin"},
    )
    response = client.post("/api/auth/login", json={"username": "boss", "password": "secret123"})
    client.cookies.clear()
    return response.json()["token"]
