import os

# Must be set before the quizhub modules read their settings
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("JWT_SECRET_KEY", "quizhub-test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import uuid

import pytest
from httpx import ASGITransport, AsyncClient

from quizhub import database
from quizhub.main import app
from quizhub.profiles import new_profile


@pytest.fixture
async def engine(tmp_path):
    engine = database.configure_database(f"sqlite+aiosqlite:///{tmp_path / 'quizhub.db'}")
    await database.create_all()
    yield engine
    await database.close_database()


@pytest.fixture
async def session(engine):
    async with database.get_session_factory()() as session:
        yield session


@pytest.fixture
async def client(engine):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def make_profile(session):
    async def _make_profile(email=None, **stats):
        user_id = uuid.uuid4()
        profile = new_profile(user_id, email or f"{user_id.hex[:8]}@example.com")
        for field, value in stats.items():
            setattr(profile, field, value)
        session.add(profile)
        await session.commit()
        return profile
    return _make_profile
