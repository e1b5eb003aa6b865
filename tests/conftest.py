"""Shared fixtures: a throwaway SQLite database per test and a low bcrypt cost."""

import httpx
import pytest
import pytest_asyncio

from messagely.auth import PasswordHasher, SessionIssuer
from messagely.config import Settings
from messagely.database import build_engine, build_sessionmaker, create_tables
from messagely.main import create_app
from messagely.models.message import Message
from messagely.repositories.user_repository import UserRepository
from messagely.schemas.user import UserCreate

ALICE = {"username": "alice", "password": "wonderland", "first_name": "Alice", "last_name": "Liddell", "phone": "+15550001"}
BOB = {"username": "bob", "password": "builder", "first_name": "Bob", "last_name": "Builder", "phone": "+15550002"}


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'messagely.db'}",
        SECRET_KEY="test-secret-key",
        BCRYPT_WORK_FACTOR=4,
        ACCESS_TOKEN_EXPIRE_MINUTES=60,
        LOG_LEVEL="DEBUG",
    )


@pytest.fixture
def hasher(settings):
    return PasswordHasher(settings)


@pytest.fixture
def issuer(settings):
    return SessionIssuer(settings)


@pytest_asyncio.fixture
async def engine(settings):
    engine = build_engine(settings)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def sessionmaker(engine):
    return build_sessionmaker(engine)


@pytest_asyncio.fixture
async def db(sessionmaker):
    async with sessionmaker() as session:
        yield session


@pytest_asyncio.fixture
async def users(sessionmaker, hasher):
    """Register alice and bob."""
    async with sessionmaker() as session:
        repo = UserRepository(session, hasher)
        return [await repo.register(UserCreate(**data)) for data in (ALICE, BOB)]


@pytest.fixture
def insert_message(sessionmaker):
    """Insert a message row outside the code under test."""

    async def _insert(from_username, to_username, body, **fields):
        async with sessionmaker() as session:
            message = Message(from_username=from_username, to_username=to_username, body=body, **fields)
            session.add(message)
            await session.commit()
            return message.id

    return _insert


@pytest_asyncio.fixture
async def client(settings, engine):
    app = create_app(settings)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    await app.state.engine.dispose()
