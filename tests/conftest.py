import os

os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

import circles.models  # noqa: F401
from circles.core.database import build_engine, build_session_factory, get_db, init_models
from circles.core.security import create_access_token
from circles.main import app
from circles.models.user import User
from circles.repositories.user import UserRepository


@pytest.fixture()
async def engine():
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    await init_models(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture()
async def db_session(session_factory) -> AsyncSession:
    async with session_factory() as session:
        yield session


@pytest.fixture()
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


async def make_user(db: AsyncSession, username: str, name: str = None) -> User:
    """Insert a user directly, skipping password hashing"""
    user = await UserRepository(db).create(
        username=username,
        email=f"{username}@mail.com",
        hashed_password="not-a-real-hash",
        name=name or username.title(),
    )
    await db.commit()
    return user


def auth_headers(user_id) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}
