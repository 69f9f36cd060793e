import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")

import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.security import create_access_token
from app.database import Base, get_db
from app.main import app
from app.models.criteria import CriteriaSet
from app.models.rating import Rating
from app.models.user import User
from app.utils.password import hash_password

PASSWORD = "s3cret-pass"


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_factory):
    async def _make_user(name, role, managers=(), team_leads=(), email=None):
        user = User(
            uid=uuid.uuid4().hex,
            name=name,
            email=email or f"{name.lower().replace(' ', '.')}@example.com",
            role=role,
            managers=list(managers),
            team_leads=list(team_leads),
            hashed_password=hash_password(PASSWORD),
        )
        async with session_factory() as session:
            session.add(user)
            await session.commit()
        return user
    return _make_user


@pytest.fixture
def make_criteria(session_factory):
    async def _make_criteria(role, criteria):
        async with session_factory() as session:
            session.add(CriteriaSet(role=role, criteria=criteria))
            await session.commit()
    return _make_criteria


@pytest.fixture
def make_rating(session_factory):
    async def _make_rating(given_by, given_to, month, average_score, role_of_given_to="developer"):
        rating = Rating(
            given_by=given_by,
            given_to=given_to,
            month=month,
            criteria={},
            average_score=average_score,
            remarks="",
            role_of_given_to=role_of_given_to,
        )
        async with session_factory() as session:
            session.add(rating)
            await session.commit()
        return rating
    return _make_rating


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token({'sub': user.uid})}"}
