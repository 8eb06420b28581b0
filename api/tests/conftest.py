import os
import secrets
from datetime import datetime

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import NullPool

from app import models  # noqa: F401  register mappers
from app.main import app
from app.db.database import Base, get_db
from app.models.user import User, SubscriptionType
from app.models.developer import Developer, ApiKey, Website
from app.models.tracking import TimeTracking
from app.utils.auth import create_access_token


@pytest.fixture
def database_url(tmp_path):
    """Per-test database. Set TEST_DATABASE_URL to run against postgres."""
    return os.environ.get('TEST_DATABASE_URL', f'sqlite+aiosqlite:///{tmp_path}/test.db')


@pytest.fixture
async def engine(database_url):
    """Create test database tables."""
    engine = create_async_engine(database_url, echo=False, poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    """Database session for direct queries in tests."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def client(session_factory):
    """Async HTTP client for testing."""

    async def override_get_db():
        """Override database dependency for tests."""
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac
    app.dependency_overrides.clear()


class Factory:
    """Builds users, developers, websites and time samples."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self._n = 0

    def _name(self, prefix: str) -> str:
        self._n += 1
        return f'{prefix}{self._n}'

    async def user(self, subscribed: bool = False, is_admin: bool = False) -> User:
        user = User(
            username=self._name('user'),
            is_subscribed=subscribed,
            subscription_type=(
                SubscriptionType.PREMIUM.value if subscribed else SubscriptionType.FREE.value
            ),
            is_admin=is_admin,
        )
        self.db.add(user)
        await self.db.flush()
        return user

    async def premium_users(self, count: int) -> list[User]:
        return [await self.user(subscribed=True) for _ in range(count)]

    async def developer(self, payment_details=None, company_name: str | None = None) -> Developer:
        owner = await self.user()
        developer = Developer(
            user_id=owner.id,
            company_name=company_name or self._name('Company '),
            payment_details=payment_details,
        )
        self.db.add(developer)
        await self.db.flush()
        key = ApiKey(developer_id=developer.id, name='default', key=secrets.token_hex(16))
        self.db.add(key)
        await self.db.flush()
        return developer

    async def website(self, developer: Developer, name: str | None = None) -> Website:
        key = ApiKey(developer_id=developer.id, name=self._name('key'), key=secrets.token_hex(16))
        self.db.add(key)
        await self.db.flush()
        name = name or self._name('site')
        site = Website(api_key_id=key.id, name=name, url=f'https://{name}.example')
        self.db.add(site)
        await self.db.flush()
        return site

    async def track(self, user: User, website: Website, seconds: int, when: datetime) -> TimeTracking:
        sample = TimeTracking(user_id=user.id, website_id=website.id, duration=seconds, date=when)
        self.db.add(sample)
        await self.db.flush()
        return sample


@pytest.fixture
def factory(db_session):
    return Factory(db_session)


def auth_headers(user: User) -> dict:
    return {'Authorization': f'Bearer {create_access_token(user.id)}'}
