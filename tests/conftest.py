"""Pytest fixtures and configuration"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-for-house-ledger-0123456789"
os.environ["REDIS_URL"] = "redis://localhost:6379/15"

from typing import AsyncGenerator, Callable, List  # noqa: E402
from uuid import UUID, uuid4  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (AsyncSession, async_sessionmaker,  # noqa: E402
                                    create_async_engine)
from sqlalchemy.pool import StaticPool  # noqa: E402

from house_ledger.api.deps import get_dispatcher  # noqa: E402
from house_ledger.core.security import create_access_token  # noqa: E402
from house_ledger.database import Base, get_db  # noqa: E402
from house_ledger.main import app  # noqa: E402
from house_ledger.models import HouseMember, InviteStatus, Profile  # noqa: E402
from house_ledger.services.notification_service import (  # noqa: E402
    BaseNotificationSink, NotificationDispatcher, NotificationRequest)


class RecordingSink(BaseNotificationSink):
    """Notification sink that keeps requests in memory"""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: List[NotificationRequest] = []

    async def send(self, request: NotificationRequest) -> bool:
        if self.fail:
            raise ConnectionError("push service unavailable")
        self.sent.append(request)
        return True


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Create a fresh in-memory database for each test.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session
        await session.rollback()

    await engine.dispose()


@pytest.fixture
def sink() -> RecordingSink:
    """In-memory notification sink"""
    return RecordingSink()


@pytest.fixture
def dispatcher(sink: RecordingSink) -> NotificationDispatcher:
    """Dispatcher delivering to the in-memory sink"""
    return NotificationDispatcher(sink)


@pytest.fixture
def failing_dispatcher() -> NotificationDispatcher:
    """Dispatcher whose sink always raises"""
    return NotificationDispatcher(RecordingSink(fail=True))


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession, dispatcher: NotificationDispatcher
) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database session override"""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def house_id() -> UUID:
    """House the test members belong to"""
    return uuid4()


async def _add_member(
    db_session: AsyncSession,
    house_id: UUID,
    display_name: str,
    status: InviteStatus = InviteStatus.ACCEPTED,
) -> Profile:
    profile = Profile(id=uuid4(), display_name=display_name)
    db_session.add(profile)
    db_session.add(HouseMember(house_id=house_id, user_id=profile.id, invite_status=status))
    await db_session.commit()
    return profile


@pytest_asyncio.fixture
async def alice(db_session: AsyncSession, house_id: UUID) -> Profile:
    """First house member"""
    return await _add_member(db_session, house_id, "Alice")


@pytest_asyncio.fixture
async def bob(db_session: AsyncSession, house_id: UUID) -> Profile:
    """Second house member"""
    return await _add_member(db_session, house_id, "Bob")


@pytest_asyncio.fixture
async def carol(db_session: AsyncSession, house_id: UUID) -> Profile:
    """Third house member"""
    return await _add_member(db_session, house_id, "Carol")


@pytest_asyncio.fixture
async def outsider(db_session: AsyncSession) -> Profile:
    """User who belongs to a different house"""
    return await _add_member(db_session, uuid4(), "Mallory")


@pytest.fixture
def auth_headers() -> Callable[[Profile], dict]:
    """Build bearer headers for a user"""

    def _headers(user: Profile) -> dict:
        token = create_access_token(str(user.id))
        return {"Authorization": f"Bearer {token}"}

    return _headers
