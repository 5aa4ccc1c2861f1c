"""
Test configuration and fixtures for Volunteer Hub backend tests.
"""
import json
import os
import pytest
import pytest_asyncio
from datetime import datetime, timezone
from typing import AsyncGenerator, Optional
import httpx
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from app.main import app
from app.db.base import Base, get_db
from app.core.security import get_password_hash, create_user_token
from app.models.user import User, UserRole, VolunteerStatus, Gender
from app.models.hub import Hub, HubStatus, OrganizationType
from app.models.volunteer_request import VolunteerRequest, RequestStatus, RequestPriority
from app.models.membership_type import MembershipType, DurationType
from app.services.payments import (
    PaymentSimulator, PaymentGatewayClient, get_payment_simulator, get_payment_gateway
)
from app.services.communications import CommunicationDispatcher, get_communication_dispatcher


# Use a file-based SQLite DB to avoid :memory: multiple-connection issues
# with SQLAlchemy + aiosqlite (each new connection would see an empty DB).
TEST_DATABASE_PATH = "./test_volunteer_hub.db"
TEST_DATABASE_URL = f"sqlite+aiosqlite:///{TEST_DATABASE_PATH}"
TEST_PASSWORD = "TestPass123"


def now() -> datetime:
    return datetime.now(timezone.utc)


def headers_for(user: User) -> dict:
    """Authorization headers for a user."""
    return {"Authorization": f"Bearer {create_user_token(user)}"}


class RecordingPaymentSimulator(PaymentSimulator):
    """Records scheduled settlements instead of running them."""

    def __init__(self):
        super().__init__(delay=0)
        self.scheduled: list[str] = []

    def schedule(self, background_tasks, payment_id: str) -> None:
        self.scheduled.append(payment_id)


class RecordingDispatcher(CommunicationDispatcher):
    """Records scheduled dispatches instead of running them."""

    def __init__(self):
        super().__init__(delay=0)
        self.scheduled: list[str] = []

    def schedule(self, background_tasks, communication_id: str) -> None:
        self.scheduled.append(communication_id)


class FakeGateway:
    """Mock checkout gateway served through httpx.MockTransport."""

    def __init__(self):
        self.requests: list[tuple[str, dict]] = []
        self.status_code = 200
        self.tx_ref: Optional[str] = "CHAPA-TX-0001"
        self.checkout_url = "https://checkout.example.com/pay/abc"
        self.error: Optional[Exception] = None
        self.body: Optional[dict] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append((request.url.path, json.loads(request.content)))
        if self.error is not None:
            raise self.error
        body = self.body
        if body is None:
            body = {
                "response": {
                    "status": "success",
                    "tx_ref": self.tx_ref,
                    "data": {"checkout_url": self.checkout_url},
                }
            }
        return httpx.Response(self.status_code, json=body)

    def client(self) -> PaymentGatewayClient:
        return PaymentGatewayClient(
            base_url="http://gateway.test",
            timeout=5,
            transport=httpx.MockTransport(self.handler),
        )


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()
    # Clean up test database file
    try:
        os.remove(TEST_DATABASE_PATH)
    except OSError:
        pass


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session_maker = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )
    async with async_session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def simulator() -> RecordingPaymentSimulator:
    return RecordingPaymentSimulator()


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest_asyncio.fixture(scope="function")
async def client(
    db_session: AsyncSession,
    simulator: RecordingPaymentSimulator,
    dispatcher: RecordingDispatcher,
    gateway: FakeGateway,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database and background-work overrides."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_simulator] = lambda: simulator
    app.dependency_overrides[get_communication_dispatcher] = lambda: dispatcher
    app.dependency_overrides[get_payment_gateway] = gateway.client
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session: AsyncSession):
    """Factory creating users directly in the database."""
    counter = {"n": 0}

    async def _make_user(
        role: UserRole = UserRole.VOLUNTEER,
        name: Optional[str] = None,
        email: Optional[str] = None,
        **fields
    ) -> User:
        counter["n"] += 1
        n = counter["n"]
        user = User(
            name=name or f"{role.value.title()} User {n}",
            email=email or f"{role.value}{n}@example.com",
            password_hash=get_password_hash(TEST_PASSWORD),
            role=role,
            phone=fields.pop("phone", f"+2519110000{n:02d}"),
            volunteer_status=fields.pop("volunteer_status", VolunteerStatus.ACTIVE),
            created=fields.pop("created", now()),
            updated=now(),
            **fields
        )
        db_session.add(user)
        await db_session.flush()
        return user

    return _make_user


@pytest_asyncio.fixture
async def admin_user(make_user) -> User:
    return await make_user(UserRole.ADMIN, name="Admin User", email="admin@example.com")


@pytest_asyncio.fixture
async def coordinator_user(make_user) -> User:
    return await make_user(UserRole.HUB_COORDINATOR, name="Hub Coordinator", email="coordinator@example.com")


@pytest_asyncio.fixture
async def evaluator_user(make_user) -> User:
    return await make_user(UserRole.EVALUATOR, name="Eva Evaluator", email="evaluator@example.com")


@pytest_asyncio.fixture
async def volunteer_user(make_user) -> User:
    return await make_user(
        UserRole.VOLUNTEER,
        name="Abebe Kebede",
        email="volunteer@example.com",
        gender=Gender.MALE,
        profile={"skills": ["first aid", "driving"], "languages": [{"language": "Amharic"}]},
    )


@pytest_asyncio.fixture
async def member_user(make_user) -> User:
    return await make_user(UserRole.MEMBER, name="Meron Member", email="member@example.com")


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return headers_for(admin_user)


@pytest.fixture
def coordinator_headers(coordinator_user: User) -> dict:
    return headers_for(coordinator_user)


@pytest.fixture
def evaluator_headers(evaluator_user: User) -> dict:
    return headers_for(evaluator_user)


@pytest.fixture
def volunteer_headers(volunteer_user: User) -> dict:
    return headers_for(volunteer_user)


@pytest.fixture
def member_headers(member_user: User) -> dict:
    return headers_for(member_user)


@pytest_asyncio.fixture
async def test_hub(db_session: AsyncSession) -> Hub:
    """An approved hub in Addis Ababa."""
    hub = Hub(
        name="Addis Relief Center",
        organization_type=OrganizationType.NGO,
        email="relief@example.com",
        phone="+251111000000",
        address={"city": "Addis Ababa", "region": "Addis Ababa"},
        region="Addis Ababa",
        contact_person={"name": "Sara Tesfaye", "phone": "+251911111111"},
        status=HubStatus.APPROVED,
        verified=True,
        capacity=20,
        active_volunteers=0,
        created=now(),
        updated=now(),
    )
    db_session.add(hub)
    await db_session.flush()
    return hub


@pytest_asyncio.fixture
async def test_request(db_session: AsyncSession, test_hub: Hub) -> VolunteerRequest:
    """An open request for two first aid volunteers."""
    request = VolunteerRequest(
        hub_id=test_hub.id,
        title="First aid support",
        description="Support the weekend first aid post",
        required_skills=["first aid"],
        criteria={},
        location={"city": "Addis Ababa", "region": "Addis Ababa"},
        region="Addis Ababa",
        number_of_volunteers=2,
        current_volunteers=0,
        status=RequestStatus.OPEN,
        priority=RequestPriority.HIGH,
        created=now(),
        updated=now(),
    )
    request.hub = test_hub
    db_session.add(request)
    await db_session.flush()
    return request


@pytest_asyncio.fixture
async def membership_type(db_session: AsyncSession) -> MembershipType:
    membership_type = MembershipType(
        name="Annual Member",
        description="One year of membership",
        amount=500,
        currency="ETB",
        duration=1,
        duration_type=DurationType.YEAR,
        benefits=["Newsletter", "Voting rights"],
        active=True,
        order=1,
        created=now(),
        updated=now(),
    )
    db_session.add(membership_type)
    await db_session.flush()
    return membership_type
