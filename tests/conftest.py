"""
Test Configuration and Fixtures
Provides shared test setup for all test cases
"""
import os

# Settings are read at import time; give the app a self-contained environment
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-enough-length-for-hs256")
os.environ.setdefault("DEBUG", "false")

import sys
import uuid
from typing import Optional
import pytest_asyncio
from unittest.mock import patch
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool
from app.main import app
from app.database.connection import get_db, Base
from app.models.user import User
from app.models.property import Property
from app.models.offer import Offer
from app.utils.security import create_access_token

# Test database URL (use in-memory SQLite for testing)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

test_engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestSessionLocal = async_sessionmaker(
    test_engine, class_=AsyncSession, expire_on_commit=False
)

# Every module that opens sessions through AsyncSessionLocal
MODULES_TO_PATCH = [
    'app.database.connection',
    'app.services.user_service',
    'app.services.property_service',
    'app.services.offer_service',
    'app.services.settlement_service',
    'app.services.moderation_service',
    'app.services.review_service',
    'app.services.report_service',
]


@pytest_asyncio.fixture(scope="function")
async def db_session():
    """Create a fresh database session for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


class TestSessionContext:
    """Hands the shared test session to service code without closing it"""
    def __init__(self, session):
        self.session = session

    async def __aenter__(self):
        return self.session

    async def __aexit__(self, *args):
        pass


@pytest_asyncio.fixture(scope="function")
async def client(db_session):
    """Create test HTTP client"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    def make_test_session_local(session):
        return lambda: TestSessionContext(session)

    patches = []
    for module_name in MODULES_TO_PATCH:
        if module_name in sys.modules:
            module = sys.modules[module_name]
            if hasattr(module, 'AsyncSessionLocal'):
                patches.append(patch.object(module, 'AsyncSessionLocal', make_test_session_local(db_session)))

    for p in patches:
        p.start()

    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    finally:
        for p in patches:
            p.stop()
        app.dependency_overrides.clear()


def auth_headers(email: str) -> dict:
    """Bearer header for a given identity"""
    token = create_access_token(data={"sub": email, "email": email})
    return {"Authorization": f"Bearer {token}"}


async def create_user(db_session, email: str, role: str = "buyer", is_fraud: bool = False, name: Optional[str] = None) -> str:
    """Insert a user directly and return its id"""
    user_id = str(uuid.uuid4())
    db_session.add(User(
        id=user_id,
        email=email.lower(),
        name=name or email.split("@")[0],
        role=role,
        is_fraud=is_fraud,
    ))
    await db_session.commit()
    return user_id


async def create_listing(
    db_session,
    agent_email: str,
    status: str = "verified",
    title: str = "Lakeview Villa",
    location: str = "Dhaka",
    advertised: bool = False,
) -> str:
    """Insert a listing directly and return its id"""
    property_id = str(uuid.uuid4())
    db_session.add(Property(
        id=property_id,
        agent_email=agent_email.lower(),
        title=title,
        location=location,
        price_min=250000,
        price_max=400000,
        status=status,
        advertised=advertised,
    ))
    await db_session.commit()
    return property_id


async def create_offer_row(
    db_session,
    property_id: str,
    buyer_email: str,
    agent_email: str,
    amount: float = 300000,
    status: str = "pending",
    transaction_id: Optional[str] = None,
) -> str:
    """Insert an offer directly and return its id"""
    offer_id = str(uuid.uuid4())
    db_session.add(Offer(
        id=offer_id,
        property_id=property_id,
        property_title="Lakeview Villa",
        property_location="Dhaka",
        agent_email=agent_email.lower(),
        buyer_email=buyer_email.lower(),
        offered_amount=amount,
        status=status,
        transaction_id=transaction_id,
    ))
    await db_session.commit()
    return offer_id


@pytest_asyncio.fixture(scope="function")
async def marketplace(client: AsyncClient, db_session):
    """An agent with one verified listing, two buyers and an admin"""
    agent_email = "agent@x.com"
    buyer_a = "buyer.a@x.com"
    buyer_b = "buyer.b@x.com"
    admin_email = "admin@x.com"

    agent_id = await create_user(db_session, agent_email, role="agent")
    await create_user(db_session, buyer_a)
    await create_user(db_session, buyer_b)
    await create_user(db_session, admin_email, role="admin")
    property_id = await create_listing(db_session, agent_email, status="verified")

    return {
        "client": client,
        "agent_email": agent_email,
        "agent_id": agent_id,
        "buyer_a": buyer_a,
        "buyer_b": buyer_b,
        "admin_email": admin_email,
        "property_id": property_id,
    }
