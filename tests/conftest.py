"""
Shared fixtures: an in-memory SQLite database per test, fresh in-memory
collaborators (auth, change-feed, cache, SMS) and a small seeded world.
"""

import os

# Must be set before anything from khabee is imported
os.environ["ENV_MODE"] = "development"
os.environ["DEBUG"] = "false"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"

from dataclasses import dataclass

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from khabee.database import Base, get_db, get_session_factory
from khabee.main import app
from khabee.models import Kitchen, MenuItem, User, UserRole
from khabee.services.auth import AuthUser, get_auth_provider, reset_auth_provider
from khabee.services.cache import get_page_cache, reset_page_cache
from khabee.services.notifications import get_notification_service, reset_notification_service
from khabee.services.realtime import get_change_feed, reset_change_feed


@pytest.fixture(autouse=True)
def fresh_services():
    reset_auth_provider()
    reset_change_feed()
    reset_page_cache()
    reset_notification_service()
    yield
    reset_auth_provider()
    reset_change_feed()
    reset_page_cache()
    reset_notification_service()


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def auth():
    return get_auth_provider()


@pytest.fixture
def feed():
    return get_change_feed()


@pytest.fixture
def cache():
    return get_page_cache()


@pytest.fixture
def sms():
    return get_notification_service()


@dataclass
class World:
    owner: AuthUser
    owner_token: str
    customer: AuthUser
    customer_token: str
    stranger: AuthUser
    stranger_token: str
    kitchen: Kitchen
    other_kitchen: Kitchen
    biryani: MenuItem
    cake: MenuItem
    burger: MenuItem


@pytest.fixture
async def world(db, auth) -> World:
    """Owner with two kitchens, a customer, and an unrelated signed-in user."""
    owner_session = auth.issue_session("+8801700000001")
    customer_session = auth.issue_session("+8801700000002")
    stranger_session = auth.issue_session("+8801700000003")

    db.add_all([
        User(
            id=owner_session.user.id,
            phone=owner_session.user.phone,
            name="Sample Owner",
            email="owner@khabee.com",
            role=UserRole.KITCHEN_OWNER,
        ),
        User(id=customer_session.user.id, phone=customer_session.user.phone, name="Rahim"),
        User(id=stranger_session.user.id, phone=stranger_session.user.phone, name="Karim"),
    ])

    kitchen = Kitchen(
        owner_id=owner_session.user.id,
        name="Ammi's Kitchen",
        description="Authentic home-cooked Bangladeshi meals",
        logo="🏠",
        address="123 Gulshan Avenue, Dhaka",
    )
    other_kitchen = Kitchen(
        owner_id=owner_session.user.id,
        name="Burger Haven",
        description="Juicy burgers and crispy fries",
        logo="🍔",
        address="456 Dhanmondi Road, Dhaka",
    )
    db.add_all([kitchen, other_kitchen])
    await db.flush()

    biryani = MenuItem(kitchen_id=kitchen.id, name="Chicken Biryani", price=100.0)
    cake = MenuItem(kitchen_id=kitchen.id, name="Chocolate Cake", price=120.0)
    burger = MenuItem(kitchen_id=other_kitchen.id, name="Beef Burger", price=180.0)
    db.add_all([biryani, cake, burger])
    await db.commit()

    return World(
        owner=owner_session.user,
        owner_token=owner_session.access_token,
        customer=customer_session.user,
        customer_token=customer_session.access_token,
        stranger=stranger_session.user,
        stranger_token=stranger_session.access_token,
        kitchen=kitchen,
        other_kitchen=other_kitchen,
        biryani=biryani,
        cake=cake,
        burger=burger,
    )


@pytest.fixture
async def client(session_factory):
    """HTTP client bound to the app, sharing the test database."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client

    app.dependency_overrides.clear()
