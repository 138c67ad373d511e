import itertools
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

from decimal import Decimal

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from evenly.core.dependencies import get_current_user, get_db
from evenly.db.session import Base
from evenly.main import app
from evenly.models.group import Group
from evenly.models.group_member import GroupMember
from evenly.models.user import User
from evenly.models.user_balance import UserBalance


@pytest.fixture
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
async def db(engine):
    session_factory = sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    async def _make(name):
        n = next(counter)
        user = User(
            auth_service_id=f"auth-{name.lower()}-{n}",
            email=f"{name.lower()}{n}@example.com",
            name=name,
        )
        db.add(user)
        await db.flush()
        return user

    return _make


@pytest.fixture
def make_group(db, make_user):
    """
    Creates a group whose ledger rows are inserted in the order given.

    balances: {member name: balance string}; every member also gets an
    active membership row.
    """

    async def _make(balances, currency="USD", name="Goa Trip", users=None):
        users = dict(users or {})
        for member in balances:
            if member not in users:
                users[member] = await make_user(member)

        first = next(iter(balances))
        group = Group(name=name, currency=currency, created_by=users[first].id)
        db.add(group)
        await db.flush()

        for member in balances:
            db.add(GroupMember(group_id=group.id, user_id=users[member].id))
        await db.flush()

        for member, amount in balances.items():
            db.add(UserBalance(group_id=group.id, user_id=users[member].id, balance=Decimal(amount)))
            await db.flush()

        await db.commit()
        return group, users

    return _make


@pytest.fixture
def client_for(db):
    def _client(user):
        async def _get_db():
            yield db

        app.dependency_overrides[get_db] = _get_db
        app.dependency_overrides[get_current_user] = lambda: user

        return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")

    yield _client

    app.dependency_overrides.clear()
