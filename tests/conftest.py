"""
SelfEmploy Portal - Test Configuration

Pytest fixtures and configuration.
"""

import os

# Settings are read at import time
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key")
os.environ["DATABASE_URL_ASYNC"] = "sqlite+aiosqlite:///:memory:"
os.environ["APP_ENV"] = "testing"

import itertools
from datetime import datetime, timezone
from decimal import Decimal
from typing import AsyncGenerator, Iterable, Optional

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_async_session
from app.models.admin_user import AdminPermission, AdminRole, AdminUser
from app.models.category import Category
from app.models.panchayath import Panchayath
from app.models.registration import Registration, RegistrationStatus
from app.utils.permissions import ActorContext
from app.utils.security import create_access_token, get_password_hash
from main import app


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "TestPassword123!"


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh in-memory database and session for each test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session
        await session.rollback()

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database session override."""

    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_async_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ===========================================
# ADMIN FIXTURES
# ===========================================

def actor_for(admin: AdminUser) -> ActorContext:
    """ActorContext for an admin created by ``create_admin``."""
    return ActorContext.from_admin(admin)


def _auth_headers(admin: AdminUser) -> dict:
    token = create_access_token({
        "sub": str(admin.id),
        "username": admin.username,
        "role": admin.role.value,
    })
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    """Returns a function building bearer headers for an admin."""
    return _auth_headers


@pytest_asyncio.fixture
async def create_admin(db_session: AsyncSession):
    """Factory creating an admin with the given role and grants."""

    async def _create(
        username: str,
        role: AdminRole = AdminRole.USER_ADMIN,
        grants: Iterable = (),
        is_active: bool = True,
    ) -> AdminUser:
        admin = AdminUser(
            username=username,
            password_hash=get_password_hash(TEST_PASSWORD),
            role=role,
            is_active=is_active,
            permissions=[
                AdminPermission(module=module, permission_type=permission_type)
                for module, permission_type in grants
            ],
        )
        db_session.add(admin)
        await db_session.commit()
        return admin

    return _create


@pytest_asyncio.fixture
async def super_admin(create_admin) -> AdminUser:
    return await create_admin("root", AdminRole.SUPER_ADMIN)


@pytest_asyncio.fixture
async def local_admin(create_admin) -> AdminUser:
    return await create_admin("local", AdminRole.LOCAL_ADMIN)


@pytest_asyncio.fixture
async def user_admin(create_admin) -> AdminUser:
    return await create_admin("viewer", AdminRole.USER_ADMIN)


@pytest.fixture
def super_actor(super_admin) -> ActorContext:
    return actor_for(super_admin)


@pytest.fixture
def local_actor(local_admin) -> ActorContext:
    return actor_for(local_admin)


@pytest.fixture
def viewer_actor(user_admin) -> ActorContext:
    return actor_for(user_admin)


# ===========================================
# CATALOGUE FIXTURES
# ===========================================

@pytest_asyncio.fixture
async def paid_category(db_session: AsyncSession) -> Category:
    """Category charging an offer fee of 500."""
    category = Category(
        name="Job Card",
        description="Self-employment job card",
        actual_fee=Decimal("1000.00"),
        offer_fee=Decimal("500.00"),
        is_active=True,
    )
    db_session.add(category)
    await db_session.commit()
    await db_session.refresh(category)
    return category


@pytest_asyncio.fixture
async def free_category(db_session: AsyncSession) -> Category:
    """The designated free registration category."""
    category = Category(
        name="Pennyekart Free Registration",
        actual_fee=Decimal("0"),
        offer_fee=Decimal("0"),
        is_active=True,
    )
    db_session.add(category)
    await db_session.commit()
    await db_session.refresh(category)
    return category


@pytest_asyncio.fixture
async def panchayath(db_session: AsyncSession) -> Panchayath:
    panchayath = Panchayath(name="Kondotty", district="Malappuram")
    db_session.add(panchayath)
    await db_session.commit()
    await db_session.refresh(panchayath)
    return panchayath


# ===========================================
# REGISTRATION FIXTURES
# ===========================================

@pytest_asyncio.fixture
async def create_registration(db_session: AsyncSession, paid_category: Category):
    """Factory inserting a registration directly, bypassing the service."""
    counter = itertools.count(1)

    async def _create(
        category: Optional[Category] = None,
        panchayath: Optional[Panchayath] = None,
        status: RegistrationStatus = RegistrationStatus.PENDING,
        created_at: Optional[datetime] = None,
        fee_paid=None,
        mobile_number: Optional[str] = None,
        name: Optional[str] = None,
        **extra,
    ) -> Registration:
        n = next(counter)
        category = category or paid_category
        created_at = created_at or datetime.now(timezone.utc)
        registration = Registration(
            customer_id=f"ESEPTEST{n:04d}",
            name=name or f"Registrant {n}",
            address=f"House {n}, Main Road",
            mobile_number=mobile_number or f"98765{n:05d}",
            ward=str(n % 10 + 1),
            category_id=category.id,
            panchayath_id=panchayath.id if panchayath else None,
            fee_paid=category.offer_fee if fee_paid is None else Decimal(str(fee_paid)),
            status=status,
            created_at=created_at,
            updated_at=created_at,
            **extra,
        )
        db_session.add(registration)
        await db_session.commit()
        return registration

    return _create
