"""
Test configuration and fixtures for the donor reports tests.
"""
import os
import pytest
import pytest_asyncio
from datetime import date
from decimal import Decimal
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from donor_reports.main import app
from donor_reports.db.base import Base, get_db
from donor_reports.core.security import get_password_hash, create_access_token
from donor_reports.models.user import User
from donor_reports.models.donor import Donor
from donor_reports.models.campaign import Campaign
from donor_reports.models.donation_method import DonationMethod, DonationMethodType, StandingOrderKind
from donor_reports.models.donation import Donation, DonationType
from donor_reports.models.payment import Payment
from donor_reports.services.calendar import HebrewCalendarService


# Use a file-based SQLite DB to avoid :memory: multiple-connection issues
# with SQLAlchemy + aiosqlite (each new connection would see an empty DB).
TEST_DATABASE_URL = "sqlite+aiosqlite:///./test.db"

# Dates inside Hebrew year 5785 (2024-10-03 .. 2025-09-22)
YEAR_5785_DATE = date(2025, 1, 15)
YEAR_5784_DATE = date(2024, 1, 15)


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
        os.remove("./test.db")
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


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database session override."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def calendar() -> HebrewCalendarService:
    return HebrewCalendarService()


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a test user."""
    user = User(
        email="testuser@example.com",
        name="Test User",
        password_hash=get_password_hash("TestPass123"),
        is_active=True,
    )
    db_session.add(user)
    await db_session.flush()
    return user


@pytest_asyncio.fixture
async def test_user_token(test_user: User) -> str:
    """Create an access token for the test user."""
    return create_access_token(subject=test_user.id)


@pytest_asyncio.fixture
async def auth_headers(test_user_token: str) -> dict:
    """Create authorization headers."""
    return {"Authorization": f"Bearer {test_user_token}"}


@pytest_asyncio.fixture
async def cash_method(db_session: AsyncSession) -> DonationMethod:
    method = DonationMethod(name="Cash", type=DonationMethodType.CASH, is_active=True)
    db_session.add(method)
    await db_session.flush()
    return method


@pytest_asyncio.fixture
async def standing_order_method(db_session: AsyncSession) -> DonationMethod:
    method = DonationMethod(
        name="Bank standing order",
        type=DonationMethodType.STANDING_ORDER,
        standing_order_kind=StandingOrderKind.BANK,
        is_active=True,
    )
    db_session.add(method)
    await db_session.flush()
    return method


@pytest_asyncio.fixture
async def test_campaign(db_session: AsyncSession) -> Campaign:
    campaign = Campaign(name="Annual Dinner", invited_donor_ids=[], is_active=True)
    db_session.add(campaign)
    await db_session.flush()
    return campaign


@pytest.fixture
def make_donor(db_session: AsyncSession):
    """Factory creating donors: await make_donor("Cohen", is_anash=True)."""
    async def _make_donor(last_name: str, first_name: str = "", **kwargs) -> Donor:
        donor = Donor(first_name=first_name, last_name=last_name, **kwargs)
        db_session.add(donor)
        await db_session.flush()
        return donor
    return _make_donor


@pytest.fixture
def make_donation(db_session: AsyncSession):
    """Factory creating donations (one-time ILS by default)."""
    async def _make_donation(
        donor: Donor,
        amount,
        donation_date: date = YEAR_5785_DATE,
        currency: str = "ILS",
        donation_type: DonationType = DonationType.ONE_TIME,
        method: DonationMethod = None,
        campaign: Campaign = None,
        **kwargs
    ) -> Donation:
        donation = Donation(
            donor_id=donor.id,
            amount=Decimal(str(amount)),
            currency=currency,
            donation_date=donation_date,
            donation_type=donation_type,
            donation_method_id=method.id if method else None,
            campaign_id=campaign.id if campaign else None,
            **kwargs
        )
        db_session.add(donation)
        await db_session.flush()
        return donation
    return _make_donation


@pytest.fixture
def make_payment(db_session: AsyncSession):
    """Factory creating ledger payments."""
    async def _make_payment(
        donation: Donation,
        amount,
        payment_type: str = "commitment",
        payment_date: date = YEAR_5785_DATE,
        **kwargs
    ) -> Payment:
        payment = Payment(
            donation_id=donation.id,
            amount=Decimal(str(amount)),
            payment_date=payment_date,
            type=payment_type,
            **kwargs
        )
        db_session.add(payment)
        await db_session.flush()
        return payment
    return _make_payment
