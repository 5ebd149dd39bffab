"""
Pytest configuration and fixtures for Card Bonus Tracker tests.

Provides:
- Async test database with SQLite
- Test client for API testing
- Factory fixtures for creating test data
"""

import uuid
from collections.abc import AsyncGenerator
from datetime import datetime
from decimal import Decimal

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import StaticPool
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.config import Settings, get_settings
from app.core.database import get_db
from app.core.datetime_utils import utc_now
from app.core.security import generate_unsubscribe_token, generate_verification_token
from app.main import app
from app.models import Base
from app.models.card_product import CardProduct, ProductType
from app.models.currency_valuation import CurrencyValuation
from app.models.issuer import Issuer
from app.models.offer import Offer, OfferStatus
from app.models.subscriber import Subscriber, SubscriberPreference

# Test database URL (in-memory SQLite)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# Override settings for testing
class TestSettings(Settings):
    database_url: str = TEST_DATABASE_URL
    debug: bool = True
    base_url: str = "http://localhost:8000"


class UnreachableSession:
    """Stands in for a session whose database has gone away."""

    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, ConnectionRefusedError("connection refused"))

    async def get(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, ConnectionRefusedError("connection refused"))

    async def rollback(self) -> None:
        return None


@pytest_asyncio.fixture
async def db_engine():
    """Create async test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create async database session for tests."""
    session_factory = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client with database override."""
    from app.core.rate_limit import limiter

    async def override_get_db():
        yield db_session

    def override_get_settings():
        return TestSettings()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = override_get_settings

    # Reset rate limiter storage before each test
    limiter.reset()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def offline_client() -> AsyncGenerator[AsyncClient, None]:
    """Test client whose database connection always fails."""

    async def override_get_db():
        yield UnreachableSession()

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ============================================================================
# Factory Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def issuer_factory(db_session: AsyncSession):
    """Factory for creating test issuers."""

    async def _create_issuer(
        name: str = "Chase",
        slug: str | None = None,
        website: str = "https://www.chase.com",
    ) -> Issuer:
        if slug is None:
            slug = f"issuer-{uuid.uuid4().hex[:8]}"

        issuer = Issuer(name=name, slug=slug, website=website, products=[])
        db_session.add(issuer)
        await db_session.flush()
        return issuer

    return _create_issuer


@pytest_asyncio.fixture
async def product_factory(db_session: AsyncSession, issuer_factory):
    """Factory for creating test card products."""

    async def _create_product(
        issuer: Issuer | None = None,
        name: str = "Sapphire Preferred",
        slug: str | None = None,
        currency: str = "Ultimate Rewards",
        currency_code: str = "UR",
        network: str = "VISA",
    ) -> CardProduct:
        if issuer is None:
            issuer = await issuer_factory()
        if slug is None:
            slug = f"card-{uuid.uuid4().hex[:8]}"

        product = CardProduct(
            issuer=issuer,
            name=name,
            slug=slug,
            network=network,
            product_type=ProductType.PERSONAL,
            currency=currency,
            currency_code=currency_code,
        )
        db_session.add(product)
        await db_session.flush()
        return product

    return _create_product


@pytest_asyncio.fixture
async def offer_factory(db_session: AsyncSession, product_factory):
    """Factory for creating test offers."""

    async def _create_offer(
        product: CardProduct | None = None,
        bonus_points: int = 75000,
        min_spend_amount: Decimal | int = 4000,
        min_spend_window_days: int = 90,
        annual_fee: Decimal | int = 95,
        first_year_waived: bool = False,
        statement_credits: Decimal | int = 0,
        status: OfferStatus = OfferStatus.ACTIVE,
        last_verified_at: datetime | None = None,
        headline: str | None = None,
    ) -> Offer:
        if product is None:
            product = await product_factory()

        offer = Offer(
            product=product,
            headline=headline or f"Earn {bonus_points:,} bonus points",
            bonus_points=bonus_points,
            min_spend_amount=Decimal(min_spend_amount),
            min_spend_window_days=min_spend_window_days,
            annual_fee=Decimal(annual_fee),
            first_year_waived=first_year_waived,
            statement_credits=Decimal(statement_credits),
            landing_url="https://example.com/apply",
            status=status,
            last_verified_at=last_verified_at or utc_now(),
        )
        db_session.add(offer)
        await db_session.flush()
        return offer

    return _create_offer


@pytest_asyncio.fixture
async def valuation_factory(db_session: AsyncSession):
    """Factory for creating currency valuations."""

    async def _create_valuation(
        currency_code: str = "UR",
        cents_per_point: Decimal | str = "1.6",
        notes: str | None = None,
    ) -> CurrencyValuation:
        valuation = CurrencyValuation(
            currency_code=currency_code,
            cents_per_point=Decimal(cents_per_point),
            notes=notes,
        )
        db_session.add(valuation)
        await db_session.flush()
        return valuation

    return _create_valuation


@pytest_asyncio.fixture
async def subscriber_factory(db_session: AsyncSession):
    """Factory for creating test subscribers."""

    async def _create_subscriber(
        email: str | None = None,
        verified: bool = True,
        unsubscribed: bool = False,
        preferences: list[dict] | None = None,
    ) -> Subscriber:
        if email is None:
            email = f"test-{uuid.uuid4().hex[:8]}@example.com"

        subscriber = Subscriber(
            email=email,
            email_verified=verified,
            verification_token=None if verified else generate_verification_token(),
            unsubscribe_token=generate_unsubscribe_token(),
            unsubscribed_at=utc_now() if unsubscribed else None,
            preferences=[SubscriberPreference(**p) for p in preferences or []],
        )
        db_session.add(subscriber)
        await db_session.flush()
        return subscriber

    return _create_subscriber
