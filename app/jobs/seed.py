"""
Sample data seed job.

Run with: python -m app.jobs.seed

Loads currency valuations, issuers, card products, three sample offers
and their historical snapshots. Safe to run repeatedly: existing rows
are left untouched and snapshots already recorded are skipped.
"""

import asyncio
import uuid
from dataclasses import asdict, dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.database import Database
from app.core.datetime_utils import utc_now
from app.core.logging import get_logger, setup_logging
from app.models.card_product import ProductType
from app.repositories.card_product import CardProductRepository
from app.repositories.currency_valuation import CurrencyValuationRepository
from app.repositories.issuer import IssuerRepository
from app.repositories.offer import OfferRepository
from app.repositories.offer_snapshot import OfferSnapshotRepository
from app.schemas.issuer import IssuerCreate
from app.schemas.offer import OfferCreate
from app.schemas.product import CardProductCreate
from app.schemas.valuation import CurrencyValuationCreate
from app.valuation.snapshots import ObservedTerms, record_snapshot

logger = get_logger(__name__)

SEED_NAMESPACE = uuid.UUID("6f1c8f5e-2b1e-4d4c-9a57-0c4b8d0e6a11")

VALUATIONS = [
    ("AA", "1.4", "American Airlines AAdvantage miles"),
    ("UA", "1.2", "United MileagePlus miles"),
    ("DL", "1.1", "Delta SkyMiles"),
    ("MR", "1.7", "American Express Membership Rewards"),
    ("UR", "1.6", "Chase Ultimate Rewards"),
    ("TYP", "1.5", "Citi ThankYou Points"),
]

ISSUERS = [
    ("Citi", "citi", "https://www.citi.com/credit-cards"),
    ("American Express", "american-express", "https://www.americanexpress.com"),
    ("Chase", "chase", "https://www.chase.com/personal/credit-cards"),
    ("Bank of America", "bank-of-america", "https://www.bankofamerica.com/credit-cards"),
    ("Capital One", "capital-one", "https://www.capitalone.com/credit-cards"),
    ("U.S. Bank", "us-bank", "https://www.usbank.com/credit-cards.html"),
]

PRODUCTS = [
    CardProductCreate(
        issuer_slug="citi",
        name="Citi® / AAdvantage® Platinum Select®",
        slug="citi-aadvantage-platinum-select",
        network="MASTERCARD",
        product_type=ProductType.PERSONAL,
        currency="AA miles",
        currency_code="AA",
        description="Earn American Airlines AAdvantage miles with this travel-focused card",
    ),
    CardProductCreate(
        issuer_slug="american-express",
        name="American Express® Gold Card",
        slug="amex-gold-card",
        network="AMEX",
        product_type=ProductType.PERSONAL,
        currency="Membership Rewards",
        currency_code="MR",
        description="Earn Membership Rewards points on dining and groceries",
    ),
    CardProductCreate(
        issuer_slug="chase",
        name="Chase Sapphire Preferred®",
        slug="chase-sapphire-preferred",
        network="VISA",
        product_type=ProductType.PERSONAL,
        currency="Ultimate Rewards",
        currency_code="UR",
        description="Popular travel rewards card with transferable points",
    ),
    CardProductCreate(
        issuer_slug="capital-one",
        name="Capital One Venture Rewards",
        slug="capital-one-venture",
        network="VISA",
        product_type=ProductType.PERSONAL,
        currency="Capital One Miles",
        # Valued like Ultimate Rewards
        currency_code="UR",
        description="Earn unlimited 2X miles on every purchase",
    ),
]

CITI_AA_URL = "https://www.citi.com/credit-cards/citi-aadvantage-platinum-select-card"
AMEX_GOLD_URL = "https://www.americanexpress.com/us/credit-cards/card/gold-card"

# Keyed by a stable name so reruns find the same offer
OFFERS = {
    "seed-citi-aa-1": OfferCreate(
        product_slug="citi-aadvantage-platinum-select",
        headline="Earn 80,000 AAdvantage bonus miles",
        bonus_points=80000,
        min_spend_amount=Decimal("6000"),
        min_spend_window_days=90,
        annual_fee=Decimal("99"),
        first_year_waived=True,
        statement_credits=Decimal("0"),
        landing_url=CITI_AA_URL,
    ),
    "seed-amex-gold-1": OfferCreate(
        product_slug="amex-gold-card",
        headline="Earn 90,000 Membership Rewards points",
        bonus_points=90000,
        min_spend_amount=Decimal("6000"),
        min_spend_window_days=180,
        annual_fee=Decimal("325"),
        first_year_waived=False,
        # Monthly dining and Uber credits
        statement_credits=Decimal("120"),
        landing_url=AMEX_GOLD_URL,
    ),
    "seed-chase-sapphire-1": OfferCreate(
        product_slug="chase-sapphire-preferred",
        headline="Earn 75,000 bonus points",
        bonus_points=75000,
        min_spend_amount=Decimal("4000"),
        min_spend_window_days=90,
        annual_fee=Decimal("95"),
        first_year_waived=False,
        statement_credits=Decimal("0"),
        landing_url="https://www.chase.com/personal/credit-cards/sapphire/preferred",
    ),
}


def _terms(bonus: int, spend: int, window: int, fee: int, credits: int, url: str) -> ObservedTerms:
    return ObservedTerms(
        bonus_points=bonus,
        min_spend_amount=Decimal(spend),
        min_spend_window_days=window,
        annual_fee=Decimal(fee),
        statement_credits=Decimal(credits),
        landing_url=url,
    )


HISTORY: dict[str, list[tuple[datetime, ObservedTerms]]] = {
    "seed-citi-aa-1": [
        (datetime(2024, 10, 1), _terms(65000, 4000, 90, 99, 0, CITI_AA_URL)),
        (datetime(2024, 10, 27), _terms(75000, 5000, 90, 99, 0, CITI_AA_URL)),
        (datetime(2024, 11, 3), _terms(80000, 6000, 90, 99, 0, CITI_AA_URL)),
    ],
    "seed-amex-gold-1": [
        (datetime(2024, 9, 15), _terms(60000, 6000, 180, 325, 120, AMEX_GOLD_URL)),
        (datetime(2024, 10, 15), _terms(90000, 6000, 180, 325, 120, AMEX_GOLD_URL)),
    ],
}


def seed_offer_id(key: str) -> uuid.UUID:
    """Stable id for a seeded offer."""
    return uuid.uuid5(SEED_NAMESPACE, key)


@dataclass
class SeedStats:
    valuations: int = 0
    issuers: int = 0
    products: int = 0
    offers: int = 0
    snapshots: int = 0


async def seed(db: AsyncSession) -> SeedStats:
    """Insert any missing sample rows and return how many were created."""
    stats = SeedStats()

    valuations = CurrencyValuationRepository(db)
    for code, cents, notes in VALUATIONS:
        if await valuations.find_by_currency_code(code) is None:
            await valuations.create(
                CurrencyValuationCreate(
                    currency_code=code, cents_per_point=Decimal(cents), notes=notes
                )
            )
            stats.valuations += 1

    issuers = IssuerRepository(db)
    for name, slug, website in ISSUERS:
        if await issuers.find_by_slug(slug) is None:
            await issuers.create(IssuerCreate(name=name, slug=slug, website=website))
            stats.issuers += 1

    products = CardProductRepository(db)
    for product in PRODUCTS:
        if await products.find_by_slug(product.slug) is None:
            await products.create(product)
            stats.products += 1

    offers = OfferRepository(db)
    now = utc_now()
    for key, data in OFFERS.items():
        offer_id = seed_offer_id(key)
        if await offers.find_by_id(offer_id) is None:
            await offers.create(
                data.model_copy(update={"last_verified_at": now, "published_at": now}),
                offer_id=offer_id,
            )
            stats.offers += 1

    snapshots = OfferSnapshotRepository(db)
    for key, history in HISTORY.items():
        offer_id = seed_offer_id(key)
        latest = await snapshots.get_latest(offer_id)
        for captured_at, observed in history:
            if latest is not None and captured_at <= latest.captured_at:
                continue
            await record_snapshot(db, offer_id, observed, captured_at=captured_at)
            stats.snapshots += 1

    return stats


async def main() -> None:
    """Run the seed job against the configured database."""
    setup_logging()
    logger.info("seed_job_started")

    database = Database.from_settings(get_settings())
    await database.open()
    try:
        async with database.session() as db:
            stats = await seed(db)
        logger.bind(**asdict(stats)).info("seed_job_completed")
    except Exception as e:
        logger.bind(error=str(e)).error("seed_job_failed")
        raise
    finally:
        await database.close()


if __name__ == "__main__":
    asyncio.run(main())
