"""Valued offer listings: repository results joined with rates and the engine."""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_config
from app.core.logging import get_logger
from app.repositories.offer import OfferRepository
from app.valuation.filters import OfferFilters, ValuedOffer, attach_valuations
from app.valuation.rates import get_bulk_valuations

logger = get_logger(__name__)


async def list_valued_offers(
    db: AsyncSession,
    filters: OfferFilters | None = None,
    default_cents_per_point: Decimal | None = None,
) -> list[ValuedOffer]:
    """
    List offers matching the filters, valued and ordered by net value.

    Args:
        db: Database session
        filters: Offer filters; ACTIVE offers only when omitted
        default_cents_per_point: Rate for currencies with no valuation row.
            Defaults to ``valuation.default_cents_per_point`` from config.

    Returns:
        Valued offers, highest net value first
    """
    filters = filters or OfferFilters()
    if default_cents_per_point is None:
        default_cents_per_point = get_config().valuation.default_cents_per_point

    offers = await OfferRepository(db).find_active(filters)
    rates = await get_bulk_valuations(db)
    valued = attach_valuations(offers, rates, default_cents_per_point)

    missing = sorted(
        {o.product.currency_code for o in offers if o.product.currency_code not in rates}
    )
    logger.bind(
        count=len(valued),
        status=filters.effective_status.value,
        fallback_currencies=missing,
    ).debug("offers_valued")

    return valued
