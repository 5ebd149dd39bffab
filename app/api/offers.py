import uuid
from decimal import Decimal

from fastapi import APIRouter, HTTPException, Query, status

from app.dependencies import Config, DBSession
from app.models.offer import Offer, OfferStatus
from app.repositories.offer import OfferRepository
from app.repositories.offer_snapshot import OfferSnapshotRepository
from app.schemas.common import Envelope, ListEnvelope
from app.schemas.offer import (
    OfferCreate,
    OfferDetail,
    OfferOut,
    OfferStatusUpdate,
    OfferUpdate,
    ValuedOfferOut,
)
from app.schemas.snapshot import SnapshotOut
from app.services.offer_listing import list_valued_offers
from app.valuation.engine import value_offer
from app.valuation.filters import OfferFilters, ValuedOffer
from app.valuation.rates import get_bulk_valuations

router = APIRouter()


async def _get_offer_or_404(db: DBSession, offer_id: uuid.UUID) -> Offer:
    offer = await OfferRepository(db).find_by_id(offer_id)
    if offer is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Offer not found")
    return offer


@router.get("/offers", response_model=ListEnvelope[ValuedOfferOut])
async def list_offers(
    db: DBSession,
    config: Config,
    issuer: str | None = Query(default=None),
    currency: str | None = Query(default=None),
    min_bonus: int | None = Query(default=None, alias="minBonus", ge=0),
    max_spend: Decimal | None = Query(default=None, alias="maxSpend", ge=0),
    offer_status: OfferStatus | None = Query(default=None, alias="status"),
    first_year_waived: bool | None = Query(default=None, alias="firstYearWaived"),
) -> ListEnvelope[ValuedOfferOut]:
    """
    List offers with their calculated value, highest net value first.

    All filters combine with AND. Only ACTIVE offers are returned unless
    ``status`` is given; non-active offers carry no ``calculatedValue``.
    """
    filters = OfferFilters(
        issuer_slug=issuer,
        currency_code=currency,
        min_bonus=min_bonus,
        max_spend=max_spend,
        status=offer_status,
        first_year_waived=first_year_waived,
    )
    valued = await list_valued_offers(db, filters, config.valuation.default_cents_per_point)
    data = [ValuedOfferOut.from_valued(item) for item in valued]
    return ListEnvelope(data=data, count=len(data))


@router.get("/offers/{offer_id}", response_model=Envelope[OfferDetail])
async def get_offer(offer_id: uuid.UUID, db: DBSession, config: Config) -> Envelope[OfferDetail]:
    """Get one offer with its calculated value and latest snapshot."""
    offer = await _get_offer_or_404(db, offer_id)

    valuation = None
    if offer.is_active:
        rates = await get_bulk_valuations(db)
        valuation = value_offer(offer, rates, config.valuation.default_cents_per_point)

    detail = OfferDetail.from_valued(ValuedOffer(offer=offer, valuation=valuation))
    latest = await OfferSnapshotRepository(db).get_latest(offer.id)
    if latest is not None:
        detail.latest_snapshot = SnapshotOut.model_validate(latest)
    return Envelope(data=detail)


@router.post(
    "/offers", response_model=Envelope[OfferOut], status_code=status.HTTP_201_CREATED
)
async def create_offer(data: OfferCreate, db: DBSession) -> Envelope[OfferOut]:
    """Create an offer for an existing card product (409 if the product is unknown)."""
    offer = await OfferRepository(db).create(data)
    return Envelope(data=OfferOut.model_validate(offer))


@router.patch("/offers/{offer_id}", response_model=Envelope[OfferOut])
async def update_offer(offer_id: uuid.UUID, data: OfferUpdate, db: DBSession) -> Envelope[OfferOut]:
    offer = await _get_offer_or_404(db, offer_id)
    offer = await OfferRepository(db).update(offer, data)
    return Envelope(data=OfferOut.model_validate(offer))


@router.patch("/offers/{offer_id}/status", response_model=Envelope[OfferOut])
async def update_offer_status(
    offer_id: uuid.UUID, data: OfferStatusUpdate, db: DBSession
) -> Envelope[OfferOut]:
    """Activate, deactivate or expire an offer."""
    offer = await _get_offer_or_404(db, offer_id)
    offer = await OfferRepository(db).update_status(offer, data.status)
    return Envelope(data=OfferOut.model_validate(offer))


@router.delete("/offers/{offer_id}")
async def delete_offer(offer_id: uuid.UUID, db: DBSession) -> dict[str, bool]:
    """Delete an offer that has never been observed (409 once it has snapshots)."""
    offer = await _get_offer_or_404(db, offer_id)
    await OfferRepository(db).delete(offer)
    return {"success": True}
