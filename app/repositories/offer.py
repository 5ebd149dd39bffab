import uuid
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.datetime_utils import to_naive_utc
from app.core.errors import ReferentialIntegrityError
from app.models.card_product import CardProduct
from app.models.offer import Offer, OfferStatus
from app.models.offer_snapshot import OfferSnapshot
from app.schemas.offer import OfferCreate, OfferUpdate
from app.valuation.filters import OfferFilters


def _normalize(fields: dict[str, Any]) -> dict[str, Any]:
    # Stored timestamps are naive UTC
    return {k: to_naive_utc(v) if isinstance(v, datetime) else v for k, v in fields.items()}


class OfferRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def find_active(self, filters: OfferFilters | None = None) -> Sequence[Offer]:
        """
        Offers matching the filters (ACTIVE unless a status is given).

        Product and issuer are loaded. Ordered by last_verified_at desc,
        then id, which is the tie-break kept after net-value sorting.
        """
        filters = filters or OfferFilters()
        stmt = (
            select(Offer)
            .join(Offer.product)
            .join(CardProduct.issuer)
            .order_by(Offer.last_verified_at.desc(), Offer.id)
        )
        result = await self.db.execute(filters.apply(stmt))
        return result.scalars().all()

    async def find_by_id(self, offer_id: uuid.UUID) -> Offer | None:
        return await self.db.get(Offer, offer_id)

    async def find_by_product_id(self, product_id: uuid.UUID) -> Sequence[Offer]:
        result = await self.db.execute(
            select(Offer).where(Offer.product_id == product_id).order_by(Offer.created_at.desc())
        )
        return result.scalars().all()

    async def count(self) -> int:
        result = await self.db.execute(select(func.count(Offer.id)))
        return result.scalar_one()

    async def create(self, data: OfferCreate, offer_id: uuid.UUID | None = None) -> Offer:
        fields = _normalize(data.model_dump(exclude={"product_slug"}, exclude_none=True))
        product = await self._get_product(data.product_slug)
        offer = Offer(product=product, **fields)
        if offer_id is not None:
            offer.id = offer_id
        self.db.add(offer)
        await self.db.flush()
        return offer

    async def update(self, offer: Offer, data: OfferUpdate) -> Offer:
        fields = _normalize(data.model_dump(exclude_unset=True, exclude_none=True))
        for key, value in fields.items():
            setattr(offer, key, value)
        await self.db.flush()
        return offer

    async def update_status(self, offer: Offer, status: OfferStatus) -> Offer:
        offer.status = status
        await self.db.flush()
        return offer

    async def delete(self, offer: Offer) -> None:
        """Delete an offer with no recorded history.

        Offers with snapshots keep their audit trail; expire them instead.
        """
        result = await self.db.execute(
            select(func.count(OfferSnapshot.id)).where(OfferSnapshot.offer_id == offer.id)
        )
        if result.scalar_one():
            raise ReferentialIntegrityError(
                f"Offer {offer.id} has recorded snapshots; set its status to EXPIRED instead"
            )
        await self.db.delete(offer)
        await self.db.flush()

    async def _get_product(self, slug: str) -> CardProduct:
        result = await self.db.execute(select(CardProduct).where(CardProduct.slug == slug))
        product = result.scalar_one_or_none()
        if product is None:
            raise ReferentialIntegrityError(f"Card product {slug} does not exist")
        return product
