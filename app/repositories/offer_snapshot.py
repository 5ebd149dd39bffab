import uuid
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.datetime_utils import get_cutoff
from app.models.card_product import CardProduct
from app.models.offer import Offer
from app.models.offer_snapshot import OfferSnapshot

DEFAULT_HISTORY_LIMIT = 52  # roughly a year of weekly captures


class OfferSnapshotRepository:
    """Read and append access to offer snapshots. There is no update or delete."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create(self, snapshot: OfferSnapshot) -> OfferSnapshot:
        self.db.add(snapshot)
        await self.db.flush()
        return snapshot

    async def find_by_offer_id(
        self, offer_id: uuid.UUID, limit: int = DEFAULT_HISTORY_LIMIT
    ) -> Sequence[OfferSnapshot]:
        """Snapshot history for an offer, most recent first."""
        result = await self.db.execute(
            select(OfferSnapshot)
            .where(OfferSnapshot.offer_id == offer_id)
            .order_by(OfferSnapshot.captured_at.desc())
            .limit(limit)
        )
        return result.scalars().all()

    async def get_latest(self, offer_id: uuid.UUID) -> OfferSnapshot | None:
        result = await self.db.execute(
            select(OfferSnapshot)
            .where(OfferSnapshot.offer_id == offer_id)
            .order_by(OfferSnapshot.captured_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_weekly_changes(self, days_back: int = 7) -> Sequence[OfferSnapshot]:
        """
        Snapshots with a diff captured within the trailing window.

        Ordered most recent first, with offer, product and issuer loaded
        for display and digest building.
        """
        since = get_cutoff(days=days_back)
        result = await self.db.execute(
            select(OfferSnapshot)
            .options(
                selectinload(OfferSnapshot.offer)
                .selectinload(Offer.product)
                .selectinload(CardProduct.issuer)
            )
            .where(
                OfferSnapshot.captured_at >= since,
                OfferSnapshot.diff_summary.is_not(None),
            )
            .order_by(OfferSnapshot.captured_at.desc())
        )
        return result.scalars().all()
