import uuid
from collections.abc import Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.errors import ReferentialIntegrityError
from app.models.card_product import CardProduct
from app.models.issuer import Issuer
from app.models.offer import Offer, OfferStatus
from app.schemas.issuer import IssuerCreate, IssuerUpdate


class IssuerRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def find_all(self) -> Sequence[tuple[Issuer, int]]:
        """All issuers by name, each paired with its product count."""
        result = await self.db.execute(
            select(Issuer, func.count(CardProduct.id))
            .outerjoin(CardProduct, CardProduct.issuer_id == Issuer.id)
            .group_by(Issuer.id)
            .order_by(Issuer.name)
        )
        return [(issuer, count) for issuer, count in result.all()]

    async def find_by_slug(self, slug: str) -> Issuer | None:
        """Issuer with its products and their ACTIVE offers."""
        result = await self.db.execute(
            select(Issuer)
            .options(
                selectinload(Issuer.products).selectinload(
                    CardProduct.offers.and_(Offer.status == OfferStatus.ACTIVE)
                )
            )
            .where(Issuer.slug == slug)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def find_by_id(self, issuer_id: uuid.UUID) -> Issuer | None:
        return await self.db.get(Issuer, issuer_id)

    async def count(self) -> int:
        result = await self.db.execute(select(func.count(Issuer.id)))
        return result.scalar_one()

    async def create(self, data: IssuerCreate) -> Issuer:
        issuer = Issuer(**data.model_dump())
        self.db.add(issuer)
        await self.db.flush()
        return issuer

    async def update(self, issuer: Issuer, data: IssuerUpdate) -> Issuer:
        for key, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(issuer, key, value)
        await self.db.flush()
        return issuer

    async def delete(self, issuer: Issuer) -> None:
        """Delete an issuer that owns no products."""
        result = await self.db.execute(
            select(func.count(CardProduct.id)).where(CardProduct.issuer_id == issuer.id)
        )
        if result.scalar_one():
            raise ReferentialIntegrityError(
                f"Issuer {issuer.slug} still has card products"
            )
        await self.db.delete(issuer)
        await self.db.flush()
