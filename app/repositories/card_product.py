import uuid
from collections.abc import Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.errors import ReferentialIntegrityError
from app.models.card_product import CardProduct
from app.models.issuer import Issuer
from app.models.offer import Offer, OfferStatus
from app.schemas.product import CardProductCreate, CardProductUpdate


class CardProductRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def find_all(self) -> Sequence[tuple[CardProduct, int]]:
        """All products by name with issuer loaded, each paired with its offer count."""
        result = await self.db.execute(
            select(CardProduct, func.count(Offer.id))
            .outerjoin(Offer, Offer.product_id == CardProduct.id)
            .group_by(CardProduct.id)
            .order_by(CardProduct.name)
        )
        return [(product, count) for product, count in result.all()]

    async def find_by_slug(self, slug: str) -> CardProduct | None:
        """Product with issuer and its ACTIVE offers."""
        result = await self.db.execute(
            select(CardProduct)
            .options(selectinload(CardProduct.offers.and_(Offer.status == OfferStatus.ACTIVE)))
            .where(CardProduct.slug == slug)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def find_by_id(self, product_id: uuid.UUID) -> CardProduct | None:
        return await self.db.get(CardProduct, product_id)

    async def create(self, data: CardProductCreate) -> CardProduct:
        fields = data.model_dump(exclude={"issuer_slug"})
        issuer = await self._get_issuer(data.issuer_slug)
        product = CardProduct(issuer=issuer, **fields)
        self.db.add(product)
        await self.db.flush()
        return product

    async def update(self, product: CardProduct, data: CardProductUpdate) -> CardProduct:
        # description is the only nullable column; other nulls are ignored
        fields = {
            key: value
            for key, value in data.model_dump(exclude_unset=True).items()
            if value is not None or key == "description"
        }
        issuer_slug = fields.pop("issuer_slug", None)
        if issuer_slug is not None:
            issuer = await self._get_issuer(issuer_slug)
            product.issuer = issuer
        for key, value in fields.items():
            setattr(product, key, value)
        await self.db.flush()
        return product

    async def delete(self, product: CardProduct) -> None:
        """Delete a product that owns no offers."""
        result = await self.db.execute(
            select(func.count(Offer.id)).where(Offer.product_id == product.id)
        )
        if result.scalar_one():
            raise ReferentialIntegrityError(f"Card product {product.slug} still has offers")
        await self.db.delete(product)
        await self.db.flush()

    async def _get_issuer(self, slug: str) -> Issuer:
        result = await self.db.execute(select(Issuer).where(Issuer.slug == slug))
        issuer = result.scalar_one_or_none()
        if issuer is None:
            raise ReferentialIntegrityError(f"Issuer {slug} does not exist")
        return issuer
