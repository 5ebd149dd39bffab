from fastapi import APIRouter, HTTPException, status

from app.dependencies import DBSession
from app.models.card_product import CardProduct
from app.repositories.card_product import CardProductRepository
from app.schemas.common import Envelope, ListEnvelope
from app.schemas.product import (
    CardProductCreate,
    CardProductDetail,
    CardProductOut,
    CardProductUpdate,
)

router = APIRouter()


async def _get_product_or_404(db: DBSession, slug: str) -> CardProduct:
    product = await CardProductRepository(db).find_by_slug(slug)
    if product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Card product not found")
    return product


def _to_detail(product: CardProduct) -> CardProductDetail:
    detail = CardProductDetail.model_validate(product)
    detail.offer_count = len(detail.offers)
    return detail


@router.get("/products", response_model=ListEnvelope[CardProductOut])
async def list_products(db: DBSession) -> ListEnvelope[CardProductOut]:
    """All card products by name with issuer and offer count."""
    rows = await CardProductRepository(db).find_all()
    data = []
    for product, count in rows:
        out = CardProductOut.model_validate(product)
        out.offer_count = count
        data.append(out)
    return ListEnvelope(data=data, count=len(data))


@router.get("/products/{slug}", response_model=Envelope[CardProductDetail])
async def get_product(slug: str, db: DBSession) -> Envelope[CardProductDetail]:
    """Card product with its issuer and active offers."""
    product = await _get_product_or_404(db, slug)
    return Envelope(data=_to_detail(product))


@router.post(
    "/products", response_model=Envelope[CardProductOut], status_code=status.HTTP_201_CREATED
)
async def create_product(data: CardProductCreate, db: DBSession) -> Envelope[CardProductOut]:
    """Create a product under an existing issuer (409 if the issuer is unknown)."""
    repo = CardProductRepository(db)
    if await repo.find_by_slug(data.slug) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Card product already exists"
        )

    product = await repo.create(data)
    return Envelope(data=CardProductOut.model_validate(product))


@router.patch("/products/{slug}", response_model=Envelope[CardProductDetail])
async def update_product(
    slug: str, data: CardProductUpdate, db: DBSession
) -> Envelope[CardProductDetail]:
    product = await _get_product_or_404(db, slug)
    product = await CardProductRepository(db).update(product, data)
    return Envelope(data=_to_detail(product))


@router.delete("/products/{slug}")
async def delete_product(slug: str, db: DBSession) -> dict[str, bool]:
    """Delete a product with no offers (409 otherwise)."""
    product = await _get_product_or_404(db, slug)
    await CardProductRepository(db).delete(product)
    return {"success": True}
