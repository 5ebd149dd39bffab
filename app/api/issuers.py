from fastapi import APIRouter, HTTPException, status

from app.dependencies import DBSession
from app.models.issuer import Issuer
from app.repositories.issuer import IssuerRepository
from app.schemas.common import Envelope, ListEnvelope
from app.schemas.issuer import (
    IssuerCreate,
    IssuerDetail,
    IssuerOut,
    IssuerProductOut,
    IssuerUpdate,
)

router = APIRouter()


async def _get_issuer_or_404(db: DBSession, slug: str) -> Issuer:
    issuer = await IssuerRepository(db).find_by_slug(slug)
    if issuer is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Issuer not found")
    return issuer


def _to_detail(issuer: Issuer) -> IssuerDetail:
    products = [
        IssuerProductOut(
            name=p.name,
            slug=p.slug,
            currency=p.currency,
            currency_code=p.currency_code,
            active_offer_count=len(p.offers),
        )
        for p in issuer.products
    ]
    return IssuerDetail(
        id=issuer.id,
        name=issuer.name,
        slug=issuer.slug,
        website=issuer.website,
        product_count=len(products),
        products=products,
    )


@router.get("/issuers", response_model=ListEnvelope[IssuerOut])
async def list_issuers(db: DBSession) -> ListEnvelope[IssuerOut]:
    """All issuers by name with their product counts."""
    rows = await IssuerRepository(db).find_all()
    data = [
        IssuerOut(
            id=issuer.id,
            name=issuer.name,
            slug=issuer.slug,
            website=issuer.website,
            product_count=count,
        )
        for issuer, count in rows
    ]
    return ListEnvelope(data=data, count=len(data))


@router.get("/issuers/{slug}", response_model=Envelope[IssuerDetail])
async def get_issuer(slug: str, db: DBSession) -> Envelope[IssuerDetail]:
    """Issuer with its products and their active offer counts."""
    issuer = await _get_issuer_or_404(db, slug)
    return Envelope(data=_to_detail(issuer))


@router.post(
    "/issuers", response_model=Envelope[IssuerOut], status_code=status.HTTP_201_CREATED
)
async def create_issuer(data: IssuerCreate, db: DBSession) -> Envelope[IssuerOut]:
    repo = IssuerRepository(db)
    if await repo.find_by_slug(data.slug) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Issuer already exists")

    issuer = await repo.create(data)
    return Envelope(
        data=IssuerOut(
            id=issuer.id,
            name=issuer.name,
            slug=issuer.slug,
            website=issuer.website,
            product_count=0,
        )
    )


@router.patch("/issuers/{slug}", response_model=Envelope[IssuerDetail])
async def update_issuer(slug: str, data: IssuerUpdate, db: DBSession) -> Envelope[IssuerDetail]:
    issuer = await _get_issuer_or_404(db, slug)
    issuer = await IssuerRepository(db).update(issuer, data)
    return Envelope(data=_to_detail(issuer))


@router.delete("/issuers/{slug}")
async def delete_issuer(slug: str, db: DBSession) -> dict[str, bool]:
    """Delete an issuer with no products (409 otherwise)."""
    issuer = await _get_issuer_or_404(db, slug)
    await IssuerRepository(db).delete(issuer)
    return {"success": True}
