from fastapi import APIRouter, HTTPException, status

from app.dependencies import DBSession
from app.repositories.currency_valuation import CurrencyValuationRepository
from app.schemas.common import Envelope, ListEnvelope
from app.schemas.valuation import (
    CurrencyValuationCreate,
    CurrencyValuationOut,
    CurrencyValuationUpdate,
)

router = APIRouter()


@router.get("/valuations", response_model=ListEnvelope[CurrencyValuationOut])
async def list_valuations(db: DBSession) -> ListEnvelope[CurrencyValuationOut]:
    """All currency valuations ordered by currency code."""
    valuations = await CurrencyValuationRepository(db).find_all()
    data = [CurrencyValuationOut.model_validate(v) for v in valuations]
    return ListEnvelope(data=data, count=len(data))


@router.get("/valuations/bulk", response_model=Envelope[dict[str, float]])
async def bulk_valuations(db: DBSession) -> Envelope[dict[str, float]]:
    """
    Currency code to cents-per-point map, ordered by code.

    Codes not in the map are valued at the configured default rate.
    """
    return Envelope(data=await CurrencyValuationRepository(db).get_bulk_valuations())


@router.get("/valuations/{currency_code}", response_model=Envelope[CurrencyValuationOut])
async def get_valuation(currency_code: str, db: DBSession) -> Envelope[CurrencyValuationOut]:
    valuation = await CurrencyValuationRepository(db).find_by_currency_code(currency_code)
    if valuation is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Valuation not found")
    return Envelope(data=CurrencyValuationOut.model_validate(valuation))


@router.post(
    "/valuations",
    response_model=Envelope[CurrencyValuationOut],
    status_code=status.HTTP_201_CREATED,
)
async def create_valuation(
    data: CurrencyValuationCreate, db: DBSession
) -> Envelope[CurrencyValuationOut]:
    repo = CurrencyValuationRepository(db)
    if await repo.find_by_currency_code(data.currency_code) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Valuation already exists"
        )

    valuation = await repo.create(data)
    return Envelope(data=CurrencyValuationOut.model_validate(valuation))


@router.patch("/valuations/{currency_code}", response_model=Envelope[CurrencyValuationOut])
async def update_valuation(
    currency_code: str, data: CurrencyValuationUpdate, db: DBSession
) -> Envelope[CurrencyValuationOut]:
    repo = CurrencyValuationRepository(db)
    valuation = await repo.find_by_currency_code(currency_code)
    if valuation is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Valuation not found")

    valuation = await repo.update(valuation, data)
    return Envelope(data=CurrencyValuationOut.model_validate(valuation))
