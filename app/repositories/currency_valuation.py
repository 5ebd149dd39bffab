from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.currency_valuation import CurrencyValuation
from app.schemas.valuation import CurrencyValuationCreate, CurrencyValuationUpdate
from app.valuation.rates import build_rate_table


class CurrencyValuationRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def find_all(self) -> Sequence[CurrencyValuation]:
        result = await self.db.execute(
            select(CurrencyValuation).order_by(CurrencyValuation.currency_code)
        )
        return result.scalars().all()

    async def find_by_currency_code(self, currency_code: str) -> CurrencyValuation | None:
        result = await self.db.execute(
            select(CurrencyValuation).where(CurrencyValuation.currency_code == currency_code)
        )
        return result.scalar_one_or_none()

    async def create(self, data: CurrencyValuationCreate) -> CurrencyValuation:
        valuation = CurrencyValuation(**data.model_dump())
        self.db.add(valuation)
        await self.db.flush()
        return valuation

    async def update(
        self, valuation: CurrencyValuation, data: CurrencyValuationUpdate
    ) -> CurrencyValuation:
        fields = data.model_dump(exclude_unset=True)
        if fields.get("cents_per_point") is None:
            fields.pop("cents_per_point", None)
        for key, value in fields.items():
            setattr(valuation, key, value)
        await self.db.flush()
        return valuation

    async def get_bulk_valuations(self) -> dict[str, float]:
        """Currency code to cents-per-point, ordered by code."""
        return build_rate_table(await self.find_all())
