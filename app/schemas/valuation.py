import uuid
from decimal import Decimal

from pydantic import Field

from app.schemas.common import CamelModel, Money


class CurrencyValuationCreate(CamelModel):
    currency_code: str = Field(min_length=1, max_length=20)
    cents_per_point: Decimal = Field(gt=0, max_digits=8, decimal_places=4)
    notes: str | None = None


class CurrencyValuationUpdate(CamelModel):
    cents_per_point: Decimal | None = Field(default=None, gt=0, max_digits=8, decimal_places=4)
    notes: str | None = None


class CurrencyValuationOut(CamelModel):
    id: uuid.UUID
    currency_code: str
    cents_per_point: Money
    notes: str | None = None
