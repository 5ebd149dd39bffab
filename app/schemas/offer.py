import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Self

from pydantic import Field

from app.models.offer import OfferStatus
from app.schemas.common import CamelModel, Money
from app.schemas.product import CardProductSummary
from app.schemas.snapshot import SnapshotOut

if TYPE_CHECKING:
    from app.valuation.filters import ValuedOffer


class OfferCreate(CamelModel):
    product_slug: str
    headline: str = Field(min_length=1, max_length=500)
    bonus_points: int = Field(ge=0)
    min_spend_amount: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    min_spend_window_days: int = Field(gt=0)
    annual_fee: Decimal = Field(default=Decimal(0), ge=0, max_digits=12, decimal_places=2)
    first_year_waived: bool = False
    statement_credits: Decimal = Field(
        default=Decimal(0), ge=0, max_digits=12, decimal_places=2
    )
    landing_url: str = Field(max_length=2048)
    source_type: str = Field(default="PUBLIC", max_length=50)
    geo: str = Field(default="US", max_length=10)
    status: OfferStatus = OfferStatus.ACTIVE
    last_verified_at: datetime | None = None
    published_at: datetime | None = None


class OfferUpdate(CamelModel):
    headline: str | None = Field(default=None, min_length=1, max_length=500)
    bonus_points: int | None = Field(default=None, ge=0)
    min_spend_amount: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    min_spend_window_days: int | None = Field(default=None, gt=0)
    annual_fee: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    first_year_waived: bool | None = None
    statement_credits: Decimal | None = Field(
        default=None, ge=0, max_digits=12, decimal_places=2
    )
    landing_url: str | None = Field(default=None, max_length=2048)
    source_type: str | None = Field(default=None, max_length=50)
    geo: str | None = Field(default=None, max_length=10)
    last_verified_at: datetime | None = None
    published_at: datetime | None = None


class OfferStatusUpdate(CamelModel):
    status: OfferStatus


class CalculatedValue(CamelModel):
    bonus_value: int
    net_value: int
    cents_per_point: Money


class OfferOut(CamelModel):
    id: uuid.UUID
    headline: str
    bonus_points: int
    min_spend_amount: Money
    min_spend_window_days: int
    annual_fee: Money
    first_year_waived: bool
    statement_credits: Money
    landing_url: str
    source_type: str
    geo: str
    status: OfferStatus
    last_verified_at: datetime
    published_at: datetime | None = None
    product: CardProductSummary


class ValuedOfferOut(OfferOut):
    """Offer with its valuation; ``calculatedValue`` is null for non-active offers."""

    calculated_value: CalculatedValue | None = None

    @classmethod
    def from_valued(cls, item: "ValuedOffer") -> Self:
        out = cls.model_validate(item.offer)
        if item.valuation is not None:
            out.calculated_value = CalculatedValue(
                bonus_value=item.valuation.bonus_value,
                net_value=item.valuation.net_value,
                cents_per_point=item.valuation.cents_per_point,
            )
        return out


class OfferDetail(ValuedOfferOut):
    latest_snapshot: SnapshotOut | None = None
