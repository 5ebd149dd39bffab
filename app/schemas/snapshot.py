import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import Field

from app.schemas.common import CamelModel, Money
from app.schemas.product import CardProductSummary


class SnapshotCreate(CamelModel):
    """An observation of an offer's terms."""

    bonus_points: int = Field(ge=0)
    min_spend_amount: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    min_spend_window_days: int = Field(gt=0)
    annual_fee: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    statement_credits: Decimal = Field(default=Decimal(0), ge=0, max_digits=12, decimal_places=2)
    landing_url: str = Field(max_length=2048)
    expires_on: date | None = None
    captured_at: datetime | None = None


class FieldChangeOut(CamelModel):
    field: str
    old: Any = None
    new: Any = None


class SnapshotOut(CamelModel):
    id: uuid.UUID
    offer_id: uuid.UUID
    captured_at: datetime
    bonus_points: int
    min_spend_amount: Money
    min_spend_window_days: int
    annual_fee: Money
    statement_credits: Money
    expires_on: date | None = None
    landing_url: str
    diff_summary: str | None = None
    changes: list[FieldChangeOut] | None = None


class ChangeOfferOut(CamelModel):
    id: uuid.UUID
    headline: str
    product: CardProductSummary


class ChangeOut(SnapshotOut):
    """Change-feed entry: a snapshot with a diff plus the offer it belongs to."""

    offer: ChangeOfferOut
