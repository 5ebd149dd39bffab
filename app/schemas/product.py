import uuid

from pydantic import Field

from app.models.card_product import ProductType
from app.schemas.common import CamelModel, Money
from app.schemas.issuer import IssuerSummary


class CardProductCreate(CamelModel):
    issuer_slug: str
    name: str = Field(min_length=1, max_length=255)
    slug: str = Field(min_length=1, max_length=255, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    network: str = Field(max_length=50)
    product_type: ProductType = ProductType.PERSONAL
    currency: str = Field(max_length=255)
    currency_code: str = Field(min_length=1, max_length=20)
    description: str | None = None


class CardProductUpdate(CamelModel):
    issuer_slug: str | None = None
    name: str | None = Field(default=None, min_length=1, max_length=255)
    network: str | None = Field(default=None, max_length=50)
    product_type: ProductType | None = None
    currency: str | None = Field(default=None, max_length=255)
    currency_code: str | None = Field(default=None, min_length=1, max_length=20)
    description: str | None = None


class CardProductSummary(CamelModel):
    """Product reference embedded in offer payloads."""

    name: str
    slug: str
    currency: str
    currency_code: str
    issuer: IssuerSummary


class CardProductOut(CamelModel):
    id: uuid.UUID
    name: str
    slug: str
    network: str
    product_type: ProductType
    currency: str
    currency_code: str
    description: str | None = None
    issuer: IssuerSummary
    offer_count: int = 0


class ProductOfferOut(CamelModel):
    id: uuid.UUID
    headline: str
    bonus_points: int
    min_spend_amount: Money
    min_spend_window_days: int
    annual_fee: Money
    first_year_waived: bool


class CardProductDetail(CardProductOut):
    """Product with its ACTIVE offers."""

    offers: list[ProductOfferOut] = Field(default_factory=list)
