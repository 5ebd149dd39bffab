import uuid

from pydantic import Field

from app.schemas.common import CamelModel


class IssuerCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    slug: str = Field(min_length=1, max_length=255, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    website: str = Field(max_length=2048)


class IssuerUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    website: str | None = Field(default=None, max_length=2048)


class IssuerSummary(CamelModel):
    """Issuer reference embedded in product and offer payloads."""

    name: str
    slug: str


class IssuerOut(CamelModel):
    id: uuid.UUID
    name: str
    slug: str
    website: str
    product_count: int = 0


class IssuerProductOut(CamelModel):
    name: str
    slug: str
    currency: str
    currency_code: str
    active_offer_count: int = 0


class IssuerDetail(IssuerOut):
    """Issuer with its card products and how many ACTIVE offers each has."""

    products: list[IssuerProductOut] = Field(default_factory=list)
