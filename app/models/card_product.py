from __future__ import annotations

import enum
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Enum, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.issuer import Issuer
    from app.models.offer import Offer


class ProductType(str, enum.Enum):
    """Who a card product is issued to."""

    PERSONAL = "PERSONAL"
    BUSINESS = "BUSINESS"


class CardProduct(Base, TimestampMixin):
    """A specific card (e.g. Sapphire Preferred) owned by one issuer."""

    __tablename__ = "card_products"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    issuer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("issuers.id", ondelete="RESTRICT"), index=True
    )
    name: Mapped[str] = mapped_column(String(255))
    slug: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    network: Mapped[str] = mapped_column(String(50))
    product_type: Mapped[ProductType] = mapped_column(
        Enum(ProductType, values_callable=lambda e: [x.value for x in e], name="producttype"),
        default=ProductType.PERSONAL,
    )
    # Display name of the reward currency, e.g. "Membership Rewards"
    currency: Mapped[str] = mapped_column(String(255))
    # Key into currency_valuations
    currency_code: Mapped[str] = mapped_column(String(20), index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    issuer: Mapped[Issuer] = relationship(back_populates="products", lazy="selectin")
    offers: Mapped[list[Offer]] = relationship(back_populates="product", passive_deletes="all")

    def __repr__(self) -> str:
        return f"<CardProduct {self.slug}>"
