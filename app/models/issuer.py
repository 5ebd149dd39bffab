from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.card_product import CardProduct


class Issuer(Base, TimestampMixin):
    """A bank or company that issues card products."""

    __tablename__ = "issuers"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255))
    slug: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    website: Mapped[str] = mapped_column(String(2048))

    # Relationships
    products: Mapped[list[CardProduct]] = relationship(
        back_populates="issuer", order_by="CardProduct.name", passive_deletes="all"
    )

    def __repr__(self) -> str:
        return f"<Issuer {self.slug}>"
