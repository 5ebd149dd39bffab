from __future__ import annotations

import enum
import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.datetime_utils import utc_now
from app.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.card_product import CardProduct
    from app.models.offer_snapshot import OfferSnapshot


class OfferStatus(str, enum.Enum):
    """Lifecycle status of a sign-up offer."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    EXPIRED = "EXPIRED"


class Offer(Base, TimestampMixin):
    """A sign-up bonus offer for a card product."""

    __tablename__ = "offers"
    __table_args__ = (
        CheckConstraint("bonus_points >= 0", name="ck_offers_bonus_points_non_negative"),
        CheckConstraint("min_spend_amount >= 0", name="ck_offers_min_spend_non_negative"),
        CheckConstraint("min_spend_window_days > 0", name="ck_offers_spend_window_positive"),
        CheckConstraint("annual_fee >= 0", name="ck_offers_annual_fee_non_negative"),
        CheckConstraint(
            "statement_credits >= 0", name="ck_offers_statement_credits_non_negative"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("card_products.id", ondelete="RESTRICT"), index=True
    )
    headline: Mapped[str] = mapped_column(String(500))
    bonus_points: Mapped[int] = mapped_column(Integer, index=True)
    min_spend_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    min_spend_window_days: Mapped[int] = mapped_column(Integer)
    annual_fee: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal(0))
    first_year_waived: Mapped[bool] = mapped_column(Boolean, default=False)
    statement_credits: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal(0))
    landing_url: Mapped[str] = mapped_column(String(2048))
    source_type: Mapped[str] = mapped_column(String(50), default="PUBLIC")
    geo: Mapped[str] = mapped_column(String(10), default="US")
    status: Mapped[OfferStatus] = mapped_column(
        Enum(OfferStatus, values_callable=lambda e: [x.value for x in e], name="offerstatus"),
        default=OfferStatus.ACTIVE,
        index=True,
    )
    last_verified_at: Mapped[datetime] = mapped_column(default=utc_now, index=True)
    published_at: Mapped[datetime | None] = mapped_column(nullable=True)

    # Relationships
    product: Mapped[CardProduct] = relationship(back_populates="offers", lazy="selectin")
    snapshots: Mapped[list[OfferSnapshot]] = relationship(
        back_populates="offer",
        order_by="OfferSnapshot.captured_at.desc()",
        passive_deletes="all",
    )

    def __repr__(self) -> str:
        return f"<Offer {self.id}: {self.headline[:50]}>"

    @property
    def is_active(self) -> bool:
        return self.status == OfferStatus.ACTIVE
