"""Append-only history of observed offer terms."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, Date, ForeignKey, Index, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.datetime_utils import utc_now
from app.models.base import Base

if TYPE_CHECKING:
    from app.models.offer import Offer


class OfferSnapshot(Base):
    """Point-in-time observation of an offer's terms.

    Rows are never updated. ``diff_summary`` and ``changes`` describe the
    delta against the previous snapshot of the same offer, ordered by
    ``captured_at``; both are null for the first observation.
    """

    __tablename__ = "offer_snapshots"
    __table_args__ = (
        # Latest-snapshot lookups per offer
        Index("ix_offer_snapshots_offer_id_captured_at", "offer_id", "captured_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    offer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("offers.id", ondelete="RESTRICT"), index=True
    )
    captured_at: Mapped[datetime] = mapped_column(default=utc_now, index=True)

    bonus_points: Mapped[int] = mapped_column(Integer)
    min_spend_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    min_spend_window_days: Mapped[int] = mapped_column(Integer)
    annual_fee: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    statement_credits: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    expires_on: Mapped[date | None] = mapped_column(Date, nullable=True)
    landing_url: Mapped[str] = mapped_column(String(2048))

    diff_summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    changes: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)

    # Relationships
    offer: Mapped[Offer] = relationship(back_populates="snapshots")

    def __repr__(self) -> str:
        return f"<OfferSnapshot {self.offer_id} @ {self.captured_at}>"
