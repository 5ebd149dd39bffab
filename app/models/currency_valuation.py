import uuid
from decimal import Decimal

from sqlalchemy import Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin


class CurrencyValuation(Base, TimestampMixin):
    """Published cents-per-point rate for a loyalty currency."""

    __tablename__ = "currency_valuations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    currency_code: Mapped[str] = mapped_column(String(20), unique=True, index=True)
    cents_per_point: Mapped[Decimal] = mapped_column(Numeric(8, 4))
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<CurrencyValuation {self.currency_code}={self.cents_per_point}>"
