from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin


class Subscriber(Base, TimestampMixin):
    """Email subscriber for the weekly offer-changes digest."""

    __tablename__ = "subscribers"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    email_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    verification_token: Mapped[str | None] = mapped_column(
        String(64), unique=True, nullable=True, index=True
    )
    unsubscribe_token: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    unsubscribed_at: Mapped[datetime | None] = mapped_column(nullable=True)

    # Relationships
    preferences: Mapped[list[SubscriberPreference]] = relationship(
        back_populates="subscriber",
        lazy="selectin",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Subscriber {self.email}>"

    @property
    def is_eligible(self) -> bool:
        """Verified and not unsubscribed."""
        return self.email_verified and self.unsubscribed_at is None


class SubscriberPreference(Base):
    """One interest filter for a subscriber's digest. Replaced as a set."""

    __tablename__ = "subscriber_preferences"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    subscriber_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("subscribers.id", ondelete="CASCADE"), index=True
    )
    issuer_slug: Mapped[str | None] = mapped_column(String(255), nullable=True)
    currency_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    min_bonus: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Relationships
    subscriber: Mapped[Subscriber] = relationship(back_populates="preferences")

    def __repr__(self) -> str:
        return f"<SubscriberPreference {self.subscriber_id}>"
