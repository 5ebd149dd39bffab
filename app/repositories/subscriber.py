import uuid
from collections.abc import Iterable, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.datetime_utils import utc_now
from app.core.security import generate_unsubscribe_token, generate_verification_token
from app.models.subscriber import Subscriber, SubscriberPreference
from app.schemas.subscriber import PreferenceIn


class SubscriberRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create(self, email: str) -> Subscriber:
        """Create an unverified subscriber with fresh tokens."""
        subscriber = Subscriber(
            email=email.lower(),
            email_verified=False,
            verification_token=generate_verification_token(),
            unsubscribe_token=generate_unsubscribe_token(),
            preferences=[],
        )
        self.db.add(subscriber)
        await self.db.flush()
        return subscriber

    async def find_by_email(self, email: str) -> Subscriber | None:
        result = await self.db.execute(select(Subscriber).where(Subscriber.email == email.lower()))
        return result.scalar_one_or_none()

    async def find_by_verification_token(self, token: str) -> Subscriber | None:
        result = await self.db.execute(
            select(Subscriber).where(Subscriber.verification_token == token)
        )
        return result.scalar_one_or_none()

    async def find_by_unsubscribe_token(self, token: str) -> Subscriber | None:
        result = await self.db.execute(
            select(Subscriber).where(Subscriber.unsubscribe_token == token)
        )
        return result.scalar_one_or_none()

    async def verify_email(self, subscriber: Subscriber) -> Subscriber:
        """Mark verified and burn the single-use verification token."""
        subscriber.email_verified = True
        subscriber.verification_token = None
        await self.db.flush()
        return subscriber

    async def unsubscribe(self, subscriber: Subscriber) -> Subscriber:
        subscriber.unsubscribed_at = utc_now()
        await self.db.flush()
        return subscriber

    async def resubscribe(self, subscriber: Subscriber) -> Subscriber:
        """Clear the unsubscribe marker and require verification again."""
        subscriber.unsubscribed_at = None
        subscriber.email_verified = False
        subscriber.verification_token = generate_verification_token()
        await self.db.flush()
        return subscriber

    async def get_verified_subscribers(self) -> Sequence[Subscriber]:
        """Subscribers eligible for delivery, with preferences loaded."""
        result = await self.db.execute(
            select(Subscriber)
            .where(
                Subscriber.email_verified == True,  # noqa: E712
                Subscriber.unsubscribed_at.is_(None),
            )
            .order_by(Subscriber.email)
        )
        return result.scalars().all()

    async def update_preferences(
        self, subscriber_id: uuid.UUID, preferences: Iterable[PreferenceIn]
    ) -> list[SubscriberPreference]:
        """Replace the subscriber's whole preference set."""
        await self.db.execute(
            delete(SubscriberPreference).where(SubscriberPreference.subscriber_id == subscriber_id)
        )
        created = [
            SubscriberPreference(subscriber_id=subscriber_id, **pref.model_dump())
            for pref in preferences
        ]
        self.db.add_all(created)
        await self.db.flush()
        return created
