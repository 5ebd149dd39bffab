"""Subscriber lifecycle: subscribe, verify, unsubscribe and preferences."""

from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.models.subscriber import Subscriber
from app.repositories.subscriber import SubscriberRepository
from app.schemas.subscriber import PreferenceIn

logger = get_logger(__name__)


async def subscribe(db: AsyncSession, email: str) -> tuple[Subscriber, bool]:
    """Create a subscriber, or re-activate one who had unsubscribed.

    Re-subscribing requires verifying the address again. Subscribing an
    address that is already active is a no-op.

    Returns:
        Tuple of (subscriber, created)
    """
    repo = SubscriberRepository(db)
    subscriber = await repo.find_by_email(email)

    if subscriber is None:
        subscriber = await repo.create(email)
        logger.bind(subscriber_id=str(subscriber.id)).info("subscriber_created")
        return subscriber, True

    if subscriber.unsubscribed_at is not None:
        await repo.resubscribe(subscriber)
        logger.bind(subscriber_id=str(subscriber.id)).info("subscriber_resubscribed")

    return subscriber, False


async def verify(db: AsyncSession, token: str) -> Subscriber | None:
    """Verify an address by its single-use token. Unknown or used tokens return None."""
    repo = SubscriberRepository(db)
    subscriber = await repo.find_by_verification_token(token)
    if subscriber is None:
        return None

    await repo.verify_email(subscriber)
    logger.bind(subscriber_id=str(subscriber.id)).info("subscriber_verified")
    return subscriber


async def unsubscribe(db: AsyncSession, token: str) -> Subscriber | None:
    """Unsubscribe by unsubscribe token. Repeating it keeps the first timestamp."""
    repo = SubscriberRepository(db)
    subscriber = await repo.find_by_unsubscribe_token(token)
    if subscriber is None:
        return None

    if subscriber.unsubscribed_at is None:
        await repo.unsubscribe(subscriber)
        logger.bind(subscriber_id=str(subscriber.id)).info("subscriber_unsubscribed")
    return subscriber


async def replace_preferences(
    db: AsyncSession, token: str, preferences: Iterable[PreferenceIn]
) -> Subscriber | None:
    """Replace a subscriber's whole preference set, found by unsubscribe token."""
    repo = SubscriberRepository(db)
    subscriber = await repo.find_by_unsubscribe_token(token)
    if subscriber is None:
        return None

    created = await repo.update_preferences(subscriber.id, preferences)
    await db.refresh(subscriber, attribute_names=["preferences"])

    logger.bind(subscriber_id=str(subscriber.id), count=len(created)).info(
        "subscriber_preferences_replaced"
    )
    return subscriber


def is_eligible(subscriber: Subscriber) -> bool:
    """A subscriber receives digests only when verified and not unsubscribed."""
    return subscriber.is_eligible
