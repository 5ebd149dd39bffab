"""Weekly offer-change digests.

Builds one digest per eligible subscriber from the trailing-window change
feed. A subscriber with no preferences gets every change; otherwise a
change is included when any one preference matches it. Delivery is left
to an external sender.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_config
from app.core.logging import get_logger
from app.models.offer_snapshot import OfferSnapshot
from app.models.subscriber import Subscriber, SubscriberPreference
from app.repositories.offer_snapshot import OfferSnapshotRepository
from app.repositories.subscriber import SubscriberRepository

logger = get_logger(__name__)


@dataclass
class Digest:
    subscriber: Subscriber
    changes: list[OfferSnapshot] = field(default_factory=list)
    truncated: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.changes


def preference_matches(preference: SubscriberPreference, change: OfferSnapshot) -> bool:
    """Check one preference against a change. Unset fields match anything."""
    product = change.offer.product
    if preference.issuer_slug is not None and product.issuer.slug != preference.issuer_slug:
        return False
    if preference.currency_code is not None and product.currency_code != preference.currency_code:
        return False
    if preference.min_bonus is not None and change.bonus_points < preference.min_bonus:
        return False
    return True


def select_changes(
    subscriber: Subscriber, changes: Sequence[OfferSnapshot]
) -> list[OfferSnapshot]:
    """Changes relevant to a subscriber, keeping feed order."""
    if not subscriber.preferences:
        return list(changes)
    return [
        change
        for change in changes
        if any(preference_matches(pref, change) for pref in subscriber.preferences)
    ]


async def build_digests(
    db: AsyncSession,
    days_back: int | None = None,
    max_changes: int | None = None,
) -> list[Digest]:
    """
    Build digests for every eligible subscriber.

    Args:
        db: Database session
        days_back: Trailing window in days (config ``snapshots.weekly_window_days``)
        max_changes: Per-subscriber cap (config ``digest.max_changes``)

    Returns:
        One digest per eligible subscriber, empty ones included
    """
    config = get_config()
    if days_back is None:
        days_back = config.snapshots.weekly_window_days
    if max_changes is None:
        max_changes = config.digest.max_changes

    changes = await OfferSnapshotRepository(db).get_weekly_changes(days_back=days_back)
    subscribers = await SubscriberRepository(db).get_verified_subscribers()

    digests = []
    for subscriber in subscribers:
        if not subscriber.is_eligible:
            continue
        selected = select_changes(subscriber, changes)
        digests.append(
            Digest(
                subscriber=subscriber,
                changes=selected[:max_changes],
                truncated=max(len(selected) - max_changes, 0),
            )
        )

    logger.bind(
        days_back=days_back,
        changes=len(changes),
        subscribers=len(digests),
        non_empty=sum(1 for d in digests if not d.is_empty),
    ).info("digests_built")

    return digests
