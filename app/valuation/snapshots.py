"""
Offer snapshots and the diffs between consecutive observations.

A snapshot's diff is computed against the single most recent earlier
snapshot of the same offer. Diffs are kept in two forms: a structured
list of field changes (stored as JSON) and the rendered summary text,
e.g. ``"Bonus increased 65,000 → 75,000; Min spend increased $4,000 → $5,000"``.
"""

import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.datetime_utils import to_naive_utc, utc_now
from app.core.errors import ReferentialIntegrityError, SnapshotOrderError
from app.core.logging import get_logger
from app.core.money import format_money, format_points, to_decimal
from app.models.offer import Offer
from app.models.offer_snapshot import OfferSnapshot
from app.repositories.offer_snapshot import OfferSnapshotRepository

logger = get_logger(__name__)


@dataclass(frozen=True)
class ObservedTerms:
    """The offer terms tracked across snapshots."""

    bonus_points: int
    min_spend_amount: Decimal
    min_spend_window_days: int
    annual_fee: Decimal
    statement_credits: Decimal
    landing_url: str
    expires_on: date | None = None

    @classmethod
    def from_offer(cls, offer: Offer, expires_on: date | None = None) -> "ObservedTerms":
        """Current terms of a stored offer (offers carry no expiry of their own)."""
        return cls(
            bonus_points=offer.bonus_points,
            min_spend_amount=to_decimal(offer.min_spend_amount),
            min_spend_window_days=offer.min_spend_window_days,
            annual_fee=to_decimal(offer.annual_fee),
            statement_credits=to_decimal(offer.statement_credits),
            landing_url=offer.landing_url,
            expires_on=expires_on,
        )

    @classmethod
    def from_snapshot(cls, snapshot: OfferSnapshot) -> "ObservedTerms":
        return cls(
            bonus_points=snapshot.bonus_points,
            min_spend_amount=to_decimal(snapshot.min_spend_amount),
            min_spend_window_days=snapshot.min_spend_window_days,
            annual_fee=to_decimal(snapshot.annual_fee),
            statement_credits=to_decimal(snapshot.statement_credits),
            landing_url=snapshot.landing_url,
            expires_on=snapshot.expires_on,
        )


def _days(value: int) -> str:
    return f"{value} days"


def _plain(value: Any) -> str:
    return "none" if value is None else str(value)


@dataclass(frozen=True)
class TrackedField:
    name: str
    label: str
    numeric: bool
    formatter: Callable[[Any], str]


# Diff order follows this tuple
TRACKED_FIELDS: tuple[TrackedField, ...] = (
    TrackedField("bonus_points", "Bonus", True, format_points),
    TrackedField("min_spend_amount", "Min spend", True, format_money),
    TrackedField("min_spend_window_days", "Spend window", True, _days),
    TrackedField("annual_fee", "Annual fee", True, format_money),
    TrackedField("statement_credits", "Statement credits", True, format_money),
    TrackedField("expires_on", "Expiry", False, _plain),
    TrackedField("landing_url", "Landing URL", False, _plain),
)

FIELDS_BY_NAME = {f.name: f for f in TRACKED_FIELDS}


def _json_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(int(value)) if value == value.to_integral_value() else str(value)
    if isinstance(value, date):
        return value.isoformat()
    return value


@dataclass(frozen=True)
class FieldChange:
    """One field that differs between two consecutive snapshots."""

    field: str
    old: Any
    new: Any

    @property
    def description(self) -> str:
        tracked = FIELDS_BY_NAME[self.field]
        if tracked.numeric and self.old is not None and self.new is not None:
            return "increased" if self.new > self.old else "decreased"
        return "changed"

    def render(self) -> str:
        tracked = FIELDS_BY_NAME[self.field]
        old = tracked.formatter(self.old) if self.old is not None else "none"
        new = tracked.formatter(self.new) if self.new is not None else "none"
        return f"{tracked.label} {self.description} {old} → {new}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "old": _json_value(self.old),
            "new": _json_value(self.new),
        }


def diff_terms(previous: ObservedTerms, current: ObservedTerms) -> list[FieldChange]:
    """List the tracked fields whose value changed, in tracked-field order."""
    changes = []
    for tracked in TRACKED_FIELDS:
        old = getattr(previous, tracked.name)
        new = getattr(current, tracked.name)
        if old != new:
            changes.append(FieldChange(field=tracked.name, old=old, new=new))
    return changes


def render_diff_summary(changes: list[FieldChange]) -> str | None:
    """Join rendered changes with "; ". No changes renders as None."""
    if not changes:
        return None
    return "; ".join(change.render() for change in changes)


async def record_snapshot(
    db: AsyncSession,
    offer_id: uuid.UUID,
    observed: ObservedTerms,
    captured_at: datetime | None = None,
) -> OfferSnapshot:
    """
    Append a snapshot for an offer, diffed against its latest prior snapshot.

    The offer row is locked for the rest of the transaction so concurrent
    writers for the same offer are serialized. The first snapshot of an
    offer has no diff, and neither does one whose terms are unchanged.

    Raises:
        ReferentialIntegrityError: the offer does not exist
        SnapshotOrderError: captured_at is not after the latest snapshot
    """
    captured_at = to_naive_utc(captured_at) if captured_at else utc_now()

    result = await db.execute(select(Offer.id).where(Offer.id == offer_id).with_for_update())
    if result.scalar_one_or_none() is None:
        raise ReferentialIntegrityError(f"Offer {offer_id} does not exist")

    snapshots = OfferSnapshotRepository(db)
    previous = await snapshots.get_latest(offer_id)

    if previous is not None and captured_at <= previous.captured_at:
        raise SnapshotOrderError(
            f"Snapshot at {captured_at.isoformat()} is not after latest "
            f"snapshot at {previous.captured_at.isoformat()}"
        )

    changes = diff_terms(ObservedTerms.from_snapshot(previous), observed) if previous else []
    summary = render_diff_summary(changes)

    snapshot = await snapshots.create(
        OfferSnapshot(
            offer_id=offer_id,
            captured_at=captured_at,
            bonus_points=observed.bonus_points,
            min_spend_amount=observed.min_spend_amount,
            min_spend_window_days=observed.min_spend_window_days,
            annual_fee=observed.annual_fee,
            statement_credits=observed.statement_credits,
            expires_on=observed.expires_on,
            landing_url=observed.landing_url,
            diff_summary=summary,
            changes=[c.to_dict() for c in changes] if changes else None,
        )
    )

    logger.bind(
        offer_id=str(offer_id),
        captured_at=captured_at.isoformat(),
        first_observation=previous is None,
        changed_fields=[c.field for c in changes],
    ).info("offer_snapshot_recorded")

    return snapshot
