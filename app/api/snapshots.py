import uuid

from fastapi import APIRouter, HTTPException, Query, status

from app.dependencies import Config, DBSession
from app.repositories.offer import OfferRepository
from app.repositories.offer_snapshot import OfferSnapshotRepository
from app.schemas.common import Envelope, ListEnvelope
from app.schemas.snapshot import ChangeOut, SnapshotCreate, SnapshotOut
from app.valuation.snapshots import ObservedTerms, record_snapshot

router = APIRouter()


@router.get("/offers/{offer_id}/snapshots", response_model=ListEnvelope[SnapshotOut])
async def list_snapshots(
    offer_id: uuid.UUID,
    db: DBSession,
    config: Config,
    limit: int | None = Query(default=None, ge=1, le=500),
) -> ListEnvelope[SnapshotOut]:
    """Snapshot history for an offer, most recent first."""
    if await OfferRepository(db).find_by_id(offer_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Offer not found")

    snapshots = await OfferSnapshotRepository(db).find_by_offer_id(
        offer_id, limit=limit or config.snapshots.history_limit
    )
    data = [SnapshotOut.model_validate(s) for s in snapshots]
    return ListEnvelope(data=data, count=len(data))


@router.post(
    "/offers/{offer_id}/snapshots",
    response_model=Envelope[SnapshotOut],
    status_code=status.HTTP_201_CREATED,
)
async def create_snapshot(
    offer_id: uuid.UUID, data: SnapshotCreate, db: DBSession
) -> Envelope[SnapshotOut]:
    """
    Record an observation of an offer's terms.

    The diff is computed against the latest earlier snapshot. Returns 409
    if the offer does not exist or ``capturedAt`` is not after the latest
    snapshot.
    """
    observed = ObservedTerms(**data.model_dump(exclude={"captured_at"}))
    snapshot = await record_snapshot(db, offer_id, observed, captured_at=data.captured_at)
    return Envelope(data=SnapshotOut.model_validate(snapshot))


@router.get("/changes", response_model=ListEnvelope[ChangeOut])
async def list_changes(
    db: DBSession,
    days: int = Query(default=7, ge=1, le=365),
) -> ListEnvelope[ChangeOut]:
    """Offer changes captured in the trailing window, newest first."""
    changes = await OfferSnapshotRepository(db).get_weekly_changes(days_back=days)
    data = [ChangeOut.model_validate(c) for c in changes]
    return ListEnvelope(data=data, count=len(data))
