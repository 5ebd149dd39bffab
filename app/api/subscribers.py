from fastapi import APIRouter, HTTPException, Query, Request, Response, status

from app.config import get_config
from app.core.rate_limit import limiter
from app.dependencies import DBSession
from app.models.subscriber import Subscriber
from app.schemas.common import Envelope
from app.schemas.subscriber import (
    PreferenceOut,
    PreferencesUpdate,
    SubscribeRequest,
    SubscriberOut,
)
from app.services import subscriptions

router = APIRouter()


def _subscribe_limit() -> str:
    return get_config().rate_limits.subscribe


def _to_out(subscriber: Subscriber) -> SubscriberOut:
    return SubscriberOut(
        email=subscriber.email,
        email_verified=subscriber.email_verified,
        subscribed=subscriber.unsubscribed_at is None,
        preferences=[PreferenceOut.model_validate(p) for p in subscriber.preferences],
    )


@router.post("/subscribers", response_model=Envelope[SubscriberOut])
@limiter.limit(_subscribe_limit)
async def subscribe(
    request: Request,
    response: Response,
    body: SubscribeRequest,
    db: DBSession,
) -> Envelope[SubscriberOut]:
    """
    Subscribe an email address to the weekly changes digest.

    New addresses start unverified. Returns 201 for a new subscriber and
    200 when the address was already known.
    """
    subscriber, created = await subscriptions.subscribe(db, body.email)
    if created:
        response.status_code = status.HTTP_201_CREATED
    return Envelope(data=_to_out(subscriber))


@router.get("/subscribers/verify", response_model=Envelope[SubscriberOut])
async def verify_subscriber(
    db: DBSession,
    token: str = Query(min_length=1),
) -> Envelope[SubscriberOut]:
    """Verify an email address with its single-use verification token."""
    subscriber = await subscriptions.verify(db, token)
    if subscriber is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Invalid or used verification token"
        )
    return Envelope(data=_to_out(subscriber))


@router.get("/subscribers/unsubscribe", response_model=Envelope[SubscriberOut])
async def unsubscribe(
    db: DBSession,
    token: str = Query(min_length=1),
) -> Envelope[SubscriberOut]:
    """One-click unsubscribe link target."""
    subscriber = await subscriptions.unsubscribe(db, token)
    if subscriber is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Invalid unsubscribe token"
        )
    return Envelope(data=_to_out(subscriber))


@router.put("/subscribers/preferences", response_model=Envelope[SubscriberOut])
async def replace_preferences(
    body: PreferencesUpdate,
    db: DBSession,
    token: str = Query(min_length=1),
) -> Envelope[SubscriberOut]:
    """
    Replace the subscriber's digest preferences as a whole set.

    Authenticated by the subscriber's unsubscribe token. An empty list
    clears all preferences, which means every change is included.
    """
    subscriber = await subscriptions.replace_preferences(db, token, body.preferences)
    if subscriber is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Invalid subscriber token"
        )
    return Envelope(data=_to_out(subscriber))
