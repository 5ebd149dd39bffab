"""Tests for subscriber lifecycle."""

import pytest

from app.schemas.subscriber import PreferenceIn
from app.services import subscriptions

pytestmark = pytest.mark.asyncio


class TestSubscribe:
    """Tests for subscribe."""

    async def test_new_address(self, db_session):
        subscriber, created = await subscriptions.subscribe(db_session, "New@Example.com")

        assert created is True
        assert subscriber.email == "new@example.com"
        assert subscriber.email_verified is False
        assert subscriber.verification_token
        assert subscriber.unsubscribe_token
        assert not subscriptions.is_eligible(subscriber)

    async def test_existing_address_is_noop(self, db_session, subscriber_factory):
        existing = await subscriber_factory(email="reader@example.com")

        subscriber, created = await subscriptions.subscribe(db_session, "reader@example.com")

        assert created is False
        assert subscriber.id == existing.id
        assert subscriber.email_verified is True

    async def test_resubscribe_requires_verification(self, db_session, subscriber_factory):
        await subscriber_factory(email="back@example.com", unsubscribed=True)

        subscriber, created = await subscriptions.subscribe(db_session, "back@example.com")

        assert created is False
        assert subscriber.unsubscribed_at is None
        assert subscriber.email_verified is False
        assert subscriber.verification_token is not None


class TestVerifyAndUnsubscribe:
    """Tests for verify and unsubscribe."""

    async def test_verify(self, db_session, subscriber_factory):
        subscriber = await subscriber_factory(verified=False)
        token = subscriber.verification_token

        verified = await subscriptions.verify(db_session, token)

        assert verified is not None
        assert verified.email_verified is True
        assert verified.verification_token is None
        assert subscriptions.is_eligible(verified)
        assert await subscriptions.verify(db_session, token) is None

    async def test_unsubscribe_keeps_first_timestamp(self, db_session, subscriber_factory):
        subscriber = await subscriber_factory()

        first = await subscriptions.unsubscribe(db_session, subscriber.unsubscribe_token)
        stamped = first.unsubscribed_at
        again = await subscriptions.unsubscribe(db_session, subscriber.unsubscribe_token)

        assert stamped is not None
        assert again.unsubscribed_at == stamped
        assert not subscriptions.is_eligible(again)

    async def test_unknown_tokens(self, db_session):
        assert await subscriptions.verify(db_session, "missing") is None
        assert await subscriptions.unsubscribe(db_session, "missing") is None
        assert await subscriptions.replace_preferences(db_session, "missing", []) is None


async def test_replace_preferences(db_session, subscriber_factory):
    subscriber = await subscriber_factory(
        preferences=[{"issuer_slug": "chase"}, {"currency_code": "UR"}]
    )

    updated = await subscriptions.replace_preferences(
        db_session,
        subscriber.unsubscribe_token,
        [PreferenceIn(issuer_slug="citi", min_bonus=50000)],
    )

    assert [(p.issuer_slug, p.currency_code, p.min_bonus) for p in updated.preferences] == [
        ("citi", None, 50000)
    ]
