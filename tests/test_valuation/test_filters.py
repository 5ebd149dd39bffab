"""Tests for offer filters and net-value ordering."""

import uuid
from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.offer import OfferStatus
from app.repositories.offer import OfferRepository
from app.valuation.engine import value_terms
from app.valuation.filters import OfferFilters, ValuedOffer, attach_valuations, sort_by_net_value


def _valued(net: int | None, verified: datetime, offer_id: str) -> ValuedOffer:
    offer = SimpleNamespace(id=uuid.UUID(offer_id), last_verified_at=verified)
    valuation = value_terms(net * 100, 0, 0, False, 1) if net is not None else None
    return ValuedOffer(offer=offer, valuation=valuation)


class TestSortByNetValue:
    """Tests for the result ordering."""

    def test_highest_net_value_first(self):
        t = datetime(2025, 1, 1)
        items = [
            _valued(500, t, "00000000-0000-0000-0000-000000000001"),
            _valued(1200, t, "00000000-0000-0000-0000-000000000002"),
            _valued(-50, t, "00000000-0000-0000-0000-000000000003"),
        ]

        ordered = sort_by_net_value(items)

        assert [i.net_value for i in ordered] == [1200, 500, -50]

    def test_ties_broken_by_most_recently_verified(self):
        older = _valued(800, datetime(2025, 1, 1), "00000000-0000-0000-0000-000000000001")
        newer = _valued(800, datetime(2025, 3, 1), "00000000-0000-0000-0000-000000000002")

        assert sort_by_net_value([older, newer]) == [newer, older]

    def test_full_ties_broken_by_id(self):
        t = datetime(2025, 1, 1)
        b = _valued(800, t, "00000000-0000-0000-0000-00000000000b")
        a = _valued(800, t, "00000000-0000-0000-0000-00000000000a")

        assert sort_by_net_value([b, a]) == [a, b]

    def test_unvalued_offers_last(self):
        t = datetime(2025, 1, 1)
        unvalued = _valued(None, datetime(2025, 6, 1), "00000000-0000-0000-0000-000000000001")
        negative = _valued(-300, t, "00000000-0000-0000-0000-000000000002")

        assert sort_by_net_value([unvalued, negative]) == [negative, unvalued]


class TestOfferFilters:
    """Tests for the filter value object."""

    def test_status_defaults_to_active(self):
        assert OfferFilters().effective_status == OfferStatus.ACTIVE

    def test_explicit_status_kept(self):
        assert OfferFilters(status=OfferStatus.EXPIRED).effective_status == OfferStatus.EXPIRED


@pytest.mark.asyncio
class TestFindActive:
    """Tests for filtered offer queries."""

    async def test_only_active_by_default(self, db_session: AsyncSession, offer_factory):
        active = await offer_factory()
        await offer_factory(status=OfferStatus.EXPIRED)

        offers = await OfferRepository(db_session).find_active()

        assert [o.id for o in offers] == [active.id]

    async def test_issuer_filter(self, db_session, issuer_factory, product_factory, offer_factory):
        citi = await issuer_factory(name="Citi", slug="citi")
        chase = await issuer_factory(name="Chase", slug="chase")
        citi_offer = await offer_factory(product=await product_factory(issuer=citi))
        await offer_factory(product=await product_factory(issuer=chase))

        offers = await OfferRepository(db_session).find_active(OfferFilters(issuer_slug="citi"))

        assert [o.id for o in offers] == [citi_offer.id]

    async def test_bounds_are_inclusive(self, db_session, offer_factory):
        at_bound = await offer_factory(bonus_points=80000, min_spend_amount=4000)
        await offer_factory(bonus_points=79999, min_spend_amount=4000)
        await offer_factory(bonus_points=90000, min_spend_amount=Decimal("4000.01"))

        filters = OfferFilters(min_bonus=80000, max_spend=Decimal("4000"))
        offers = await OfferRepository(db_session).find_active(filters)

        assert [o.id for o in offers] == [at_bound.id]

    async def test_zero_min_bonus_is_a_real_filter(self, db_session, offer_factory):
        """A zero bound still applies and matches everything at or above it."""
        zero = await offer_factory(bonus_points=0)
        other = await offer_factory(bonus_points=50000)

        offers = await OfferRepository(db_session).find_active(OfferFilters(min_bonus=0))

        assert {o.id for o in offers} == {zero.id, other.id}

    async def test_filters_are_conjunctive(self, db_session, product_factory, offer_factory):
        ur = await product_factory(currency_code="UR")
        mr = await product_factory(currency_code="MR")
        match = await offer_factory(product=ur, first_year_waived=True)
        await offer_factory(product=ur, first_year_waived=False)
        await offer_factory(product=mr, first_year_waived=True)

        filters = OfferFilters(currency_code="UR", first_year_waived=True)
        offers = await OfferRepository(db_session).find_active(filters)

        assert [o.id for o in offers] == [match.id]

    async def test_matches_agrees_with_query(self, db_session, offer_factory):
        offer = await offer_factory(bonus_points=60000, annual_fee=0)
        filters = OfferFilters(min_bonus=50000, currency_code="UR")

        assert filters.matches(offer)
        assert not OfferFilters(min_bonus=60001).matches(offer)


@pytest.mark.asyncio
class TestAttachValuations:
    """Tests for valuing a result set."""

    async def test_non_active_offers_not_valued(self, offer_factory):
        expired = await offer_factory(status=OfferStatus.EXPIRED)

        [item] = attach_valuations([expired], {"UR": 1.6})

        assert item.valuation is None
        assert item.net_value is None

    async def test_sorted_by_net_value(self, product_factory, offer_factory):
        product = await product_factory(currency_code="UR")
        small = await offer_factory(product=product, bonus_points=20000)
        large = await offer_factory(product=product, bonus_points=100000)

        valued = attach_valuations([small, large], {"UR": 1.6})

        assert [v.offer.id for v in valued] == [large.id, small.id]
        assert valued[0].net_value == 1505
