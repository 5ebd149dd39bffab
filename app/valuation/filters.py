"""Offer filter predicates and net-value ordering."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Select

from app.core.money import to_decimal
from app.models.card_product import CardProduct
from app.models.issuer import Issuer
from app.models.offer import Offer, OfferStatus
from app.valuation.engine import DEFAULT_CENTS_PER_POINT, Valuation, value_offer


@dataclass(frozen=True)
class OfferFilters:
    """
    Conjunctive offer filters.

    ``None`` disables a filter; 0 is a real bound. Bounds are inclusive.
    Status falls back to ACTIVE when not given.
    """

    issuer_slug: str | None = None
    currency_code: str | None = None
    min_bonus: int | None = None
    max_spend: Decimal | None = None
    status: OfferStatus | None = None
    first_year_waived: bool | None = None

    @property
    def effective_status(self) -> OfferStatus:
        return self.status or OfferStatus.ACTIVE

    def apply(self, stmt: Select) -> Select:
        """Add WHERE clauses to a select that already joins product and issuer."""
        stmt = stmt.where(Offer.status == self.effective_status)
        if self.issuer_slug is not None:
            stmt = stmt.where(Issuer.slug == self.issuer_slug)
        if self.currency_code is not None:
            stmt = stmt.where(CardProduct.currency_code == self.currency_code)
        if self.min_bonus is not None:
            stmt = stmt.where(Offer.bonus_points >= self.min_bonus)
        if self.max_spend is not None:
            stmt = stmt.where(Offer.min_spend_amount <= self.max_spend)
        if self.first_year_waived is not None:
            stmt = stmt.where(Offer.first_year_waived == self.first_year_waived)
        return stmt

    def matches(self, offer: Offer) -> bool:
        """In-memory equivalent of ``apply`` for an offer with product and issuer loaded."""
        if offer.status != self.effective_status:
            return False
        if self.issuer_slug is not None and offer.product.issuer.slug != self.issuer_slug:
            return False
        if self.currency_code is not None and offer.product.currency_code != self.currency_code:
            return False
        if self.min_bonus is not None and offer.bonus_points < self.min_bonus:
            return False
        if self.max_spend is not None and to_decimal(offer.min_spend_amount) > self.max_spend:
            return False
        if self.first_year_waived is not None and offer.first_year_waived != self.first_year_waived:
            return False
        return True


@dataclass(frozen=True)
class ValuedOffer:
    """An offer with its valuation attached (None for non-active offers)."""

    offer: Offer
    valuation: Valuation | None

    @property
    def net_value(self) -> int | None:
        return self.valuation.net_value if self.valuation else None


def _sort_key(item: ValuedOffer) -> tuple[bool, int, float, str]:
    # Net value desc, then last_verified_at desc, then id asc
    verified: datetime = item.offer.last_verified_at or datetime.min
    age = (datetime.max - verified).total_seconds()
    net = -item.net_value if item.net_value is not None else 0
    return (item.valuation is None, net, age, str(item.offer.id))


def sort_by_net_value(items: Iterable[ValuedOffer]) -> list[ValuedOffer]:
    """Order valued offers by net value descending; unvalued offers go last."""
    return sorted(items, key=_sort_key)


def attach_valuations(
    offers: Iterable[Offer],
    rates: Mapping[str, Decimal | float],
    default_cents_per_point: Decimal = DEFAULT_CENTS_PER_POINT,
) -> list[ValuedOffer]:
    """Value ACTIVE offers and return the set in net-value order."""
    valued = [
        ValuedOffer(
            offer=offer,
            valuation=value_offer(offer, rates, default_cents_per_point)
            if offer.is_active
            else None,
        )
        for offer in offers
    ]
    return sort_by_net_value(valued)
