"""
Offer valuation.

    bonus_value          = round(bonus_points * cents_per_point / 100)
    effective_annual_fee = 0 if first_year_waived else annual_fee
    net_value            = round(bonus_value + statement_credits - effective_annual_fee)

All arithmetic is done in Decimal and rounded half-up to whole currency
units, so displayed values don't depend on float behaviour.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal

from app.core.money import round_whole, to_decimal
from app.models.offer import Offer

# Rate used for currency codes missing from the valuation table
DEFAULT_CENTS_PER_POINT = Decimal("1.0")


@dataclass(frozen=True)
class Valuation:
    """Computed value of an offer at a given cents-per-point rate."""

    cents_per_point: Decimal
    bonus_value: int
    effective_annual_fee: Decimal
    net_value: int


def value_terms(
    bonus_points: int,
    statement_credits: Decimal | int | float,
    annual_fee: Decimal | int | float,
    first_year_waived: bool,
    cents_per_point: Decimal | int | float,
) -> Valuation:
    """
    Value raw offer terms at a cents-per-point rate.

    A rate of 0 gives a bonus value of 0. Net value may be negative when
    fees outweigh the bonus; that is a valid result.
    """
    cpp = to_decimal(cents_per_point)
    bonus_value = round_whole(Decimal(bonus_points) * cpp / 100)
    effective_fee = Decimal(0) if first_year_waived else to_decimal(annual_fee)
    net_value = round_whole(Decimal(bonus_value) + to_decimal(statement_credits) - effective_fee)

    return Valuation(
        cents_per_point=cpp,
        bonus_value=bonus_value,
        effective_annual_fee=effective_fee,
        net_value=net_value,
    )


def resolve_cents_per_point(
    currency_code: str,
    rates: Mapping[str, Decimal | float],
    default: Decimal = DEFAULT_CENTS_PER_POINT,
) -> Decimal:
    """Look up a currency's rate, falling back to the default when unknown.

    A known rate of 0 is honoured; only a missing code falls back.
    """
    rate = rates.get(currency_code)
    if rate is None:
        return default
    return to_decimal(rate)


def value_offer(
    offer: Offer,
    rates: Mapping[str, Decimal | float],
    default: Decimal = DEFAULT_CENTS_PER_POINT,
) -> Valuation:
    """Value a stored offer using its product's currency code."""
    cpp = resolve_cents_per_point(offer.product.currency_code, rates, default)
    return value_terms(
        bonus_points=offer.bonus_points,
        statement_credits=offer.statement_credits,
        annual_fee=offer.annual_fee,
        first_year_waived=offer.first_year_waived,
        cents_per_point=cpp,
    )


def value_for_currency(
    offer: Offer,
    currency_code: str,
    rates: Mapping[str, Decimal | float],
    default: Decimal = DEFAULT_CENTS_PER_POINT,
) -> Valuation:
    """Value an offer's terms as if its points were in another currency."""
    return value_terms(
        bonus_points=offer.bonus_points,
        statement_credits=offer.statement_credits,
        annual_fee=offer.annual_fee,
        first_year_waived=offer.first_year_waived,
        cents_per_point=resolve_cents_per_point(currency_code, rates, default),
    )
