"""Bulk cents-per-point lookup keyed by currency code."""

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.currency_valuation import CurrencyValuation


def build_rate_table(valuations: Iterable[CurrencyValuation]) -> dict[str, float]:
    """Map currency code to cents-per-point as plain numbers, ordered by code."""
    ordered = sorted(valuations, key=lambda v: v.currency_code)
    return {v.currency_code: float(v.cents_per_point) for v in ordered}


async def get_bulk_valuations(db: AsyncSession) -> dict[str, float]:
    """
    Load every known currency rate.

    Codes missing from the result are the "unknown currency" case, which
    the valuation engine resolves with its default rate.
    """
    result = await db.execute(select(CurrencyValuation).order_by(CurrencyValuation.currency_code))
    return build_rate_table(result.scalars().all())
