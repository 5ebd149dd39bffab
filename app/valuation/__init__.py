from app.valuation.engine import (
    DEFAULT_CENTS_PER_POINT,
    Valuation,
    resolve_cents_per_point,
    value_for_currency,
    value_offer,
    value_terms,
)
from app.valuation.filters import OfferFilters, ValuedOffer, attach_valuations, sort_by_net_value
from app.valuation.rates import build_rate_table, get_bulk_valuations
from app.valuation.snapshots import (
    FieldChange,
    ObservedTerms,
    diff_terms,
    record_snapshot,
    render_diff_summary,
)

__all__ = [
    "DEFAULT_CENTS_PER_POINT",
    "Valuation",
    "resolve_cents_per_point",
    "value_for_currency",
    "value_offer",
    "value_terms",
    "OfferFilters",
    "ValuedOffer",
    "attach_valuations",
    "sort_by_net_value",
    "build_rate_table",
    "get_bulk_valuations",
    "FieldChange",
    "ObservedTerms",
    "diff_terms",
    "record_snapshot",
    "render_diff_summary",
]
