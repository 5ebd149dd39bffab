from app.schemas.common import CamelModel, Envelope, ListEnvelope
from app.schemas.issuer import IssuerCreate, IssuerDetail, IssuerOut, IssuerUpdate
from app.schemas.offer import (
    CalculatedValue,
    OfferCreate,
    OfferDetail,
    OfferOut,
    OfferStatusUpdate,
    OfferUpdate,
    ValuedOfferOut,
)
from app.schemas.product import (
    CardProductCreate,
    CardProductDetail,
    CardProductOut,
    CardProductUpdate,
)
from app.schemas.snapshot import ChangeOut, FieldChangeOut, SnapshotCreate, SnapshotOut
from app.schemas.subscriber import PreferenceIn, PreferencesUpdate, SubscribeRequest, SubscriberOut
from app.schemas.valuation import (
    CurrencyValuationCreate,
    CurrencyValuationOut,
    CurrencyValuationUpdate,
)

__all__ = [
    "CamelModel",
    "Envelope",
    "ListEnvelope",
    "IssuerCreate",
    "IssuerDetail",
    "IssuerOut",
    "IssuerUpdate",
    "CalculatedValue",
    "OfferCreate",
    "OfferDetail",
    "OfferOut",
    "OfferStatusUpdate",
    "OfferUpdate",
    "ValuedOfferOut",
    "CardProductCreate",
    "CardProductDetail",
    "CardProductOut",
    "CardProductUpdate",
    "ChangeOut",
    "FieldChangeOut",
    "SnapshotCreate",
    "SnapshotOut",
    "PreferenceIn",
    "PreferencesUpdate",
    "SubscribeRequest",
    "SubscriberOut",
    "CurrencyValuationCreate",
    "CurrencyValuationOut",
    "CurrencyValuationUpdate",
]
