from app.models.base import Base
from app.models.card_product import CardProduct, ProductType
from app.models.currency_valuation import CurrencyValuation
from app.models.issuer import Issuer
from app.models.offer import Offer, OfferStatus
from app.models.offer_snapshot import OfferSnapshot
from app.models.subscriber import Subscriber, SubscriberPreference

__all__ = [
    "Base",
    "Issuer",
    "CardProduct",
    "ProductType",
    "Offer",
    "OfferStatus",
    "OfferSnapshot",
    "CurrencyValuation",
    "Subscriber",
    "SubscriberPreference",
]
