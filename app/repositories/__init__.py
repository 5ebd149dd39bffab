from app.repositories.card_product import CardProductRepository
from app.repositories.currency_valuation import CurrencyValuationRepository
from app.repositories.issuer import IssuerRepository
from app.repositories.offer import OfferRepository
from app.repositories.offer_snapshot import OfferSnapshotRepository
from app.repositories.subscriber import SubscriberRepository

__all__ = [
    "IssuerRepository",
    "CardProductRepository",
    "OfferRepository",
    "OfferSnapshotRepository",
    "SubscriberRepository",
    "CurrencyValuationRepository",
]
