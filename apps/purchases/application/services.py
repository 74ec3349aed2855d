"""
Wiring for the purchases bounded context.
"""

from django.conf import settings

from apps.exchange.application.services import get_exchange_rate_resolver
from apps.purchases.application.queries import ConvertedPurchaseQuery
from apps.purchases.domain.config import PurchaseConfig
from apps.purchases.domain.services import PurchaseIngestionService
from apps.purchases.infrastructure.persistence.repositories import DjangoPurchaseStore


def get_purchase_config() -> PurchaseConfig:
    return PurchaseConfig.from_dict(settings.PURCHASES)


def get_purchase_ingestion_service() -> PurchaseIngestionService:
    return PurchaseIngestionService(DjangoPurchaseStore())


def get_converted_purchase_query() -> ConvertedPurchaseQuery:
    return ConvertedPurchaseQuery(DjangoPurchaseStore(), get_exchange_rate_resolver())
