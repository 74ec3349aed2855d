"""
Read side: a stored purchase valued in another currency.
"""

import logging
from decimal import Decimal
from uuid import UUID

from apps.common.results import NotFound, RateUnavailable, StorageError
from apps.exchange.domain.models import normalize_currency
from apps.exchange.domain.services import ExchangeRateResolver, convert_amount
from apps.purchases.application.dto import ConvertedPurchaseDTO
from apps.purchases.domain.interfaces import BasePurchaseStore, PurchaseStoreError

logger = logging.getLogger(__name__)


class ConvertedPurchaseQuery:

    def __init__(self, store: BasePurchaseStore, resolver: ExchangeRateResolver):
        self.store = store
        self.resolver = resolver

    def get_converted(
        self,
        purchase_id: UUID,
        target_currency: str,
        timeout: float | None = None,
    ) -> ConvertedPurchaseDTO | NotFound | RateUnavailable | StorageError:
        target_currency = normalize_currency(target_currency)

        try:
            purchase = self.store.get_by_id(purchase_id)
        except PurchaseStoreError as e:
            logger.exception("Failed to load purchase %s", purchase_id)
            return StorageError(str(e))

        if purchase is None:
            logger.warning("Purchase with ID %s not found", purchase_id)
            return NotFound(purchase_id)

        original = purchase.original_amount
        if original.currency == target_currency:
            logger.info("Target currency %s is the purchase currency, skipping conversion", target_currency)
            return ConvertedPurchaseDTO(
                id=purchase.id,
                description=purchase.description,
                transaction_date=purchase.transaction_date,
                original_amount=original,
                converted_amount=original,
                exchange_rate=Decimal("1"),
                exchange_rate_date=purchase.transaction_date,
            )

        resolved = self.resolver.resolve(target_currency, purchase.transaction_date, timeout=timeout)
        if isinstance(resolved, RateUnavailable):
            return resolved

        converted = convert_amount(
            original,
            resolved.rate,
            target_currency,
            pivot_currency=self.resolver.config.pivot_currency,
        )

        logger.info(
            "Converted purchase %s: %s = %s (rate: %s from %s)",
            purchase.id, original, converted, resolved.rate, resolved.effective_date
        )

        return ConvertedPurchaseDTO(
            id=purchase.id,
            description=purchase.description,
            transaction_date=purchase.transaction_date,
            original_amount=original,
            converted_amount=converted,
            exchange_rate=resolved.rate,
            exchange_rate_date=resolved.effective_date,
        )
