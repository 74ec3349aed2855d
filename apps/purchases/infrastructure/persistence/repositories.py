"""
Repository pattern implementation.
Abstracts database access to decouple domain logic from persistence.
"""

import logging
from typing import Optional
from uuid import UUID

from django.db import DatabaseError, IntegrityError, router, transaction

from apps.exchange.domain.models import Money
from apps.purchases.domain.interfaces import (
    BasePurchaseStore,
    DuplicateIdempotencyKey,
    PurchaseStoreError,
)
from apps.purchases.domain.models import Purchase
from apps.purchases.infrastructure.persistence.models import PurchaseRecord

logger = logging.getLogger(__name__)

IDEMPOTENCY_CONSTRAINT = "unique_purchase_idempotency_key"


def to_entity(record: PurchaseRecord) -> Purchase:
    return Purchase(
        id=record.id,
        description=record.description,
        transaction_date=record.transaction_date,
        original_amount=Money(record.amount, record.currency),
        idempotency_key=record.idempotency_key,
    )


def is_idempotency_violation(error: IntegrityError) -> bool:
    # SQLite: "UNIQUE constraint failed: purchases_purchase.idempotency_key"
    # PostgreSQL: 'duplicate key value violates unique constraint "unique_purchase_idempotency_key"'
    message = str(error).lower()
    return IDEMPOTENCY_CONSTRAINT in message or "idempotency_key" in message


class DjangoPurchaseStore(BasePurchaseStore):
    """Purchase store on the Django ORM."""

    def get_by_id(self, purchase_id: UUID) -> Optional[Purchase]:
        try:
            record = PurchaseRecord.objects.filter(pk=purchase_id).first()
        except DatabaseError as e:
            raise PurchaseStoreError(f"Failed to load purchase {purchase_id}: {e}") from e
        return to_entity(record) if record else None

    def get_by_key(self, idempotency_key: str) -> Optional[Purchase]:
        """Read from the write database so a row committed by another request is visible."""
        alias = router.db_for_write(PurchaseRecord)
        try:
            record = (
                PurchaseRecord.objects
                .using(alias)
                .filter(idempotency_key=idempotency_key)
                .first()
            )
        except DatabaseError as e:
            raise PurchaseStoreError(f"Failed to look up idempotency key {idempotency_key}: {e}") from e
        return to_entity(record) if record else None

    def add(self, purchase: Purchase) -> None:
        try:
            with transaction.atomic(using=router.db_for_write(PurchaseRecord)):
                PurchaseRecord.objects.create(
                    id=purchase.id,
                    description=purchase.description,
                    transaction_date=purchase.transaction_date,
                    amount=purchase.original_amount.amount,
                    currency=purchase.original_amount.currency,
                    idempotency_key=purchase.idempotency_key,
                )
        except IntegrityError as e:
            if purchase.idempotency_key and is_idempotency_violation(e):
                raise DuplicateIdempotencyKey(purchase.idempotency_key) from e
            raise PurchaseStoreError(f"Failed to store purchase {purchase.id}: {e}") from e
        except DatabaseError as e:
            raise PurchaseStoreError(f"Failed to store purchase {purchase.id}: {e}") from e
