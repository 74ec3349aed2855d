"""
Domain services - Core business logic.
Owns the create-purchase protocol with idempotent replay.
"""

import logging
from datetime import date
from decimal import Decimal
from uuid import UUID

from apps.common.results import Conflict, StorageError
from apps.exchange.domain.models import Money
from apps.purchases.domain.interfaces import (
    BasePurchaseStore,
    DuplicateIdempotencyKey,
    PurchaseStoreError,
)
from apps.purchases.domain.models import (
    Purchase,
    generate_surrogate_key,
    normalize_idempotency_key,
)

logger = logging.getLogger(__name__)


class PurchaseIngestionService:
    """
    Creates purchases, at most one per client-supplied idempotency key.

    Protocol:
    1. No key (or an empty one): a surrogate key is generated, so unrelated
       submissions never collide and each creates its own row.
    2. With a key: a fresh lookup short-circuits replays. Same payload returns
       the stored id, a different payload is a Conflict.
    3. Otherwise insert. Two requests can both pass step 2; the store's unique
       constraint decides the winner. The loser re-reads the key and applies
       the same replay-or-conflict rule.

    The lookup in step 2 is only a shortcut; correctness rests on the
    constraint. No locks are taken.
    """

    def __init__(self, store: BasePurchaseStore):
        self.store = store

    def create(
        self,
        description: str,
        transaction_date: date,
        amount: Decimal,
        currency: str,
        idempotency_key: str | None = None,
    ) -> UUID | Conflict | StorageError:
        money = Money(amount, currency)
        client_key = normalize_idempotency_key(idempotency_key)

        if client_key is not None:
            try:
                existing = self.store.get_by_key(client_key)
            except PurchaseStoreError as e:
                logger.exception("Failed to look up idempotency key %s", client_key)
                return StorageError(str(e))

            if existing is not None:
                return self._replay_or_conflict(existing, client_key, description, transaction_date, money)

        purchase = Purchase(
            description=description,
            transaction_date=transaction_date,
            original_amount=money,
            idempotency_key=client_key or generate_surrogate_key(),
        )

        try:
            self.store.add(purchase)
        except DuplicateIdempotencyKey:
            if client_key is None:
                logger.error("Generated idempotency key collided: %s", purchase.idempotency_key)
                return StorageError("Generated idempotency key collided")
            return self._resolve_race(client_key, description, transaction_date, money)
        except PurchaseStoreError as e:
            logger.exception("Failed to store purchase %s", purchase.id)
            return StorageError(str(e))

        logger.info("Stored purchase %s (%s)", purchase.id, purchase.original_amount)
        return purchase.id

    def _resolve_race(
        self,
        client_key: str,
        description: str,
        transaction_date: date,
        money: Money,
    ) -> UUID | Conflict | StorageError:
        try:
            winner = self.store.get_by_key(client_key)
        except PurchaseStoreError as e:
            logger.exception("Failed to re-read idempotency key %s after a uniqueness violation", client_key)
            return StorageError(str(e))

        if winner is None:
            logger.error("Uniqueness violation for key %s but no stored purchase found", client_key)
            return StorageError(f"Uniqueness violation for key {client_key} but no stored purchase found")

        logger.info("Concurrent create for key %s resolved against purchase %s", client_key, winner.id)
        return self._replay_or_conflict(winner, client_key, description, transaction_date, money)

    @staticmethod
    def _replay_or_conflict(
        existing: Purchase,
        client_key: str,
        description: str,
        transaction_date: date,
        money: Money,
    ) -> UUID | Conflict:
        if existing.same_payload(description, transaction_date, money):
            logger.info("Idempotent replay for key %s, returning purchase %s", client_key, existing.id)
            return existing.id

        logger.warning("Idempotency conflict detected for key %s", client_key)
        return Conflict(client_key)
