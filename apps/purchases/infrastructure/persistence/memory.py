"""
Thread-safe in-memory purchase store with the same uniqueness semantics as
the database constraint.
"""

import threading
from typing import Optional
from uuid import UUID

from apps.purchases.domain.interfaces import BasePurchaseStore, DuplicateIdempotencyKey
from apps.purchases.domain.models import Purchase


class InMemoryPurchaseStore(BasePurchaseStore):

    def __init__(self):
        self._by_id: dict[UUID, Purchase] = {}
        self._by_key: dict[str, UUID] = {}
        self._lock = threading.Lock()

    def get_by_id(self, purchase_id: UUID) -> Optional[Purchase]:
        with self._lock:
            return self._by_id.get(purchase_id)

    def get_by_key(self, idempotency_key: str) -> Optional[Purchase]:
        with self._lock:
            purchase_id = self._by_key.get(idempotency_key)
            return self._by_id.get(purchase_id) if purchase_id else None

    def add(self, purchase: Purchase) -> None:
        with self._lock:
            key = purchase.idempotency_key
            if key is not None and key in self._by_key:
                raise DuplicateIdempotencyKey(key)
            self._by_id[purchase.id] = purchase
            if key is not None:
                self._by_key[key] = purchase.id

    def all(self) -> list[Purchase]:
        with self._lock:
            return list(self._by_id.values())

    def count(self) -> int:
        with self._lock:
            return len(self._by_id)
