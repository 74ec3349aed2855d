from abc import ABC, abstractmethod
from uuid import UUID

from apps.purchases.domain.models import Purchase


class PurchaseStoreError(Exception):
    """Infrastructure-level failure in the purchase store."""


class DuplicateIdempotencyKey(PurchaseStoreError):
    """The store's uniqueness constraint on the idempotency key rejected an insert."""

    def __init__(self, key: str):
        super().__init__(f"Idempotency key already stored: {key}")
        self.key = key


class BasePurchaseStore(ABC):
    """
    Durable storage for purchases.

    Store calls take no cancellation token or timeout argument. Each call is
    bounded by the database itself: `statement_timeout` on PostgreSQL and the
    busy `timeout` on SQLite (see DATABASES in core/settings.py). A call that
    runs past either limit surfaces as PurchaseStoreError.
    """

    @abstractmethod
    def get_by_id(self, purchase_id: UUID) -> Purchase | None:
        pass

    @abstractmethod
    def get_by_key(self, idempotency_key: str) -> Purchase | None:
        """
        Fresh read that must observe rows committed by other requests,
        bypassing any session-local or replica state.
        """
        pass

    @abstractmethod
    def add(self, purchase: Purchase) -> None:
        """
        Atomically insert `purchase`.

        Raises:
            DuplicateIdempotencyKey: the key is already stored
            PurchaseStoreError: any other storage failure
        """
        pass
