"""
Failure results returned by core operations.

Core services return either their success value or one of these frozen
records; callers branch with isinstance() instead of catching exceptions.
"""

from dataclasses import dataclass
from datetime import date
from typing import ClassVar
from uuid import UUID


@dataclass(frozen=True)
class Failure:

    code: ClassVar[str] = "UNEXPECTED_ERROR"

    @property
    def message(self) -> str:
        return "Unexpected error"


@dataclass(frozen=True)
class Conflict(Failure):
    """Same idempotency key, different payload."""

    code: ClassVar[str] = "IDEMPOTENCY_CONFLICT"

    key: str

    @property
    def message(self) -> str:
        return f"Idempotency key '{self.key}' was already used with a different payload"


@dataclass(frozen=True)
class NotFound(Failure):

    code: ClassVar[str] = "PURCHASE_NOT_FOUND"

    purchase_id: UUID

    @property
    def message(self) -> str:
        return f"Purchase with ID {self.purchase_id} not found"


@dataclass(frozen=True)
class RateUnavailable(Failure):
    """No usable exchange rate within the lookback policy."""

    code: ClassVar[str] = "EXCHANGE_RATE_UNAVAILABLE"

    currency: str
    date: date

    @property
    def message(self) -> str:
        return f"No exchange rate available for {self.currency} on or before {self.date.isoformat()}"


@dataclass(frozen=True)
class StorageError(Failure):

    code: ClassVar[str] = "STORAGE_ERROR"

    detail: str = ""

    @property
    def message(self) -> str:
        return f"Storage failure: {self.detail}" if self.detail else "Storage failure"
