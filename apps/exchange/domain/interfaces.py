from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal

from apps.exchange.domain.models import ExchangeRateObservation


class RateSourceError(Exception):
    """Transport-level failure talking to a rate source. Safe to retry."""


class BaseRateSourceClient(ABC):
    """
    Historical exchange rates, published as units of foreign currency per 1 USD.

    Empty or malformed upstream data means "no data": return None / [] instead
    of raising.
    """

    @abstractmethod
    def get_rate(self, currency: str, on_date: date, timeout: float | None = None) -> Decimal | None:
        pass

    @abstractmethod
    def get_rates_range(
        self,
        currency: str,
        start_date: date,
        timeout: float | None = None
    ) -> list[ExchangeRateObservation]:
        """Observations on or after `start_date`, newest first."""
        pass


class BaseRateCache(ABC):
    """String blobs by key with a TTL. Callers treat any failure as a miss."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        pass

    @abstractmethod
    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        pass
