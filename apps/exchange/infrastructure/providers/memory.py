"""
In-memory rate source backed by a fixed list of observations.
Records every call so tests can assert how often the upstream was hit.
"""

from datetime import date
from decimal import Decimal

from apps.exchange.domain.interfaces import BaseRateSourceClient
from apps.exchange.domain.models import ExchangeRateObservation, normalize_currency


class InMemoryRateSourceClient(BaseRateSourceClient):

    def __init__(self, observations: list[ExchangeRateObservation] | None = None):
        self.observations = list(observations or [])
        self.rate_calls: list[tuple[str, date]] = []
        self.range_calls: list[tuple[str, date]] = []

    def add(self, currency: str, on_date: date, rate) -> None:
        self.observations.append(
            ExchangeRateObservation(currency=currency, rate=Decimal(str(rate)), date=on_date)
        )

    def get_rate(self, currency: str, on_date: date, timeout: float | None = None) -> Decimal | None:
        currency = normalize_currency(currency)
        self.rate_calls.append((currency, on_date))
        for observation in self.observations:
            if observation.currency == currency and observation.date == on_date:
                return observation.rate
        return None

    def get_rates_range(
        self,
        currency: str,
        start_date: date,
        timeout: float | None = None
    ) -> list[ExchangeRateObservation]:
        currency = normalize_currency(currency)
        self.range_calls.append((currency, start_date))
        matches = [
            o for o in self.observations
            if o.currency == currency and o.date >= start_date
        ]
        return sorted(matches, key=lambda o: o.date, reverse=True)
