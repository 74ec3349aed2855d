"""
Mock rate source for development.
Generates random but realistic, reproducible exchange rates without network access.
"""

import logging
import random
from datetime import date, timedelta
from decimal import Decimal

from apps.exchange.domain.interfaces import BaseRateSourceClient
from apps.exchange.domain.models import ExchangeRateObservation, normalize_currency

logger = logging.getLogger(__name__)


class MockRateSourceClient(BaseRateSourceClient):
    """
    Mock provider that generates exchange rates per 1 USD.
    Useful for:
    - Local development without calling the Treasury API
    - Demo environments
    Publishes on weekdays only, so weekends exercise the nearest-prior fallback.
    """

    # Base rates relative to USD (approximate real-world values)
    BASE_RATES = {
        "USD": Decimal("1.0"),
        "EUR": Decimal("0.92"),
        "GBP": Decimal("0.79"),
        "CHF": Decimal("0.88"),
        "BRL": Decimal("4.95"),
        "CAD": Decimal("1.36"),
        "JPY": Decimal("148.5"),
        "MXN": Decimal("17.2"),
    }

    def get_rate(self, currency: str, on_date: date, timeout: float | None = None) -> Decimal | None:
        currency = normalize_currency(currency)
        base_rate = self.BASE_RATES.get(currency)

        if base_rate is None:
            logger.warning("MockRateSourceClient: unsupported currency %s", currency)
            return None
        if on_date.weekday() >= 5:
            return None

        # Use currency and date as seed for reproducibility
        rng = random.Random(f"{currency}{on_date.isoformat()}")
        variation = Decimal(str(rng.uniform(0.98, 1.02)))
        return (base_rate * variation).quantize(Decimal("0.000001"))

    def get_rates_range(
        self,
        currency: str,
        start_date: date,
        timeout: float | None = None
    ) -> list[ExchangeRateObservation]:
        observations = []
        day = date.today()
        while day >= start_date:
            rate = self.get_rate(currency, day)
            if rate is not None:
                observations.append(ExchangeRateObservation(currency=currency, rate=rate, date=day))
            day -= timedelta(days=1)
        return observations
