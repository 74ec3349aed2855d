"""
Domain services - Core business logic.
Resolves historical exchange rates through a per-currency bucket cache and
converts money using the resolved rate.
"""

import calendar
import json
import logging
from datetime import date
from decimal import Decimal
from typing import Callable

from apps.common.results import RateUnavailable
from apps.exchange.domain.config import ExchangeRateConfig
from apps.exchange.domain.interfaces import BaseRateCache, BaseRateSourceClient
from apps.exchange.domain.models import (
    USD,
    ExchangeRateObservation,
    Money,
    RateBucket,
    ResolvedRate,
    normalize_currency,
)

logger = logging.getLogger(__name__)


def subtract_months(day: date, months: int) -> date:
    """Calendar month arithmetic, clamping to the last day of the target month."""
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def dump_bucket(bucket: RateBucket) -> str:
    return json.dumps([
        {
            "currency": o.currency,
            "rate": str(o.rate),
            "date": o.date.isoformat(),
            "recordDate": o.record_date.isoformat(),
        }
        for o in bucket.observations
    ])


def load_bucket(currency: str, payload: str) -> RateBucket:
    items = json.loads(payload)
    return RateBucket.from_observations(
        currency,
        (
            ExchangeRateObservation(
                currency=item.get("currency") or currency,
                rate=Decimal(item["rate"]),
                date=date.fromisoformat(item["date"]),
                record_date=date.fromisoformat(item.get("recordDate") or item["date"]),
            )
            for item in items
        ),
    )


class ExchangeRateResolver:
    """
    Finds a usable rate for (currency, date).

    Policy:
    1. The processing day (or later) always goes straight to the rate source
       and never touches the cache; a miss is final.
    2. Earlier dates are served from the per-currency bucket: exact date first,
       then the nearest prior date.
    3. On a cache miss, or when the bucket has no match, one range fetch from
       min(date, today - fallback months) replaces the bucket and the search
       is repeated.

    Cache failures of any kind are logged and treated as a miss.
    """

    def __init__(
        self,
        rate_source: BaseRateSourceClient,
        rate_cache: BaseRateCache,
        config: ExchangeRateConfig | None = None,
        clock: Callable[[], date] = date.today,
    ):
        self.rate_source = rate_source
        self.rate_cache = rate_cache
        self.config = config or ExchangeRateConfig()
        self.clock = clock

    def resolve(
        self,
        currency: str,
        as_of: date,
        timeout: float | None = None
    ) -> ResolvedRate | RateUnavailable:
        currency = normalize_currency(currency)
        today = self.clock()

        if as_of >= today:
            logger.info("Fetching current day rate for %s on %s (no cache)", currency, as_of)
            rate = self.rate_source.get_rate(currency, as_of, timeout=timeout)
            if rate is None:
                logger.warning("Exchange rate unavailable for %s on %s", currency, as_of)
                return RateUnavailable(currency, as_of)
            return ResolvedRate(currency, rate, as_of)

        bucket = self._read_bucket(currency)
        if bucket is not None:
            observation = bucket.find(as_of)
            if observation is not None:
                logger.debug(
                    "Found rate %s for %s on %s in bucket cache (effective %s)",
                    observation.rate, currency, as_of, observation.date
                )
                return ResolvedRate(currency, observation.rate, observation.date)

        start_date = min(as_of, subtract_months(today, self.config.fallback_months))
        bucket = self._fetch_bucket(currency, start_date, timeout)

        observation = bucket.find(as_of) if bucket is not None else None
        if observation is None:
            logger.warning("Exchange rate unavailable for %s on %s", currency, as_of)
            return RateUnavailable(currency, as_of)

        return ResolvedRate(currency, observation.rate, observation.date)

    def refresh_bucket(self, currency: str, timeout: float | None = None) -> RateBucket | None:
        """Fetch and cache the lookback window for `currency`. Used for warm-up."""
        currency = normalize_currency(currency)
        start_date = subtract_months(self.clock(), self.config.fallback_months)
        return self._fetch_bucket(currency, start_date, timeout)

    def _fetch_bucket(self, currency: str, start_date: date, timeout: float | None) -> RateBucket | None:
        logger.info("Fetching exchange rates bucket for %s from %s", currency, start_date)
        observations = self.rate_source.get_rates_range(currency, start_date, timeout=timeout)
        if not observations:
            return None

        bucket = RateBucket.from_observations(currency, observations)
        self._write_bucket(bucket)
        logger.info("Cached exchange rate bucket for %s with %d rates", currency, len(bucket))
        return bucket

    def _read_bucket(self, currency: str) -> RateBucket | None:
        key = self.config.bucket_key(currency)
        try:
            payload = self.rate_cache.get(key)
            if not payload:
                return None
            return load_bucket(currency, payload)
        except Exception:
            logger.exception("Error retrieving exchange rates bucket from cache for key %s", key)
            return None

    def _write_bucket(self, bucket: RateBucket) -> None:
        key = self.config.bucket_key(bucket.currency)
        try:
            self.rate_cache.set(key, dump_bucket(bucket), self.config.cache_ttl_seconds)
        except Exception:
            logger.exception("Error caching exchange rates bucket for key %s", key)


def convert_amount(
    original: Money,
    rate: Decimal,
    target_currency: str,
    pivot_currency: str = USD
) -> Money:
    """
    Convert using a rate quoted as units of foreign currency per 1 unit of the
    pivot currency.

    When neither leg is the pivot, the amount goes through the pivot using the
    same single rate for both legs, so only the currency label changes.
    """
    target_currency = normalize_currency(target_currency)
    if original.currency == target_currency:
        return original

    if rate <= 0:
        raise ValueError(f"rate must be positive, got {rate}")

    if original.currency == pivot_currency:
        converted = original.amount * rate
    elif target_currency == pivot_currency:
        converted = original.amount / rate
    else:
        pivot_amount = original.amount / rate
        converted = pivot_amount * rate

    return Money(converted, target_currency)
