import logging
from datetime import date
from decimal import Decimal, InvalidOperation

import requests
from django.conf import settings

from apps.exchange.domain.interfaces import BaseRateSourceClient, RateSourceError
from apps.exchange.domain.models import ExchangeRateObservation, normalize_currency

logger = logging.getLogger(__name__)

RATES_OF_EXCHANGE_PATH = "/services/api/fiscal_service/v1/accounting/od/rates_of_exchange"
FIELDS = "country_currency_desc,exchange_rate,effective_date,record_date"
USER_AGENT = "purchase-ledger/1.0"
RANGE_PAGE_SIZE = 1000

# ISO code -> Treasury "country_currency_desc"
TREASURY_CURRENCY_DESCRIPTIONS = {
    "AUD": "Australia-Dollar",
    "BRL": "Brazil-Real",
    "CAD": "Canada-Dollar",
    "CHF": "Switzerland-Franc",
    "CNY": "China-Renminbi",
    "EUR": "Euro Zone-Euro",
    "GBP": "United Kingdom-Pound",
    "INR": "India-Rupee",
    "JPY": "Japan-Yen",
    "MXN": "Mexico-Peso",
    "ZAR": "South Africa-Rand",
}

RETRYABLE_STATUS_CODES = {408, 429}


def treasury_currency_desc(currency: str) -> str:
    """Map an ISO code to the Treasury descriptor; anything else passes through."""
    return TREASURY_CURRENCY_DESCRIPTIONS.get(currency.strip().upper(), currency.strip())


class TreasuryApiClient(BaseRateSourceClient):
    """
    U.S. Treasury Fiscal Data "Rates of Exchange" provider.
    Rates are published as units of foreign currency per 1 USD.

    Transport failures (timeouts, connection errors, 5xx/408/429) raise
    RateSourceError so a resilient wrapper can retry them. Everything else that
    does not yield a usable rate is reported as "no data".
    """

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = (base_url or settings.TREASURY_API_URL).rstrip("/")
        self.timeout = timeout or settings.EXCHANGE_RATES.get("SOURCE_TIMEOUT_SECONDS", 10)

    def get_rate(self, currency: str, on_date: date, timeout: float | None = None) -> Decimal | None:
        """
        Fetch the rate published for exactly `on_date`.

        Returns:
            Exchange rate as Decimal, or None if the date has no usable record
        """
        date_str = on_date.strftime("%Y-%m-%d")
        params = {
            "fields": FIELDS,
            "filter": f"country_currency_desc:eq:{treasury_currency_desc(currency)},record_date:eq:{date_str}",
            "sort": "-record_date",
            "page[size]": 1,
        }

        records = self._fetch(params, timeout)
        for record in records:
            observation = self._parse_record(currency, record)
            if observation is not None:
                logger.info("Retrieved exchange rate %s for %s on %s", observation.rate, currency, date_str)
                return observation.rate

        logger.warning("No exchange rate found for %s on %s", currency, date_str)
        return None

    def get_rates_range(
        self,
        currency: str,
        start_date: date,
        timeout: float | None = None
    ) -> list[ExchangeRateObservation]:
        start_str = start_date.strftime("%Y-%m-%d")
        params = {
            "fields": FIELDS,
            "filter": f"country_currency_desc:eq:{treasury_currency_desc(currency)},record_date:gte:{start_str}",
            "sort": "-record_date",
            "page[size]": RANGE_PAGE_SIZE,
        }

        observations = []
        for record in self._fetch(params, timeout):
            observation = self._parse_record(currency, record)
            if observation is not None:
                observations.append(observation)

        observations.sort(key=lambda o: o.date, reverse=True)
        logger.info("Retrieved %d exchange rates for %s from %s", len(observations), currency, start_str)
        return observations

    def _fetch(self, params: dict, timeout: float | None) -> list[dict]:
        url = f"{self.base_url}{RATES_OF_EXCHANGE_PATH}"
        logger.debug("Calling Treasury API: %s %s", url, params)

        try:
            response = requests.get(
                url,
                params=params,
                headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
                timeout=timeout or self.timeout,
            )
        except requests.exceptions.Timeout as e:
            logger.error("Timeout calling Treasury API: %s", e)
            raise RateSourceError(f"Timeout calling Treasury API: {e}") from e
        except requests.exceptions.RequestException as e:
            logger.error("HTTP error calling Treasury API: %s", e)
            raise RateSourceError(f"HTTP error calling Treasury API: {e}") from e

        if response.status_code >= 500 or response.status_code in RETRYABLE_STATUS_CODES:
            logger.error("Treasury API responded with status %s", response.status_code)
            raise RateSourceError(f"Treasury API responded with status {response.status_code}")

        if response.status_code != 200:
            logger.warning("Treasury API responded with status %s, treating as no data", response.status_code)
            return []

        try:
            payload = response.json()
        except ValueError as e:
            logger.warning("Invalid JSON from Treasury API: %s", e)
            return []

        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, list):
            logger.warning("Treasury API response has no data list")
            return []
        return data

    @staticmethod
    def _parse_record(currency: str, record: dict) -> ExchangeRateObservation | None:
        # Response format: {"data": [{"exchange_rate": "4.97", "record_date": "2023-12-31", ...}]}
        if not isinstance(record, dict):
            return None
        try:
            rate = Decimal(str(record["exchange_rate"]).strip())
            record_date = date.fromisoformat(record["record_date"])
            effective = record.get("effective_date")
            effective_date = date.fromisoformat(effective) if effective else record_date
        except (KeyError, TypeError, ValueError, InvalidOperation) as e:
            logger.warning("Skipping malformed Treasury record %s: %s", record, e)
            return None

        if not rate.is_finite() or rate <= 0:
            logger.warning("Skipping non-positive Treasury rate %s for %s", rate, currency)
            return None

        return ExchangeRateObservation(
            currency=normalize_currency(currency),
            rate=rate,
            date=effective_date,
            record_date=record_date,
        )
