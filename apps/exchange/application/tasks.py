"""
Celery tasks for background processing.
"""

import logging
from typing import Dict, List

from celery import shared_task

from apps.exchange.application.health import check_rate_source_health as run_health_check
from apps.exchange.application.services import get_exchange_rate_resolver
from apps.exchange.infrastructure.providers.registry import get_rate_source

logger = logging.getLogger(__name__)


@shared_task(name="warm_rate_buckets")
def warm_rate_buckets(currencies: List[str]) -> Dict:
    """
    Pre-fetch and cache the lookback bucket for each currency, so the first
    conversion of the day does not pay for the range fetch.

    Args:
        currencies: Currency codes (e.g. ["BRL", "EUR"])

    Returns:
        Dict with operation results
    """
    if not currencies:
        return {
            "success": False,
            "message": "No currencies given",
            "currencies_warmed": [],
            "errors": [],
        }

    resolver = get_exchange_rate_resolver()
    warmed = []
    errors = []

    for currency in currencies:
        bucket = resolver.refresh_bucket(currency)
        if bucket is None:
            errors.append(f"No rates fetched for {currency.upper()}")
            continue
        warmed.append(bucket.currency)
        logger.info("Warmed rate bucket for %s with %d rates", bucket.currency, len(bucket))

    return {
        "success": bool(warmed),
        "currencies_warmed": warmed,
        "errors": errors,
    }


@shared_task(name="check_rate_source_health")
def check_rate_source_health() -> Dict:
    report = run_health_check(get_rate_source())
    if not report.is_available:
        logger.error("Rate source health: %s", report.description)
    return {"status": report.status, "description": report.description}
