"""
Rate source registry - Maps the configured source name to an adapter class.
This is the glue between settings and the actual implementation.
"""

import logging

from django.conf import settings

from apps.exchange.domain.interfaces import BaseRateSourceClient
from apps.exchange.infrastructure.providers.mock import MockRateSourceClient
from apps.exchange.infrastructure.providers.resilient import CircuitBreaker, ResilientRateSourceClient
from apps.exchange.infrastructure.providers.treasury import TreasuryApiClient

logger = logging.getLogger(__name__)


class RateSourceName:
    TREASURY = "treasury"
    MOCK = "mock"


# Registry: Maps source name to the corresponding adapter class
RATE_SOURCE_REGISTRY: dict[str, type[BaseRateSourceClient]] = {
    RateSourceName.TREASURY: TreasuryApiClient,
    RateSourceName.MOCK: MockRateSourceClient,
}

_rate_source: BaseRateSourceClient | None = None


def get_source_instance(source_name: str) -> BaseRateSourceClient | None:
    """
    Get an instance of a rate source by its name.

    Returns:
        Instance of the adapter, or None if not registered
    """
    source_class = RATE_SOURCE_REGISTRY.get(source_name)

    if source_class is None:
        logger.error("Rate source '%s' not found in registry", source_name)
        return None

    return source_class()


def build_rate_source(source_name: str | None = None) -> BaseRateSourceClient:
    """
    Build the configured rate source wrapped in retry + circuit breaking.

    Raises:
        ValueError: the configured source is not registered
    """
    config = settings.EXCHANGE_RATES
    source_name = source_name or config.get("SOURCE", RateSourceName.TREASURY)

    inner = get_source_instance(source_name)
    if inner is None:
        raise ValueError(f"Unknown rate source '{source_name}'")

    breaker = CircuitBreaker(
        failure_threshold=int(config.get("CIRCUIT_FAILURE_THRESHOLD", 5)),
        reset_seconds=float(config.get("CIRCUIT_RESET_SECONDS", 30)),
    )
    return ResilientRateSourceClient(
        inner,
        retry_attempts=int(config.get("RETRY_ATTEMPTS", 3)),
        backoff_seconds=float(config.get("RETRY_BACKOFF_SECONDS", 2.0)),
        breaker=breaker,
    )


def get_rate_source() -> BaseRateSourceClient:
    """Process-wide rate source, so breaker state survives across requests."""
    global _rate_source
    if _rate_source is None:
        _rate_source = build_rate_source()
    return _rate_source


def reset_rate_source() -> None:
    global _rate_source
    _rate_source = None
