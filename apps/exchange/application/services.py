"""
Wiring for the exchange bounded context.
Builds domain services from Django settings so the domain stays framework-free.
"""

from django.conf import settings
from django.utils import timezone

from apps.exchange.domain.config import ExchangeRateConfig
from apps.exchange.domain.services import ExchangeRateResolver
from apps.exchange.infrastructure.cache import DjangoRateCache
from apps.exchange.infrastructure.providers.registry import get_rate_source


def get_exchange_rate_config() -> ExchangeRateConfig:
    return ExchangeRateConfig.from_dict(settings.EXCHANGE_RATES)


def get_exchange_rate_resolver() -> ExchangeRateResolver:
    config = get_exchange_rate_config()
    return ExchangeRateResolver(
        rate_source=get_rate_source(),
        rate_cache=DjangoRateCache(settings.EXCHANGE_RATES.get("CACHE_ALIAS", "rates")),
        config=config,
        clock=timezone.localdate,
    )
