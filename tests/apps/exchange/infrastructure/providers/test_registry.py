import pytest

from apps.exchange.infrastructure.providers.mock import MockRateSourceClient
from apps.exchange.infrastructure.providers.registry import (
    RATE_SOURCE_REGISTRY,
    RateSourceName,
    build_rate_source,
    get_rate_source,
    get_source_instance,
    reset_rate_source,
)
from apps.exchange.infrastructure.providers.resilient import ResilientRateSourceClient
from apps.exchange.infrastructure.providers.treasury import TreasuryApiClient


class TestRateSourceRegistry:
    """Tests for rate source registry functions."""

    def test_registry_contains_sources(self):
        assert RATE_SOURCE_REGISTRY[RateSourceName.TREASURY] is TreasuryApiClient
        assert RATE_SOURCE_REGISTRY[RateSourceName.MOCK] is MockRateSourceClient

    def test_get_source_instance(self):
        assert isinstance(get_source_instance(RateSourceName.MOCK), MockRateSourceClient)

    def test_get_source_instance_invalid(self):
        assert get_source_instance("invalid_source") is None

    def test_build_rate_source_wraps_configured_source(self, settings):
        settings.EXCHANGE_RATES = {
            "SOURCE": "mock",
            "RETRY_ATTEMPTS": 1,
            "RETRY_BACKOFF_SECONDS": 0.5,
            "CIRCUIT_FAILURE_THRESHOLD": 2,
            "CIRCUIT_RESET_SECONDS": 10,
        }

        source = build_rate_source()

        assert isinstance(source, ResilientRateSourceClient)
        assert isinstance(source.inner, MockRateSourceClient)
        assert source.retry_attempts == 1
        assert source.backoff_seconds == 0.5
        assert source.breaker.failure_threshold == 2
        assert source.breaker.reset_seconds == 10

    def test_build_rate_source_explicit_name(self, settings):
        settings.EXCHANGE_RATES = {"SOURCE": "mock"}

        source = build_rate_source(RateSourceName.TREASURY)

        assert isinstance(source.inner, TreasuryApiClient)

    def test_build_rate_source_unknown(self, settings):
        settings.EXCHANGE_RATES = {"SOURCE": "nope"}

        with pytest.raises(ValueError):
            build_rate_source()

    def test_get_rate_source_is_shared(self, settings):
        settings.EXCHANGE_RATES = {"SOURCE": "mock"}

        first = get_rate_source()

        assert get_rate_source() is first
        reset_rate_source()
        assert get_rate_source() is not first
