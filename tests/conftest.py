import pytest
from django.core.cache import caches

from apps.exchange.infrastructure.providers.registry import reset_rate_source


@pytest.fixture(autouse=True)
def clean_rate_state():
    """Rate buckets and the shared rate source must not leak between tests."""
    caches["rates"].clear()
    reset_rate_source()
    yield
    caches["rates"].clear()
    reset_rate_source()
