from dataclasses import dataclass

from apps.exchange.domain.models import USD


@dataclass(frozen=True)
class ExchangeRateConfig:
    """Tunables for rate resolution, built once from settings."""

    fallback_months: int = 6
    cache_ttl_hours: int = 24
    cache_key_prefix: str = "exchange_rates_bucket_"
    pivot_currency: str = USD

    @property
    def cache_ttl_seconds(self) -> int:
        return self.cache_ttl_hours * 3600

    def bucket_key(self, currency: str) -> str:
        return f"{self.cache_key_prefix}{currency}"

    @classmethod
    def from_dict(cls, values: dict) -> "ExchangeRateConfig":
        defaults = cls()
        return cls(
            fallback_months=int(values.get("FALLBACK_MONTHS", defaults.fallback_months)),
            cache_ttl_hours=int(values.get("CACHE_TTL_HOURS", defaults.cache_ttl_hours)),
            cache_key_prefix=values.get("CACHE_KEY_PREFIX", defaults.cache_key_prefix),
            pivot_currency=values.get("PIVOT_CURRENCY", defaults.pivot_currency).upper(),
        )
