"""
Rate source health probe.
Asks for a historical record that is known to exist.
"""

import logging
from dataclasses import dataclass
from datetime import date

from apps.exchange.domain.interfaces import BaseRateSourceClient

logger = logging.getLogger(__name__)

PROBE_CURRENCY = "CAD"
PROBE_DATE = date(2014, 12, 31)
PROBE_TIMEOUT_SECONDS = 5.0


class HealthStatus:
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class HealthReport:
    status: str
    description: str

    @property
    def is_available(self) -> bool:
        return self.status != HealthStatus.UNHEALTHY


def check_rate_source_health(rate_source: BaseRateSourceClient) -> HealthReport:
    try:
        rate = rate_source.get_rate(PROBE_CURRENCY, PROBE_DATE, timeout=PROBE_TIMEOUT_SECONDS)
    except Exception as e:
        logger.exception("Rate source health check failed")
        return HealthReport(HealthStatus.UNHEALTHY, f"Rate source is unavailable: {e}")

    if rate is not None:
        return HealthReport(HealthStatus.HEALTHY, "Rate source is responding correctly")

    breaker = getattr(rate_source, "breaker", None)
    if breaker is not None and breaker.state == breaker.OPEN:
        logger.error("Rate source health check failed, circuit breaker is open")
        return HealthReport(HealthStatus.UNHEALTHY, "Rate source is unavailable (circuit open)")

    logger.warning("Rate source health check returned no data")
    return HealthReport(HealthStatus.DEGRADED, "Rate source responded but no data available")
