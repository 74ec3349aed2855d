"""
Pure domain entities (POPOs).
No dependency on Django or the ORM.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

USD = "USD"

CENTS = Decimal("0.01")


def normalize_currency(code: str) -> str:
    if code is None or not str(code).strip():
        raise ValueError("Currency is required")
    return str(code).strip().upper()


def round_money(amount) -> Decimal:
    """Round to 2 places, half away from zero."""
    return Decimal(str(amount)).quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Money:

    amount: Decimal
    currency: str = USD

    def __post_init__(self):
        rounded = round_money(self.amount)
        if rounded <= 0:
            raise ValueError(f"Amount must be positive, got {self.amount}")
        object.__setattr__(self, "amount", rounded)
        object.__setattr__(self, "currency", normalize_currency(self.currency))

    def __str__(self):
        return f"{self.currency} {self.amount:,.2f}"


@dataclass(frozen=True)
class ExchangeRateObservation:
    """One published rate point: units of `currency` per 1 USD."""

    currency: str
    rate: Decimal
    date: date
    record_date: Optional[date] = None

    def __post_init__(self):
        if self.rate <= 0:
            raise ValueError(f"rate must be positive, got {self.rate}")
        object.__setattr__(self, "currency", normalize_currency(self.currency))
        if self.record_date is None:
            object.__setattr__(self, "record_date", self.date)


@dataclass(frozen=True)
class RateBucket:
    """
    All known observations for one currency, cached and refreshed as a unit.
    Observations are kept newest first.
    """

    currency: str
    observations: tuple = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "currency", normalize_currency(self.currency))
        object.__setattr__(
            self,
            "observations",
            tuple(sorted(self.observations, key=lambda o: o.date, reverse=True)),
        )

    @classmethod
    def from_observations(cls, currency: str, observations: Iterable[ExchangeRateObservation]) -> "RateBucket":
        return cls(currency=currency, observations=tuple(observations))

    def __len__(self):
        return len(self.observations)

    def find(self, as_of: date) -> Optional[ExchangeRateObservation]:
        """
        Exact match on `as_of` wins; otherwise the latest observation strictly
        before it. Returns None when neither exists.
        """
        for observation in self.observations:
            if observation.date == as_of:
                return observation
        for observation in self.observations:
            if observation.date < as_of:
                return observation
        return None


@dataclass(frozen=True)
class ResolvedRate:

    currency: str
    rate: Decimal
    effective_date: date
