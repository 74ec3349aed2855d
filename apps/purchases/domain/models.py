"""
Pure domain entities (POPOs).
No dependency on Django or the ORM.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional
from uuid import UUID, uuid4

from apps.exchange.domain.models import Money

GENERATED_KEY_PREFIX = "auto-"


def generate_surrogate_key() -> str:
    """Per-request key for submissions that did not ask for deduplication."""
    return f"{GENERATED_KEY_PREFIX}{uuid4().hex}"


def normalize_idempotency_key(key: Optional[str]) -> Optional[str]:
    if key is None:
        return None
    key = key.strip()
    return key or None


@dataclass(frozen=True)
class Purchase:
    """
    A recorded purchase. Written once, never mutated.
    The id is assigned here, independent of storage.
    """

    description: str
    transaction_date: date
    original_amount: Money
    idempotency_key: Optional[str] = None
    id: UUID = field(default_factory=uuid4)

    def __post_init__(self):
        if not self.description or not self.description.strip():
            raise ValueError("description is required")

    @property
    def has_client_key(self) -> bool:
        return bool(self.idempotency_key) and not self.idempotency_key.startswith(GENERATED_KEY_PREFIX)

    def same_payload(self, description: str, transaction_date: date, amount: Money) -> bool:
        """Compare the canonical fields used for idempotent replay."""
        return (
            self.description == description
            and self.transaction_date == transaction_date
            and self.original_amount == amount
        )
