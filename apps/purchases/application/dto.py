"""
Data Transfer Objects for the application layer.
DTOs decouple internal domain models from external API contracts.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from apps.exchange.domain.models import Money


@dataclass
class CreatePurchaseDTO:
    """Request DTO for purchase creation."""
    description: str
    transaction_date: date
    amount: Decimal
    currency: str = "USD"
    idempotency_key: Optional[str] = None


@dataclass
class ConvertedPurchaseDTO:
    """Result DTO for a purchase converted into a target currency."""
    id: UUID
    description: str
    transaction_date: date
    original_amount: Money
    converted_amount: Money
    exchange_rate: Decimal
    exchange_rate_date: date
