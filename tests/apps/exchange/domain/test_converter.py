import pytest
from decimal import Decimal

from apps.exchange.domain.models import Money
from apps.exchange.domain.services import convert_amount


class TestConvertAmount:
    """Tests for USD-pivot conversion."""

    def test_usd_to_foreign_multiplies(self):
        result = convert_amount(Money(Decimal("150.00")), Decimal("4.90"), "BRL")

        assert result == Money(Decimal("735.00"), "BRL")

    def test_foreign_to_usd_divides(self):
        result = convert_amount(Money(Decimal("100.00"), "EUR"), Decimal("0.92"), "USD")

        assert result == Money(Decimal("108.70"), "USD")

    def test_result_rounded_half_up(self):
        result = convert_amount(Money(Decimal("10.01")), Decimal("1.5"), "CAD")

        # 15.015 -> 15.02
        assert result.amount == Decimal("15.02")

    def test_same_currency_returns_original(self):
        original = Money(Decimal("42.00"), "BRL")

        assert convert_amount(original, Decimal("4.90"), "brl") is original

    def test_cross_rate_uses_single_rate_for_both_legs(self):
        """
        Neither side is the pivot: divide and multiply by the same rate.
        """
        result = convert_amount(Money(Decimal("100.00"), "EUR"), Decimal("4.90"), "BRL")

        assert result == Money(Decimal("100.00"), "BRL")

    def test_rejects_non_positive_rate(self):
        with pytest.raises(ValueError):
            convert_amount(Money(Decimal("1.00")), Decimal("0"), "BRL")

    def test_custom_pivot(self):
        result = convert_amount(Money(Decimal("10.00"), "EUR"), Decimal("2"), "GBP", pivot_currency="EUR")

        assert result == Money(Decimal("20.00"), "GBP")
