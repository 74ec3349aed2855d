import pytest
from datetime import date
from decimal import Decimal

from apps.exchange.domain.models import (
    ExchangeRateObservation,
    Money,
    RateBucket,
    normalize_currency,
    round_money,
)


class TestMoney:
    """Tests for the Money value object."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("100.004", Decimal("100.00")),
            ("100.005", Decimal("100.01")),
            ("100.125", Decimal("100.13")),
            ("0.005", Decimal("0.01")),
        ],
    )
    def test_rounds_half_up_to_cents(self, raw, expected):
        assert Money(Decimal(raw)).amount == expected

    def test_rejects_amount_rounding_to_zero(self):
        with pytest.raises(ValueError):
            Money(Decimal("0.004"))

    def test_rejects_negative_amount(self):
        with pytest.raises(ValueError):
            Money(Decimal("-5.00"))

    def test_normalizes_currency(self):
        money = Money(Decimal("10"), " brl ")

        assert money.currency == "BRL"
        assert money.amount == Decimal("10.00")

    def test_defaults_to_usd(self):
        assert Money(Decimal("1")).currency == "USD"
        assert Money(Decimal("2.50")) == Money(Decimal("2.50"), "USD")

    def test_str(self):
        assert str(Money(Decimal("1234"), "USD")) == "USD 1,234.00"


def test_round_money_accepts_floats_and_strings():
    assert round_money(2.675) == Decimal("2.68")
    assert round_money("3.333") == Decimal("3.33")


def test_normalize_currency_rejects_blank():
    with pytest.raises(ValueError):
        normalize_currency("  ")
    with pytest.raises(ValueError):
        normalize_currency(None)


class TestExchangeRateObservation:

    def test_record_date_defaults_to_date(self):
        observation = ExchangeRateObservation("brl", Decimal("4.9"), date(2023, 12, 14))

        assert observation.currency == "BRL"
        assert observation.record_date == date(2023, 12, 14)

    def test_rejects_non_positive_rate(self):
        with pytest.raises(ValueError):
            ExchangeRateObservation("BRL", Decimal("0"), date(2023, 12, 14))


class TestRateBucket:
    """Tests for nearest-prior lookup in a rate bucket."""

    @pytest.fixture
    def bucket(self):
        return RateBucket.from_observations(
            "BRL",
            [
                ExchangeRateObservation("BRL", Decimal("4.85"), date(2023, 9, 30)),
                ExchangeRateObservation("BRL", Decimal("4.97"), date(2023, 12, 31)),
                ExchangeRateObservation("BRL", Decimal("4.90"), date(2023, 12, 14)),
            ],
        )

    def test_keeps_newest_first(self, bucket):
        assert [o.date for o in bucket.observations] == [
            date(2023, 12, 31),
            date(2023, 12, 14),
            date(2023, 9, 30),
        ]
        assert len(bucket) == 3

    def test_exact_match(self, bucket):
        assert bucket.find(date(2023, 12, 14)).rate == Decimal("4.90")

    def test_nearest_prior(self, bucket):
        assert bucket.find(date(2023, 12, 20)).date == date(2023, 12, 14)
        assert bucket.find(date(2024, 1, 5)).date == date(2023, 12, 31)

    def test_nothing_on_or_before(self, bucket):
        assert bucket.find(date(2023, 9, 29)) is None

    def test_empty_bucket(self):
        assert RateBucket("EUR").find(date(2023, 1, 1)) is None
