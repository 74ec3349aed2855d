"""
Serializers for the purchases bounded context.
Handles validation and transformation between API and application layers.
"""

from decimal import Decimal

from django.utils import timezone
from rest_framework import serializers

from apps.purchases.application.dto import CreatePurchaseDTO
from apps.purchases.application.services import get_purchase_config


class PurchaseCreateSerializer(serializers.Serializer):
    description = serializers.CharField(max_length=50)
    transaction_date = serializers.DateField()
    amount = serializers.DecimalField(
        max_digits=18,
        decimal_places=2,
        min_value=Decimal("0.01"),
    )
    currency = serializers.CharField(min_length=3, max_length=3, default="USD")
    idempotency_key = serializers.CharField(
        max_length=255,
        required=False,
        allow_blank=True,
        allow_null=True,
    )

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # Length limits follow the PURCHASES settings
        config = get_purchase_config()
        self.fields["description"] = serializers.CharField(max_length=config.description_max_length)
        self.fields["idempotency_key"] = serializers.CharField(
            max_length=config.idempotency_key_max_length,
            required=False,
            allow_blank=True,
            allow_null=True,
        )

    def validate_transaction_date(self, value):
        if value > timezone.localdate():
            raise serializers.ValidationError("Transaction date cannot be in the future.")
        return value

    def validate_currency(self, value: str) -> str:
        if not value.isalpha():
            raise serializers.ValidationError("Currency must be a 3-letter code.")
        return value.upper()

    def to_dto(self) -> CreatePurchaseDTO:
        data = self.validated_data
        return CreatePurchaseDTO(
            description=data["description"],
            transaction_date=data["transaction_date"],
            amount=data["amount"],
            currency=data["currency"],
            idempotency_key=data.get("idempotency_key"),
        )


class MoneySerializer(serializers.Serializer):
    value = serializers.DecimalField(source="amount", max_digits=18, decimal_places=2)
    currency = serializers.CharField()


class ConvertedPurchaseSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    description = serializers.CharField()
    transaction_date = serializers.DateField()
    original_amount = MoneySerializer()
    converted_amount = MoneySerializer()
    exchange_rate = serializers.SerializerMethodField()
    exchange_rate_date = serializers.DateField()

    def get_exchange_rate(self, obj) -> str:
        return str(obj.exchange_rate)


class PurchaseCreatedSerializer(serializers.Serializer):
    id = serializers.UUIDField()


class ErrorSerializer(serializers.Serializer):
    error = serializers.CharField()
    code = serializers.CharField()
