import pytest
from datetime import date, timedelta
from decimal import Decimal
from unittest.mock import patch
from uuid import uuid4

from rest_framework.test import APIClient
from rest_framework import status

from apps.common.results import StorageError
from apps.exchange.domain.services import ExchangeRateResolver
from apps.exchange.infrastructure.cache import InMemoryRateCache
from apps.exchange.infrastructure.providers.memory import InMemoryRateSourceClient
from apps.purchases.infrastructure.persistence.models import PurchaseRecord


@pytest.fixture
def api_client():
    """DRF API client."""
    return APIClient()


@pytest.fixture
def payload():
    return {
        "description": "Office chair",
        "transaction_date": "2023-12-20",
        "amount": "150.00",
        "currency": "USD",
        "idempotency_key": "order-1",
    }


@pytest.fixture
def rate_source():
    source = InMemoryRateSourceClient()
    source.add("BRL", date(2023, 12, 14), "4.90")
    source.add("EUR", date(2023, 12, 15), "0.91")
    return source


@pytest.fixture
def pinned_resolver(rate_source):
    """Resolver with an in-memory source and the processing day fixed at 2024-01-10."""
    resolver = ExchangeRateResolver(rate_source, InMemoryRateCache(), clock=lambda: date(2024, 1, 10))
    with patch('apps.purchases.application.services.get_exchange_rate_resolver', return_value=resolver):
        yield resolver


@pytest.mark.django_db
class TestCreatePurchase:
    """Tests for POST /api/v1/purchases/."""

    def test_create(self, api_client, payload):
        response = api_client.post("/api/v1/purchases/", payload, format="json")

        assert response.status_code == status.HTTP_201_CREATED
        record = PurchaseRecord.objects.get(pk=response.data["id"])
        assert record.amount == Decimal("150.00")
        assert record.idempotency_key == "order-1"

    def test_replay_returns_same_id(self, api_client, payload):
        first = api_client.post("/api/v1/purchases/", payload, format="json")
        second = api_client.post("/api/v1/purchases/", payload, format="json")

        assert second.status_code == status.HTTP_201_CREATED
        assert second.data["id"] == first.data["id"]
        assert PurchaseRecord.objects.count() == 1

    def test_conflict(self, api_client, payload):
        api_client.post("/api/v1/purchases/", payload, format="json")

        response = api_client.post("/api/v1/purchases/", {**payload, "amount": "200.00"}, format="json")

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["code"] == "IDEMPOTENCY_CONFLICT"
        assert response.data["idempotency_key"] == "order-1"

    def test_key_from_header(self, api_client, payload):
        del payload["idempotency_key"]

        first = api_client.post("/api/v1/purchases/", payload, format="json", HTTP_IDEMPOTENCY_KEY="hdr-1")
        second = api_client.post("/api/v1/purchases/", payload, format="json", HTTP_IDEMPOTENCY_KEY="hdr-1")

        assert second.data["id"] == first.data["id"]
        assert PurchaseRecord.objects.get().idempotency_key == "hdr-1"

    def test_header_key_too_long(self, api_client, payload):
        """
        A header key is validated like a body key and never reaches storage.
        """
        del payload["idempotency_key"]

        response = api_client.post("/api/v1/purchases/", payload, format="json", HTTP_IDEMPOTENCY_KEY="k" * 300)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["code"] == "VALIDATION_ERROR"
        assert "idempotency_key" in response.data["errors"]
        assert PurchaseRecord.objects.count() == 0

    def test_key_length_follows_settings(self, api_client, payload, settings):
        settings.PURCHASES = {**settings.PURCHASES, "IDEMPOTENCY_KEY_MAX_LENGTH": 10}
        del payload["idempotency_key"]

        body = api_client.post("/api/v1/purchases/", {**payload, "idempotency_key": "k" * 11}, format="json")
        header = api_client.post("/api/v1/purchases/", payload, format="json", HTTP_IDEMPOTENCY_KEY="k" * 11)
        accepted = api_client.post("/api/v1/purchases/", payload, format="json", HTTP_IDEMPOTENCY_KEY="k" * 10)

        assert body.status_code == status.HTTP_400_BAD_REQUEST
        assert header.status_code == status.HTTP_400_BAD_REQUEST
        assert accepted.status_code == status.HTTP_201_CREATED
        assert list(PurchaseRecord.objects.values_list("idempotency_key", flat=True)) == ["k" * 10]

    def test_body_key_wins_over_header(self, api_client, payload):
        api_client.post("/api/v1/purchases/", payload, format="json", HTTP_IDEMPOTENCY_KEY="hdr-1")

        assert PurchaseRecord.objects.get().idempotency_key == "order-1"

    def test_without_key_creates_new_rows(self, api_client, payload):
        del payload["idempotency_key"]

        first = api_client.post("/api/v1/purchases/", payload, format="json")
        second = api_client.post("/api/v1/purchases/", payload, format="json")

        assert first.data["id"] != second.data["id"]
        assert PurchaseRecord.objects.count() == 2

    def test_currency_defaults_to_usd(self, api_client, payload):
        del payload["currency"]

        response = api_client.post("/api/v1/purchases/", payload, format="json")

        assert PurchaseRecord.objects.get(pk=response.data["id"]).currency == "USD"

    @pytest.mark.parametrize(
        "field, value",
        [
            ("description", ""),
            ("description", "x" * 51),
            ("amount", "0.00"),
            ("amount", "-1.00"),
            ("amount", "1.001"),
            ("currency", "US"),
            ("currency", "U$D"),
            ("transaction_date", "not-a-date"),
        ],
    )
    def test_validation_errors(self, api_client, payload, field, value):
        response = api_client.post("/api/v1/purchases/", {**payload, field: value}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["code"] == "VALIDATION_ERROR"
        assert field in response.data["errors"]
        assert PurchaseRecord.objects.count() == 0

    def test_future_date_rejected(self, api_client, payload):
        tomorrow = date.today() + timedelta(days=2)

        response = api_client.post(
            "/api/v1/purchases/", {**payload, "transaction_date": tomorrow.isoformat()}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @patch('apps.purchases.domain.services.PurchaseIngestionService.create')
    def test_storage_failure(self, mock_create, api_client, payload):
        mock_create.return_value = StorageError("database is locked")

        response = api_client.post("/api/v1/purchases/", payload, format="json")

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.data["code"] == "STORAGE_ERROR"


@pytest.mark.django_db
class TestRetrievePurchase:
    """Tests for GET /api/v1/purchases/{id}/."""

    @pytest.fixture
    def purchase_id(self, api_client, payload):
        return api_client.post("/api/v1/purchases/", payload, format="json").data["id"]

    def test_converted_to_default_currency(self, api_client, purchase_id, pinned_resolver):
        response = api_client.get(f"/api/v1/purchases/{purchase_id}/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["id"] == purchase_id
        assert response.data["description"] == "Office chair"
        assert response.data["transaction_date"] == "2023-12-20"
        assert response.data["original_amount"] == {"value": "150.00", "currency": "USD"}
        assert response.data["converted_amount"] == {"value": "735.00", "currency": "BRL"}
        assert response.data["exchange_rate"] == "4.90"
        assert response.data["exchange_rate_date"] == "2023-12-14"

    def test_explicit_currency(self, api_client, purchase_id, pinned_resolver):
        response = api_client.get(f"/api/v1/purchases/{purchase_id}/", {"currency": "eur"})

        assert response.status_code == status.HTTP_200_OK
        assert response.data["converted_amount"] == {"value": "136.50", "currency": "EUR"}
        assert response.data["exchange_rate_date"] == "2023-12-15"

    def test_same_currency(self, api_client, purchase_id, pinned_resolver):
        response = api_client.get(f"/api/v1/purchases/{purchase_id}/", {"currency": "USD"})

        assert response.data["converted_amount"] == {"value": "150.00", "currency": "USD"}
        assert response.data["exchange_rate"] == "1"

    def test_rate_unavailable(self, api_client, purchase_id, pinned_resolver):
        response = api_client.get(f"/api/v1/purchases/{purchase_id}/", {"currency": "JPY"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["code"] == "EXCHANGE_RATE_UNAVAILABLE"
        assert response.data["currency"] == "JPY"
        assert response.data["date"] == "2023-12-20"

    def test_invalid_currency(self, api_client, purchase_id, pinned_resolver):
        response = api_client.get(f"/api/v1/purchases/{purchase_id}/", {"currency": "EURO"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["code"] == "VALIDATION_ERROR"

    def test_not_found(self, api_client, pinned_resolver):
        response = api_client.get(f"/api/v1/purchases/{uuid4()}/")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["code"] == "PURCHASE_NOT_FOUND"

    def test_malformed_id(self, api_client):
        response = api_client.get("/api/v1/purchases/not-a-uuid/")

        assert response.status_code == status.HTTP_404_NOT_FOUND
