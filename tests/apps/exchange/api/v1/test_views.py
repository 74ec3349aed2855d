import pytest
from decimal import Decimal
from unittest.mock import MagicMock, patch

from rest_framework.test import APIClient
from rest_framework import status


@pytest.fixture
def api_client():
    """DRF API client."""
    return APIClient()


@pytest.mark.django_db
class TestRateSourceHealthView:
    """Tests for GET /api/v1/health/rate-source/."""

    @patch('apps.exchange.api.v1.views.get_rate_source')
    def test_healthy(self, mock_get_source, api_client):
        source = MagicMock()
        source.get_rate.return_value = Decimal("1.21")
        mock_get_source.return_value = source

        response = api_client.get("/api/v1/health/rate-source/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["status"] == "healthy"

    @patch('apps.exchange.api.v1.views.get_rate_source')
    def test_unavailable(self, mock_get_source, api_client):
        source = MagicMock()
        source.get_rate.side_effect = RuntimeError("connection refused")
        mock_get_source.return_value = source

        response = api_client.get("/api/v1/health/rate-source/")

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.data["status"] == "unhealthy"
