"""
Health endpoint for the exchange rate source.
"""

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import extend_schema

from apps.exchange.api.v1.serializers import HealthReportSerializer
from apps.exchange.application.health import check_rate_source_health
from apps.exchange.infrastructure.providers.registry import get_rate_source


@extend_schema(tags=['Health'])
class RateSourceHealthView(APIView):

    authentication_classes = []
    permission_classes = []

    @extend_schema(
        responses={200: HealthReportSerializer, 503: HealthReportSerializer},
        description="Probe the exchange rate source with a known historical record"
    )
    def get(self, request):
        report = check_rate_source_health(get_rate_source())
        response_status = status.HTTP_200_OK if report.is_available else status.HTTP_503_SERVICE_UNAVAILABLE
        return Response(HealthReportSerializer(report).data, status=response_status)
