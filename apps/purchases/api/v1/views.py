"""
ViewSet for the purchases API v1.
Maps core results onto HTTP status codes.
"""

import logging
from collections.abc import Mapping
from uuid import UUID

from rest_framework import status, viewsets
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.common.results import Conflict, Failure, NotFound, RateUnavailable, StorageError
from apps.purchases.api.v1.serializers import (
    ConvertedPurchaseSerializer,
    ErrorSerializer,
    PurchaseCreateSerializer,
    PurchaseCreatedSerializer,
)
from apps.purchases.application.services import (
    get_converted_purchase_query,
    get_purchase_config,
    get_purchase_ingestion_service,
)

logger = logging.getLogger(__name__)

IDEMPOTENCY_HEADER = "Idempotency-Key"

FAILURE_STATUS = {
    Conflict: status.HTTP_409_CONFLICT,
    NotFound: status.HTTP_404_NOT_FOUND,
    RateUnavailable: status.HTTP_400_BAD_REQUEST,
    StorageError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def failure_response(failure: Failure) -> Response:
    body = {"error": failure.message, "code": failure.code}
    if isinstance(failure, Conflict):
        body["idempotency_key"] = failure.key
    elif isinstance(failure, RateUnavailable):
        body["currency"] = failure.currency
        body["date"] = failure.date.isoformat()
    return Response(body, status=FAILURE_STATUS.get(type(failure), status.HTTP_500_INTERNAL_SERVER_ERROR))


def with_header_key(request):
    """Request body with the Idempotency-Key header as the key when the body has none."""
    data = request.data
    header_key = request.headers.get(IDEMPOTENCY_HEADER)
    if header_key is None or not isinstance(data, Mapping) or data.get("idempotency_key"):
        return data
    return {**dict(data.items()), "idempotency_key": header_key}


@extend_schema(tags=['Purchases'])
class PurchaseViewSet(viewsets.ViewSet):

    lookup_value_regex = r"[0-9a-fA-F-]{36}"

    @extend_schema(
        request=PurchaseCreateSerializer,
        parameters=[
            OpenApiParameter(
                IDEMPOTENCY_HEADER,
                OpenApiTypes.STR,
                location=OpenApiParameter.HEADER,
                required=False,
                description="Deduplication key, used when the body has no idempotency_key",
            ),
        ],
        responses={201: PurchaseCreatedSerializer, 400: ErrorSerializer, 409: ErrorSerializer, 503: ErrorSerializer},
        description="Store a purchase transaction. Replaying the same idempotency key with the same payload returns the original id."
    )
    def create(self, request):
        serializer = PurchaseCreateSerializer(data=with_header_key(request))
        if not serializer.is_valid():
            logger.warning("Validation failed for purchase creation: %s", serializer.errors)
            return Response(
                {"error": "Validation failed", "code": "VALIDATION_ERROR", "errors": serializer.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        dto = serializer.to_dto()

        result = get_purchase_ingestion_service().create(
            description=dto.description,
            transaction_date=dto.transaction_date,
            amount=dto.amount,
            currency=dto.currency,
            idempotency_key=dto.idempotency_key,
        )

        if isinstance(result, Failure):
            return failure_response(result)

        return Response({"id": str(result)}, status=status.HTTP_201_CREATED)

    @extend_schema(
        parameters=[
            OpenApiParameter("currency", OpenApiTypes.STR, description="Target currency code (defaults to BRL)"),
        ],
        responses={200: ConvertedPurchaseSerializer, 400: ErrorSerializer, 404: ErrorSerializer},
        description="Retrieve a purchase converted into the target currency using the historical exchange rate"
    )
    def retrieve(self, request, pk=None):
        try:
            purchase_id = UUID(str(pk))
        except ValueError:
            return Response(
                {"error": f"Purchase with ID {pk} not found", "code": NotFound.code},
                status=status.HTTP_404_NOT_FOUND
            )

        currency = (request.query_params.get("currency") or get_purchase_config().default_target_currency).strip()
        if len(currency) != 3 or not currency.isalpha():
            return Response(
                {"error": "currency must be a 3-letter code", "code": "VALIDATION_ERROR"},
                status=status.HTTP_400_BAD_REQUEST
            )

        logger.info("Retrieving purchase %s with currency conversion to %s", purchase_id, currency.upper())
        result = get_converted_purchase_query().get_converted(purchase_id, currency)

        if isinstance(result, Failure):
            return failure_response(result)

        return Response(ConvertedPurchaseSerializer(result).data)
