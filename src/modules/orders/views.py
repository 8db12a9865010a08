"""Order API views.

Exposes ``OrderLifecycleService`` via HTTP using a DRF ViewSet.  Lifecycle
exceptions are translated into HTTP status codes; nothing else is caught.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.core.pagination import StandardResultsSetPagination
from modules.orders.dtos import ShipmentInfoDTO, ShipmentUpdateDTO, TransitionDTO
from modules.orders.exceptions import (
    ConflictError,
    InvalidTransitionError,
    OrderLifecycleError,
    OrderNotFound,
    PersistenceError,
    ValidationError,
)
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    OrderListSerializer,
    OrderSerializer,
    ShipmentUpdateSerializer,
    TransitionSerializer,
)
from modules.orders.services import OrderLifecycleService, transition_with_retry

_ERROR_STATUS = {
    OrderNotFound: status.HTTP_404_NOT_FOUND,
    InvalidTransitionError: status.HTTP_400_BAD_REQUEST,
    ValidationError: status.HTTP_400_BAD_REQUEST,
    ConflictError: status.HTTP_409_CONFLICT,
    PersistenceError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _error_response(exc: OrderLifecycleError) -> Response:
    body = {"detail": str(exc)}
    if isinstance(exc, InvalidTransitionError):
        body.update(from_status=exc.from_status, to_status=exc.to_status)
    elif isinstance(exc, ValidationError):
        body["field"] = exc.field
    return Response(
        body, status=_ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    )


class OrderViewSet(GenericViewSet):
    """Read orders and drive their fulfillment status.

    Does **not** extend ``ModelViewSet``: every write goes through
    ``OrderLifecycleService``.
    """

    queryset = Order.objects.select_related("checkout")
    filterset_class = OrderFilter
    ordering_fields = ["created_at", "total_price", "status"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, OrderingFilter]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = OrderLifecycleService(order_repository=OrderDjangoRepository())

    def get_throttles(self) -> list[BaseThrottle]:
        """Throttling scope per action."""
        throttle_scope: str | None
        if self.action in {"list", "retrieve"}:
            throttle_scope = "order_listing"
        elif self.action in {"update_status", "update_shipment"}:
            throttle_scope = "order_transition"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/

        Filters: ``status``, ``buyer``, ``product``, ``start_date``,
        ``end_date``.  Results are paginated.
        """
        queryset = self.filter_queryset(self.get_queryset())

        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(queryset, request)
        serializer = OrderListSerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        try:
            order = self._service.get_order(pk)
        except OrderLifecycleError as exc:
            return _error_response(exc)
        return Response(OrderSerializer(order).data)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @action(detail=True, methods=["patch", "put"], url_path="status")
    def update_status(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/status/

        Body: ``status`` plus ``courier_name`` / ``tracking_number`` when
        shipping.  Lost races are retried a bounded number of times.
        """
        serializer = TransitionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        dto = TransitionDTO(
            status=data["status"],
            shipment=ShipmentInfoDTO(
                courier_name=data.get("courier_name", ""),
                tracking_number=data.get("tracking_number"),
            ),
            notes=data.get("notes", ""),
        )

        try:
            order = transition_with_retry(
                self._service,
                pk,
                dto.status,
                shipment_info=dto.shipment,
                notes=dto.notes,
                changed_by=str(request.user),
            )
        except OrderLifecycleError as exc:
            return _error_response(exc)

        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["patch"], url_path="shipment")
    def update_shipment(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/shipment/

        Attaches a tracking number later or changes the shipment sub-status.
        """
        serializer = ShipmentUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        dto = ShipmentUpdateDTO(
            tracking_number=data.get("tracking_number"),
            status=data.get("status"),
        )

        try:
            order = self._service.update_shipment(pk, dto)
        except OrderLifecycleError as exc:
            return _error_response(exc)

        return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)
