"""Integration tests for the order status and shipment endpoints."""

from __future__ import annotations

from uuid import uuid4

import pytest
from rest_framework import status

from modules.orders.constants import OrderStatus, ShipmentStatus
from modules.orders.exceptions import ConflictError, PersistenceError
from modules.orders.models import OrderStatusHistory, Shipment
from modules.orders.services import OrderLifecycleService

pytestmark = pytest.mark.integration


def _status_url(order_id) -> str:
    return f"/api/v1/orders/{order_id}/status/"


def _shipment_url(order_id) -> str:
    return f"/api/v1/orders/{order_id}/shipment/"


class TestUpdateStatus:
    def test_pending_to_processed(self, auth_client, pending_order):
        response = auth_client.patch(
            _status_url(pending_order.id), {"status": "processed"}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["status"] == OrderStatus.PROCESSED
        assert response.data["shipments"] == []

    def test_history_records_caller(self, auth_client, pending_order):
        auth_client.patch(
            _status_url(pending_order.id),
            {"status": "cancelled", "notes": "Stok habis"},
            format="json",
        )

        history = OrderStatusHistory.objects.get(
            order_id=pending_order.id, new_status=OrderStatus.CANCELLED
        )
        assert history.changed_by == "seller"
        assert history.notes == "Stok habis"

    def test_ship_with_courier(self, auth_client, make_order):
        order = make_order(status=OrderStatus.PROCESSED)

        response = auth_client.patch(
            _status_url(order.id),
            {"status": "shipped", "courier_name": "J&T Express", "tracking_number": "JT01"},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["status"] == OrderStatus.SHIPPED
        [shipment] = response.data["shipments"]
        assert shipment["courier_name"] == "J&T Express"
        assert shipment["tracking_number"] == "JT01"
        assert shipment["status"] == ShipmentStatus.PACKING

    def test_put_is_accepted(self, auth_client, pending_order):
        response = auth_client.put(
            _status_url(pending_order.id), {"status": "processed"}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK

    def test_ship_without_courier_is_400(self, auth_client, make_order):
        order = make_order(status=OrderStatus.PROCESSED)

        response = auth_client.patch(
            _status_url(order.id), {"status": "shipped", "courier_name": "  "}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["field"] == "courier_name"
        assert not Shipment.objects.filter(order_id=order.id).exists()

    def test_invalid_transition_is_400_with_statuses(self, auth_client, make_order):
        order = make_order(status=OrderStatus.SHIPPED)

        response = auth_client.patch(
            _status_url(order.id), {"status": "pending"}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["from_status"] == OrderStatus.SHIPPED
        assert response.data["to_status"] == OrderStatus.PENDING
        assert response.data["detail"] == "Cannot transition from shipped to pending."

    def test_terminal_order_rejects_everything(self, auth_client, make_order):
        order = make_order(status=OrderStatus.COMPLETED)

        response = auth_client.patch(
            _status_url(order.id), {"status": "cancelled"}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_unknown_status_is_400(self, auth_client, pending_order):
        response = auth_client.patch(
            _status_url(pending_order.id), {"status": "returned"}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "status" in response.data

    def test_unknown_order_is_404(self, auth_client):
        response = auth_client.patch(
            _status_url(uuid4()), {"status": "processed"}, format="json"
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_requires_authentication(self, api_client, pending_order):
        response = api_client.patch(
            _status_url(pending_order.id), {"status": "processed"}, format="json"
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestStoreErrors:
    def test_conflict_after_retries_is_409(self, auth_client, pending_order, monkeypatch):
        calls = []

        def always_conflicts(self, order_id, target_status, **kwargs):
            calls.append(target_status)
            raise ConflictError(f"Order {order_id} changed while moving to {target_status}.")

        monkeypatch.setattr(OrderLifecycleService, "transition", always_conflicts)

        response = auth_client.patch(
            _status_url(pending_order.id), {"status": "processed"}, format="json"
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert "changed while moving to processed" in response.data["detail"]
        assert len(calls) == 3

    def test_store_failure_is_503(self, auth_client, pending_order, monkeypatch):
        def store_down(self, order_id, target_status, **kwargs):
            raise PersistenceError("Order store unavailable.")

        monkeypatch.setattr(OrderLifecycleService, "transition", store_down)

        response = auth_client.patch(
            _status_url(pending_order.id), {"status": "processed"}, format="json"
        )

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.data == {"detail": "Order store unavailable."}


class TestUpdateShipment:
    @pytest.fixture()
    def shipped_order(self, auth_client, make_order):
        order = make_order(status=OrderStatus.PROCESSED)
        auth_client.patch(
            _status_url(order.id),
            {"status": "shipped", "courier_name": "SiCepat"},
            format="json",
        )
        return order

    def test_attach_tracking_number(self, auth_client, shipped_order):
        response = auth_client.patch(
            _shipment_url(shipped_order.id), {"tracking_number": "SCP99"}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["shipments"][0]["tracking_number"] == "SCP99"
        assert response.data["status"] == OrderStatus.SHIPPED

    def test_change_sub_status(self, auth_client, shipped_order):
        response = auth_client.patch(
            _shipment_url(shipped_order.id), {"status": "delivered"}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["shipments"][0]["status"] == ShipmentStatus.DELIVERED
        assert response.data["status"] == OrderStatus.SHIPPED

    def test_empty_body_is_400(self, auth_client, shipped_order):
        response = auth_client.patch(_shipment_url(shipped_order.id), {}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_order_without_shipment_is_400(self, auth_client, pending_order):
        response = auth_client.patch(
            _shipment_url(pending_order.id), {"tracking_number": "X1"}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["field"] == "shipment"
