"""Order DRF serializers for API input/output.

The serializers operate at the Interface layer (API Views).  Lifecycle
rules live in the Service Layer, which receives Pydantic DTOs from
``dtos.py``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.constants import OrderStatus, ShipmentStatus
from modules.orders.models import Checkout, Order, OrderStatusHistory, Shipment

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class TransitionSerializer(serializers.Serializer):
    """Validates a status change request.

    ``courier_name`` / ``tracking_number`` are only read when the target
    status is ``shipped``.
    """

    status = serializers.ChoiceField(choices=OrderStatus.choices)
    courier_name = serializers.CharField(
        required=False, default="", allow_blank=True, max_length=100
    )
    tracking_number = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=100
    )
    notes = serializers.CharField(required=False, default="", allow_blank=True)


class ShipmentUpdateSerializer(serializers.Serializer):
    """Validates a shipment update (tracking number and/or sub-status)."""

    tracking_number = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=100
    )
    status = serializers.ChoiceField(choices=ShipmentStatus.choices, required=False)

    def validate(self, attrs):
        if not attrs.get("tracking_number") and not attrs.get("status"):
            raise serializers.ValidationError(
                "Provide tracking_number or status."
            )
        return attrs


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class CheckoutSerializer(serializers.ModelSerializer):
    class Meta:
        model = Checkout
        fields = ["id", "shipping_price", "grand_total", "notes", "status"]
        read_only_fields = fields


class ShipmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Shipment
        fields = [
            "id",
            "courier_name",
            "tracking_number",
            "status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class StatusHistorySerializer(serializers.ModelSerializer):
    """Read serializer for order status history records."""

    class Meta:
        model = OrderStatusHistory
        fields = [
            "id",
            "old_status",
            "new_status",
            "changed_by",
            "notes",
            "created_at",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Order detail with checkout, shipments and history."""

    checkout = CheckoutSerializer(read_only=True)
    shipments = ShipmentSerializer(many=True, read_only=True)
    status_history = StatusHistorySerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "buyer_id",
            "product_id",
            "status",
            "quantity",
            "price_each",
            "total_price",
            "created_at",
            "updated_at",
            "checkout",
            "shipments",
            "status_history",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for order lists (no nested relations)."""

    class Meta:
        model = Order
        fields = [
            "id",
            "buyer_id",
            "product_id",
            "status",
            "quantity",
            "total_price",
            "created_at",
        ]
        read_only_fields = fields
