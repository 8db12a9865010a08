"""Django ORM implementation of the Order repository.

Concurrency control is optimistic: status changes are conditional
``UPDATE ... WHERE status = <expected>`` statements and the caller learns
from the affected row count whether it won.  No row is locked between the
read and the write.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from modules.core.models import OutboxEvent
from modules.orders.constants import OrderStatus
from modules.orders.models import Order, OrderStatusHistory, Shipment
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

OUTBOX_TOPIC = "orders"


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        order = Order(
            buyer_id=data["buyer_id"],
            product_id=data["product_id"],
            checkout_id=data.get("checkout_id"),
            quantity=data["quantity"],
            price_each=data["price_each"],
        )
        order.save()
        self.add_history(
            order_id=order.id,
            status=OrderStatus.PENDING,
            notes=data.get("notes") or "Order created",
        )
        logger.info("order.created", order_id=str(order.id))
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    @staticmethod
    def _queryset():
        return Order.objects.select_related("checkout").prefetch_related(
            "shipments", "status_history"
        )

    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with eager-loaded relations.

        Returns ``None`` for non-existent or malformed IDs.
        """
        try:
            return self._queryset().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """List orders, e.g. ``{"status": "shipped", "buyer_id": ...}``."""
        queryset = self._queryset()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        """Persist an order and flush its domain events to the outbox."""
        entity.save()
        self.record_events(entity)
        logger.info("order.saved", order_id=str(entity.id))
        return entity

    def compare_and_set_status(
        self, order_id: UUID, expected_status: str, new_status: str
    ) -> bool:
        updated = Order.objects.filter(id=order_id, status=expected_status).update(
            status=new_status, updated_at=timezone.now()
        )
        logger.debug(
            "order.status_cas",
            order_id=str(order_id),
            expected_status=expected_status,
            new_status=new_status,
            applied=bool(updated),
        )
        return updated == 1

    def add_shipment(
        self,
        order_id: UUID,
        courier_name: str,
        tracking_number: Optional[str] = None,
    ) -> Shipment:
        shipment = Shipment.objects.create(
            order_id=order_id,
            courier_name=courier_name,
            tracking_number=tracking_number,
        )
        logger.info(
            "order.shipment_created",
            order_id=str(order_id),
            shipment_id=str(shipment.id),
            courier_name=courier_name,
        )
        return shipment

    def update_shipment(
        self,
        shipment_id: UUID,
        fields: Dict[str, Any],
        require_order_status: Optional[str] = None,
    ) -> bool:
        queryset = Shipment.objects.filter(id=shipment_id)
        if require_order_status is not None:
            queryset = queryset.filter(order__status=require_order_status)
        updated = queryset.update(**fields, updated_at=timezone.now())
        return updated == 1

    def add_history(
        self,
        order_id: UUID,
        status: str,
        notes: str = "",
        old_status: Optional[str] = None,
        changed_by: str = "",
    ) -> OrderStatusHistory:
        history = OrderStatusHistory.objects.create(
            order_id=order_id,
            old_status=old_status,
            new_status=status,
            notes=notes,
            changed_by=changed_by,
        )
        logger.info(
            "order.history_added",
            order_id=str(order_id),
            old_status=old_status,
            new_status=status,
        )
        return history

    def record_events(self, entity: Order) -> int:
        events = entity.domain_events
        OutboxEvent.objects.bulk_create(
            [
                OutboxEvent(
                    event_type=event.event_name,
                    aggregate_id=str(event.aggregate_id),
                    payload=event.to_payload(),
                    topic=OUTBOX_TOPIC,
                )
                for event in events
            ]
        )
        entity.clear_domain_events()
        return len(events)
