"""Event handlers for order lifecycle events."""

from __future__ import annotations

import structlog

from modules.orders.events import (
    OrderCancelled,
    OrderShipped,
    OrderStatusChanged,
    ShipmentUpdated,
)
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class OrderStatusChangedHandler(IEventHandler[OrderStatusChanged]):
    def handle(self, event: OrderStatusChanged) -> None:
        logger.info(
            "order.event.status_changed",
            order_id=str(event.aggregate_id),
            old_status=event.old_status,
            new_status=event.new_status,
        )


class OrderShippedHandler(IEventHandler[OrderShipped]):
    def handle(self, event: OrderShipped) -> None:
        logger.info(
            "order.event.shipped",
            order_id=str(event.aggregate_id),
            courier_name=event.courier_name,
            tracking_number=event.tracking_number,
        )


class OrderCancelledHandler(IEventHandler[OrderCancelled]):
    def handle(self, event: OrderCancelled) -> None:
        logger.info(
            "order.event.cancelled",
            order_id=str(event.aggregate_id),
            old_status=event.old_status,
        )


class ShipmentUpdatedHandler(IEventHandler[ShipmentUpdated]):
    def handle(self, event: ShipmentUpdated) -> None:
        logger.info(
            "order.event.shipment_updated",
            order_id=str(event.aggregate_id),
            tracking_number=event.tracking_number,
            shipment_status=event.shipment_status,
        )


order_status_changed_handler = OrderStatusChangedHandler()
order_shipped_handler = OrderShippedHandler()
order_cancelled_handler = OrderCancelledHandler()
shipment_updated_handler = ShipmentUpdatedHandler()
