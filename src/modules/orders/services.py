"""Order lifecycle service layer (Use Cases).

Owns the fulfillment state machine of an order.  Every write follows the
same shape: read the order fresh, validate against ``VALID_TRANSITIONS``,
then apply a conditional write inside one transaction.  The
status compare-and-set, the shipment row, the history row and the outbox
events either all commit or none do.

Error contract:
- ``OrderNotFound``: unknown order id.
- ``InvalidTransitionError``: target not reachable from the current status.
- ``ValidationError``: missing courier, unknown status, bad shipment update.
- ``ConflictError``: a concurrent writer won the race; safe to retry.
- ``PersistenceError``: the database failed.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional
from uuid import UUID

import structlog
from django.conf import settings
from django.db import DatabaseError, IntegrityError, transaction

from modules.orders.constants import OrderStatus
from modules.orders.events import (
    OrderCancelled,
    OrderShipped,
    OrderStatusChanged,
    ShipmentUpdated,
)
from modules.orders.exceptions import (
    ConflictError,
    InvalidTransitionError,
    OrderNotFound,
    PersistenceError,
    ValidationError,
)

if TYPE_CHECKING:
    from modules.orders.dtos import ShipmentInfoDTO, ShipmentUpdateDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderLifecycleService:
    """Application service for the order fulfillment lifecycle.

    Receives the repository via constructor injection.
    """

    def __init__(self, order_repository: IOrderRepository) -> None:
        self._order_repo = order_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def transition(
        self,
        order_id: UUID | str,
        target_status: str,
        shipment_info: Optional[ShipmentInfoDTO] = None,
        notes: str = "",
        changed_by: str = "",
    ) -> Order:
        """Move an order to *target_status*.

        Entering ``shipped`` requires ``shipment_info`` with a non-empty
        ``courier_name`` and creates the order's shipment in ``packing``.
        """
        order = self._load(order_id)
        current_status = order.status
        log = logger.bind(
            order_id=str(order.id),
            current_status=current_status,
            new_status=target_status,
        )

        if target_status not in OrderStatus.values:
            log.warning("order.unknown_status")
            raise ValidationError("status", f"unknown status {target_status!r}")

        if not order.can_transition_to(target_status):
            log.warning("order.invalid_transition")
            raise InvalidTransitionError(current_status, target_status)

        courier_name = tracking_number = None
        if target_status == OrderStatus.SHIPPED:
            courier_name = shipment_info.courier_name.strip() if shipment_info else ""
            if not courier_name:
                log.warning("order.courier_missing")
                raise ValidationError("courier_name", "required")
            tracking_number = shipment_info.tracking_number or None

        with self._unit_of_work(log):
            if not self._order_repo.compare_and_set_status(
                order.id, current_status, target_status
            ):
                log.warning("order.transition_conflict")
                raise ConflictError(
                    f"Order {order.id} changed while moving to {target_status}."
                )
            if courier_name:
                self._order_repo.add_shipment(order.id, courier_name, tracking_number)
            self._order_repo.add_history(
                order_id=order.id,
                status=target_status,
                notes=notes,
                old_status=current_status,
                changed_by=changed_by,
            )
            order.status = target_status
            for event in self._events_for(
                order, current_status, courier_name, tracking_number
            ):
                order.add_domain_event(event)
            self._order_repo.record_events(order)

        log.info("order.status_updated")
        return self._load(order.id)

    def update_shipment(self, order_id: UUID | str, dto: ShipmentUpdateDTO) -> Order:
        """Change tracking number and/or shipment sub-status.

        The tracking number can only change while the order is ``shipped``;
        the sub-status has no ordering rules of its own.
        """
        order = self._load(order_id)
        log = logger.bind(order_id=str(order.id), current_status=order.status)

        shipment = order.shipment
        if shipment is None:
            log.warning("order.shipment_missing")
            raise ValidationError("shipment", "order has not been shipped")

        fields: Dict[str, Any] = {}
        require_status = None
        if dto.tracking_number is not None:
            if order.status != OrderStatus.SHIPPED:
                log.warning("order.tracking_not_allowed")
                raise ValidationError(
                    "tracking_number", "can only change while the order is shipped"
                )
            fields["tracking_number"] = dto.tracking_number
            require_status = OrderStatus.SHIPPED
        if dto.status is not None:
            fields["status"] = dto.status

        with self._unit_of_work(log):
            if not self._order_repo.update_shipment(shipment.id, fields, require_status):
                log.warning("order.shipment_conflict")
                raise ConflictError(f"Order {order.id} changed while updating shipment.")
            tracking_number = fields.get("tracking_number", shipment.tracking_number)
            order.add_domain_event(
                ShipmentUpdated(
                    aggregate_id=order.id,
                    tracking_number=tracking_number or "",
                    shipment_status=fields.get("status", shipment.status),
                )
            )
            self._order_repo.record_events(order)

        log.info("order.shipment_updated", fields=sorted(fields))
        return self._load(order.id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: UUID | str) -> Order:
        """Retrieve a single order by ID.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        return self._load(order_id)

    def list_orders(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """Return a list of orders, optionally filtered."""
        try:
            return self._order_repo.list(filters)
        except DatabaseError as exc:
            logger.error("order.list_failed", error=str(exc))
            raise PersistenceError("Order store unavailable.") from exc

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _load(self, order_id: UUID | str) -> Order:
        try:
            order = self._order_repo.get_by_id(str(order_id))
        except DatabaseError as exc:
            logger.error("order.load_failed", order_id=str(order_id), error=str(exc))
            raise PersistenceError("Order store unavailable.") from exc
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    @contextmanager
    def _unit_of_work(self, log: Any) -> Iterator[None]:
        """One atomic write; database errors become lifecycle errors."""
        try:
            with transaction.atomic():
                yield
        except IntegrityError as exc:
            log.warning("order.integrity_conflict", error=str(exc))
            raise ConflictError("Concurrent update detected.") from exc
        except DatabaseError as exc:
            log.error("order.persistence_failed", error=str(exc))
            raise PersistenceError("Order store unavailable.") from exc

    @staticmethod
    def _events_for(
        order: Order,
        old_status: str,
        courier_name: Optional[str],
        tracking_number: Optional[str],
    ) -> List[Any]:
        events: List[Any] = [
            OrderStatusChanged(
                aggregate_id=order.id, old_status=old_status, new_status=order.status
            )
        ]
        if order.status == OrderStatus.SHIPPED:
            events.append(
                OrderShipped(
                    aggregate_id=order.id,
                    courier_name=courier_name or "",
                    tracking_number=tracking_number or "",
                )
            )
        elif order.status == OrderStatus.CANCELLED:
            events.append(OrderCancelled(aggregate_id=order.id, old_status=old_status))
        return events


def transition_with_retry(
    service: OrderLifecycleService,
    order_id: UUID | str,
    target_status: str,
    attempts: Optional[int] = None,
    **kwargs: Any,
) -> Order:
    """Call ``service.transition`` again on ``ConflictError``, at most *attempts* times.

    *attempts* defaults to ``settings.ORDER_TRANSITION_MAX_RETRIES``, read on
    every call.  Each attempt re-reads the order, so a retry after losing a
    race usually ends in ``InvalidTransitionError`` rather than a second success.
    """
    if attempts is None:
        attempts = settings.ORDER_TRANSITION_MAX_RETRIES
    for attempt in range(1, attempts + 1):
        try:
            return service.transition(order_id, target_status, **kwargs)
        except ConflictError:
            logger.info(
                "order.transition_retry",
                order_id=str(order_id),
                attempt=attempt,
                max_attempts=attempts,
            )
            if attempt == attempts:
                raise
    raise ConflictError(f"Order {order_id}: no transition attempts were made.")
