"""Order repository interface.

Extends ``IRepository[Order]`` with the conditional writes the lifecycle
needs: a compare-and-set on ``status``, shipment creation, the audit trail
and the outbox.  The Service Layer depends exclusively on this contract.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderStatusHistory, Shipment


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The aggregate includes its Shipment and OrderStatusHistory rows.
    Callers wrap multi-step writes in a single transaction.
    """

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Create a ``pending`` order.

        ``data`` must include ``buyer_id``, ``product_id``, ``quantity`` and
        ``price_each``; ``checkout_id`` is optional.
        """

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with prefetched checkout, shipments and history."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """List orders with optional filters."""

    @abstractmethod
    def compare_and_set_status(
        self, order_id: UUID, expected_status: str, new_status: str
    ) -> bool:
        """Set ``status`` only if it still equals *expected_status*.

        Returns ``False`` when another writer got there first.
        """

    @abstractmethod
    def add_shipment(
        self,
        order_id: UUID,
        courier_name: str,
        tracking_number: Optional[str] = None,
    ) -> Shipment:
        """Create the order's (single) shipment in ``packing``."""

    @abstractmethod
    def update_shipment(
        self,
        shipment_id: UUID,
        fields: Dict[str, Any],
        require_order_status: Optional[str] = None,
    ) -> bool:
        """Update shipment columns, optionally conditioned on the order status.

        Returns ``False`` when the condition no longer holds.
        """

    @abstractmethod
    def add_history(
        self,
        order_id: UUID,
        status: str,
        notes: str = "",
        old_status: Optional[str] = None,
        changed_by: str = "",
    ) -> OrderStatusHistory:
        """Record a status change in the order's audit trail."""

    @abstractmethod
    def record_events(self, entity: Order) -> int:
        """Move the aggregate's pending domain events to the outbox."""
