"""Domain events for the order lifecycle."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderStatusChanged(DomainEvent):
    """Raised on every successful status transition."""

    old_status: str = ""
    new_status: str = ""


@dataclass(frozen=True)
class OrderShipped(DomainEvent):
    """Raised when an order enters ``shipped`` and its shipment is created."""

    courier_name: str = ""
    tracking_number: str = ""


@dataclass(frozen=True)
class OrderCancelled(DomainEvent):
    """Raised when an order is cancelled."""

    old_status: str = ""


@dataclass(frozen=True)
class ShipmentUpdated(DomainEvent):
    """Raised when tracking number or shipment status changes."""

    tracking_number: str = ""
    shipment_status: str = ""
