"""Checkout, Order, Shipment and OrderStatusHistory models.

- ``Order`` is the aggregate root of the fulfillment lifecycle.  Buyer and
  product live in other services and are referenced by id only.
- ``total_price`` is always ``quantity * price_each`` (calculated on save).
- ``Checkout`` is written by the checkout flow; the lifecycle only reads it.
- ``Shipment`` rows are created when an order enters ``shipped``; the
  unique constraint on ``order`` keeps it to one per order.
- ``OrderStatusHistory`` is an append-only audit trail of transitions.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel
from modules.orders.constants import (
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    CheckoutStatus,
    OrderStatus,
    ShipmentStatus,
)
from shared.domain.events import DomainEventMixin


class Checkout(BaseModel):
    """Shipping cost and grand total captured when the buyer paid."""

    buyer_id: models.UUIDField = models.UUIDField(db_index=True)
    total_price: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    shipping_price: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    grand_total: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    notes: models.TextField = models.TextField(blank=True, default="")
    status: models.CharField = models.CharField(
        max_length=20,
        choices=CheckoutStatus.choices,
        default=CheckoutStatus.PENDING,
    )

    class Meta:
        db_table = "checkouts"
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"Checkout {self.id} ({self.status})"


class Order(DomainEventMixin, BaseModel):
    """One buyer's purchase of one product line."""

    buyer_id: models.UUIDField = models.UUIDField(db_index=True)
    product_id: models.UUIDField = models.UUIDField(db_index=True)
    checkout: models.ForeignKey = models.ForeignKey(
        "orders.Checkout",
        on_delete=models.PROTECT,
        related_name="orders",
        null=True,
        blank=True,
    )
    status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    quantity: models.PositiveIntegerField = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
    )
    price_each: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
    )
    total_price: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        editable=False,
    )

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="orders_quantity_positive",
            ),
        ]

    # ------------------------------------------------------------------
    # State Machine helpers
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        """Return ``True`` if the order is in a terminal state."""
        return self.status in TERMINAL_STATES

    def can_transition_to(self, new_status: str) -> bool:
        """Check whether transitioning to *new_status* is valid."""
        return new_status in VALID_TRANSITIONS.get(self.status, set())

    @property
    def shipment(self) -> Shipment | None:
        """The order's shipment, if it has ever been shipped."""
        return next(iter(self.shipments.all()), None)

    # ------------------------------------------------------------------
    # Validation / Persistence
    # ------------------------------------------------------------------

    def clean(self) -> None:
        super().clean()
        if self.quantity is not None and self.quantity < 1:
            raise ValidationError({"quantity": "Quantity must be at least 1."})

    def save(self, *args: Any, **kwargs: Any) -> None:
        if self.price_each is None:
            raise ValidationError({"price_each": "Price is required."})
        self.total_price = self.quantity * self.price_each
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "total_price" not in update_fields:
            kwargs["update_fields"] = list(update_fields) + ["total_price"]
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"Order {self.id} ({self.status})"


class Shipment(BaseModel):
    """Courier and tracking data attached to a shipped order."""

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="shipments",
    )
    courier_name: models.CharField = models.CharField(max_length=100)
    tracking_number: models.CharField = models.CharField(  # noqa: DJ01
        max_length=100,
        null=True,
        blank=True,
        default=None,
    )
    status: models.CharField = models.CharField(
        max_length=20,
        choices=ShipmentStatus.choices,
        default=ShipmentStatus.PACKING,
    )

    class Meta:
        db_table = "shipments"
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(fields=["order"], name="shipments_one_per_order"),
            models.CheckConstraint(
                condition=~models.Q(courier_name=""),
                name="shipments_courier_not_blank",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.courier_name} {self.tracking_number or '-'} ({self.status})"


class OrderStatusHistory(BaseModel):
    """Append-only audit trail for order status transitions.

    ``changed_by`` holds the authenticated caller's identity; blank means
    the change was performed by the system.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    old_status: models.CharField = models.CharField(  # noqa: DJ01
        max_length=20,
        choices=OrderStatus.choices,
        null=True,
        blank=True,
    )
    new_status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
    )
    changed_by: models.CharField = models.CharField(
        max_length=255, blank=True, default=""
    )
    notes: models.TextField = models.TextField(blank=True, default="")

    class Meta:
        db_table = "order_status_history"
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["order", "-created_at"],
                name="osh_order_created_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.order_id} : {self.old_status} -> {self.new_status}"
