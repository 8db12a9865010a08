"""Order domain constants.

Status choices and the legal transitions of the order fulfillment state
machine.  Progression is strictly linear
(``pending -> processed -> shipped -> completed``); ``cancelled`` is
reachable from every non-terminal state.
"""

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Menunggu Pembayaran"
    PROCESSED = "processed", "Sedang Diproses"
    SHIPPED = "shipped", "Sedang Dikirim"
    COMPLETED = "completed", "Selesai"
    CANCELLED = "cancelled", "Dibatalkan"


class ShipmentStatus(models.TextChoices):
    PACKING = "packing", "Sedang Dikemas"
    SHIPPING = "shipping", "Dalam Perjalanan"
    DELIVERED = "delivered", "Telah Diterima"


class CheckoutStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PAID = "paid", "Paid"
    EXPIRED = "expired", "Expired"


VALID_TRANSITIONS: dict[str, set[str]] = {
    OrderStatus.PENDING: {OrderStatus.PROCESSED, OrderStatus.CANCELLED},
    OrderStatus.PROCESSED: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    OrderStatus.COMPLETED: set(),
    OrderStatus.CANCELLED: set(),
}

TERMINAL_STATES: set[str] = {OrderStatus.COMPLETED, OrderStatus.CANCELLED}

# Carriers offered by the storefront; any other non-empty name is accepted.
KNOWN_COURIERS: tuple[str, ...] = ("JNE", "J&T Express", "SiCepat")
