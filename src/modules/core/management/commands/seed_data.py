from __future__ import annotations

import random
import uuid
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from modules.orders.constants import KNOWN_COURIERS, CheckoutStatus, OrderStatus
from modules.orders.dtos import ShipmentInfoDTO
from modules.orders.models import Checkout
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderLifecycleService

# Path each seeded order walks through the lifecycle, from ``pending``.
_LIFECYCLE_PATHS: list[list[str]] = [
    [],
    [OrderStatus.PROCESSED],
    [OrderStatus.PROCESSED, OrderStatus.SHIPPED],
    [OrderStatus.PROCESSED, OrderStatus.SHIPPED, OrderStatus.COMPLETED],
    [OrderStatus.CANCELLED],
    [OrderStatus.PROCESSED, OrderStatus.SHIPPED, OrderStatus.CANCELLED],
]

_CATALOG: list[tuple[str, Decimal]] = [
    ("Pupuk Urea 50kg", Decimal("285000.00")),
    ("Benih Padi IR64 5kg", Decimal("75000.00")),
    ("Cangkul Baja", Decimal("95000.00")),
    ("Pestisida Organik 1L", Decimal("120000.00")),
    ("Sprayer Elektrik 16L", Decimal("650000.00")),
]


class Command(BaseCommand):
    help = "Seed database with orders in every lifecycle state."

    def add_arguments(self, parser):
        parser.add_argument("--orders", type=int, default=12)

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        users_created = self._seed_users()
        orders_created = self._seed_orders(options["orders"])

        self.stdout.write(
            self.style.SUCCESS(
                f"Seed completed: users={users_created}, orders={orders_created}"
            )
        )

    def _seed_users(self) -> int:
        User = get_user_model()
        created = 0
        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser("admin", password="admin123")
            created += 1
        if not User.objects.filter(username="seller").exists():
            User.objects.create_user("seller", password="seller123", is_staff=True)
            created += 1
        return created

    def _seed_orders(self, count: int) -> int:
        self.stdout.write("Creating orders...")
        repo = OrderDjangoRepository()
        service = OrderLifecycleService(order_repository=repo)
        product_ids = {name: uuid.uuid4() for name, _ in _CATALOG}

        for index in range(count):
            buyer_id = uuid.uuid4()
            name, price = random.choice(_CATALOG)
            quantity = random.randint(1, 5)
            shipping_price = Decimal(random.choice([9000, 15000, 22000]))
            checkout = Checkout.objects.create(
                buyer_id=buyer_id,
                total_price=price * quantity,
                shipping_price=shipping_price,
                grand_total=price * quantity + shipping_price,
                status=CheckoutStatus.PAID,
            )
            order = repo.create(
                {
                    "buyer_id": buyer_id,
                    "product_id": product_ids[name],
                    "checkout_id": checkout.id,
                    "quantity": quantity,
                    "price_each": price,
                }
            )
            for target in _LIFECYCLE_PATHS[index % len(_LIFECYCLE_PATHS)]:
                shipment_info = None
                if target == OrderStatus.SHIPPED:
                    courier = random.choice(KNOWN_COURIERS)
                    shipment_info = ShipmentInfoDTO(
                        courier_name=courier,
                        tracking_number=f"{courier[:3].upper()}{random.randint(10**9, 10**10 - 1)}",
                    )
                service.transition(
                    order.id, target, shipment_info=shipment_info, notes="Seeded"
                )

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return count
