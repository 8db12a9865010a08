from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from modules.orders.constants import CheckoutStatus, OrderStatus
from modules.orders.models import Checkout, Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderLifecycleService


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


@pytest.fixture()
def auth_client():
    """APIClient with a force-authenticated Django user."""
    client = APIClient()
    user = get_user_model().objects.create_user(
        username="seller", password="testpass123"
    )
    client.force_authenticate(user=user)
    return client


@pytest.fixture()
def repo():
    return OrderDjangoRepository()


@pytest.fixture()
def service(repo):
    return OrderLifecycleService(order_repository=repo)


@pytest.fixture()
def checkout():
    return Checkout.objects.create(
        buyer_id=uuid4(),
        total_price=Decimal("570000.00"),
        shipping_price=Decimal("15000.00"),
        grand_total=Decimal("585000.00"),
        notes="Kirim pagi",
        status=CheckoutStatus.PAID,
    )


@pytest.fixture()
def make_order(repo, checkout):
    """Factory for orders; ``status`` other than pending is written directly."""

    def _make(status: str = OrderStatus.PENDING, **overrides) -> Order:
        data = {
            "buyer_id": checkout.buyer_id,
            "product_id": uuid4(),
            "checkout_id": checkout.id,
            "quantity": 2,
            "price_each": Decimal("285000.00"),
        }
        data.update(overrides)
        order = repo.create(data)
        if status != OrderStatus.PENDING:
            Order.objects.filter(id=order.id).update(status=status)
        return repo.get_by_id(str(order.id))

    return _make


@pytest.fixture()
def pending_order(make_order):
    return make_order()
