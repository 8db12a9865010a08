"""Unit tests for domain event primitives."""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest

from modules.orders.constants import OrderStatus
from modules.orders.events import OrderShipped, OrderStatusChanged
from modules.orders.models import Order

pytestmark = pytest.mark.unit


def test_order_registers_and_clears_domain_events():
    order = Order(
        buyer_id=uuid4(),
        product_id=uuid4(),
        status=OrderStatus.PENDING,
        quantity=1,
        price_each=Decimal("10.00"),
    )

    assert order.domain_events == []

    event = OrderStatusChanged(aggregate_id=order.id, new_status="processed")
    order.add_domain_event(event)

    assert order.domain_events == [event]
    assert event.event_name == "OrderStatusChanged"

    order.clear_domain_events()
    assert order.domain_events == []


def test_payload_is_json_ready_and_rebuilds_event():
    event = OrderShipped(aggregate_id=uuid4(), courier_name="JNE", tracking_number="JNE1")

    payload = event.to_payload()

    assert payload["aggregate_id"] == str(event.aggregate_id)
    assert payload["event_name"] == "OrderShipped"
    assert isinstance(payload["occurred_on"], str)
    assert OrderShipped.from_payload(payload) == event
