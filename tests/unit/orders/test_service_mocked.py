"""Unit tests for OrderLifecycleService with a mocked repository."""

from __future__ import annotations

from decimal import Decimal
from unittest.mock import MagicMock, call
from uuid import uuid4

import pytest
from django.db import IntegrityError, OperationalError

from modules.orders.constants import OrderStatus
from modules.orders.dtos import ShipmentInfoDTO
from modules.orders.exceptions import (
    ConflictError,
    InvalidTransitionError,
    PersistenceError,
)
from modules.orders.models import Order
from modules.orders.services import OrderLifecycleService, transition_with_retry

pytestmark = pytest.mark.unit


def _order(status: str) -> Order:
    return Order(
        id=uuid4(),
        buyer_id=uuid4(),
        product_id=uuid4(),
        status=status,
        quantity=1,
        price_each=Decimal("75000.00"),
    )


@pytest.fixture()
def service_and_repo():
    order_repo = MagicMock()
    order_repo.compare_and_set_status.return_value = True
    return OrderLifecycleService(order_repo), order_repo


class TestTransitionWrites:
    def test_conditional_write_uses_status_just_read(self, service_and_repo):
        service, repo = service_and_repo
        order = _order(OrderStatus.PROCESSED)
        repo.get_by_id.return_value = order

        service.transition(
            order.id,
            OrderStatus.SHIPPED,
            shipment_info=ShipmentInfoDTO(courier_name="JNE", tracking_number="JNE9"),
        )

        repo.compare_and_set_status.assert_called_once_with(
            order.id, OrderStatus.PROCESSED, OrderStatus.SHIPPED
        )
        repo.add_shipment.assert_called_once_with(order.id, "JNE", "JNE9")
        repo.record_events.assert_called_once_with(order)

    def test_lost_race_raises_conflict_and_skips_shipment(self, service_and_repo):
        service, repo = service_and_repo
        order = _order(OrderStatus.PROCESSED)
        repo.get_by_id.return_value = order
        repo.compare_and_set_status.return_value = False

        with pytest.raises(ConflictError):
            service.transition(
                order.id,
                OrderStatus.SHIPPED,
                shipment_info=ShipmentInfoDTO(courier_name="JNE"),
            )

        repo.add_shipment.assert_not_called()
        repo.add_history.assert_not_called()
        repo.record_events.assert_not_called()

    def test_duplicate_shipment_is_a_conflict(self, service_and_repo):
        service, repo = service_and_repo
        order = _order(OrderStatus.PROCESSED)
        repo.get_by_id.return_value = order
        repo.add_shipment.side_effect = IntegrityError("shipments_one_per_order")

        with pytest.raises(ConflictError):
            service.transition(
                order.id,
                OrderStatus.SHIPPED,
                shipment_info=ShipmentInfoDTO(courier_name="JNE"),
            )

    def test_store_failure_during_write(self, service_and_repo):
        service, repo = service_and_repo
        order = _order(OrderStatus.PENDING)
        repo.get_by_id.return_value = order
        repo.add_history.side_effect = OperationalError("database is gone")

        with pytest.raises(PersistenceError):
            service.transition(order.id, OrderStatus.PROCESSED)

        repo.record_events.assert_not_called()

    def test_store_failure_during_read(self, service_and_repo):
        service, repo = service_and_repo
        repo.get_by_id.side_effect = OperationalError("connection refused")

        with pytest.raises(PersistenceError):
            service.get_order(uuid4())

    def test_invalid_transition_never_writes(self, service_and_repo):
        service, repo = service_and_repo
        order = _order(OrderStatus.PENDING)
        repo.get_by_id.return_value = order

        with pytest.raises(InvalidTransitionError):
            service.transition(order.id, OrderStatus.COMPLETED)

        repo.compare_and_set_status.assert_not_called()


class TestTransitionWithRetry:
    def test_retries_after_conflict(self):
        service = MagicMock()
        expected = _order(OrderStatus.PROCESSED)
        service.transition.side_effect = [ConflictError("lost"), expected]
        order_id = uuid4()

        result = transition_with_retry(service, order_id, OrderStatus.PROCESSED)

        assert result is expected
        assert service.transition.call_args_list == [
            call(order_id, OrderStatus.PROCESSED),
            call(order_id, OrderStatus.PROCESSED),
        ]

    def test_gives_up_after_max_attempts(self):
        service = MagicMock()
        service.transition.side_effect = ConflictError("lost")

        with pytest.raises(ConflictError):
            transition_with_retry(service, uuid4(), OrderStatus.PROCESSED, attempts=3)

        assert service.transition.call_count == 3

    def test_business_errors_are_not_retried(self):
        service = MagicMock()
        service.transition.side_effect = InvalidTransitionError("shipped", "shipped")

        with pytest.raises(InvalidTransitionError):
            transition_with_retry(service, uuid4(), OrderStatus.SHIPPED)

        assert service.transition.call_count == 1

    def test_forwards_keyword_arguments(self):
        service = MagicMock()
        info = ShipmentInfoDTO(courier_name="JNE")
        order_id = uuid4()

        transition_with_retry(
            service, order_id, OrderStatus.SHIPPED, shipment_info=info, notes="x"
        )

        service.transition.assert_called_once_with(
            order_id, OrderStatus.SHIPPED, shipment_info=info, notes="x"
        )

    def test_default_attempts_follow_settings(self, settings):
        settings.ORDER_TRANSITION_MAX_RETRIES = 2
        service = MagicMock()
        service.transition.side_effect = ConflictError("lost")

        with pytest.raises(ConflictError):
            transition_with_retry(service, uuid4(), OrderStatus.PROCESSED)

        assert service.transition.call_count == 2
