"""Unit tests for Orders event handlers and the in-memory bus."""

from __future__ import annotations

import logging
from uuid import uuid4

import pytest

from modules.orders.events import OrderPlaced, OrderStatusChanged, PaymentStatusChanged
from modules.orders.handlers import (
    OrderPlacedHandler,
    OrderStatusChangedHandler,
    PaymentStatusChangedHandler,
    order_placed_handler,
)
from shared.infrastructure.bus import InMemoryEventBus, event_bus

pytestmark = pytest.mark.unit


def test_order_placed_handler_logs(caplog):
    event = OrderPlaced(
        aggregate_id=uuid4(), order_number="ORD-20260101-ABC123", payment_method="cod"
    )

    with caplog.at_level(logging.INFO, logger="modules.orders.handlers"):
        OrderPlacedHandler().handle(event)

    assert any(
        "order.event.placed" in record.getMessage()
        and "ORD-20260101-ABC123" in record.getMessage()
        for record in caplog.records
    )


def test_status_changed_handler_logs(caplog):
    event = OrderStatusChanged(
        aggregate_id=uuid4(), old_status="pending", new_status="confirmed"
    )

    with caplog.at_level(logging.INFO, logger="modules.orders.handlers"):
        OrderStatusChangedHandler().handle(event)

    assert any("order.event.status_changed" in r.getMessage() for r in caplog.records)


def test_payment_status_changed_handler_logs(caplog):
    event = PaymentStatusChanged(
        aggregate_id=uuid4(), old_status="unpaid", new_status="paid"
    )

    with caplog.at_level(logging.INFO, logger="modules.orders.handlers"):
        PaymentStatusChangedHandler().handle(event)

    assert any(
        "order.event.payment_status_changed" in r.getMessage() for r in caplog.records
    )


def test_handlers_are_subscribed_on_app_ready():
    assert order_placed_handler in event_bus.handlers_for(OrderPlaced)


def test_in_memory_event_bus_routes_events():
    bus = InMemoryEventBus()
    handled = []

    class CapturingHandler:
        def handle(self, event) -> None:
            handled.append(event)

    handler = CapturingHandler()
    placed = OrderPlaced(aggregate_id=uuid4())
    changed = OrderStatusChanged(aggregate_id=uuid4())

    bus.subscribe(OrderPlaced, handler)
    bus.subscribe(OrderPlaced, handler)
    bus.publish(placed)
    bus.publish(changed)

    assert handled == [placed]
