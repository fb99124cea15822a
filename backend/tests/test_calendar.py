"""
Tests for calendar grouping and status markers.
"""
from datetime import date, datetime

from app.models.enums import OrderStatus
from app.models.stock import Order
from app.services import calendar


def _order(status, received, completed=None, reference=None):
    return Order(status=status, order_received_date=received,
                 order_completion_date=completed, order_reference=reference)


DAY = date(2026, 5, 4)


def test_completion_date_wins_over_received_date():
    moved = _order(OrderStatus.SHIPPED, datetime(2026, 5, 1, 9), completed=datetime(2026, 5, 4, 18))
    stays = _order(OrderStatus.PENDING, datetime(2026, 5, 4, 7))
    elsewhere = _order(OrderStatus.PENDING, datetime(2026, 5, 4, 7), completed=datetime(2026, 5, 6))
    assert calendar.orders_on([moved, stays, elsewhere], DAY) == [moved, stays]


def test_sorted_by_priority_is_stable():
    first = _order(OrderStatus.DELIVERED, datetime(2026, 5, 4), reference="first")
    second = _order(OrderStatus.FULFILLED, datetime(2026, 5, 4), reference="second")
    canceled = _order(OrderStatus.CANCELED, datetime(2026, 5, 4), reference="canceled")
    ordered = calendar.sorted_by_priority([first, second, canceled])
    assert [o.order_reference for o in ordered] == ["canceled", "first", "second"]


def test_unique_statuses_and_marker():
    orders = [
        _order(OrderStatus.FULFILLED, datetime(2026, 5, 4, 8)),
        _order(OrderStatus.RECEIVED, datetime(2026, 5, 4, 9)),
        _order(OrderStatus.FULFILLED, datetime(2026, 5, 4, 10)),
        _order(OrderStatus.RETURNED, datetime(2026, 5, 4, 11)),
        _order(OrderStatus.FAILED, datetime(2026, 5, 5, 11)),
    ]
    assert calendar.unique_statuses(orders, DAY) == [
        OrderStatus.RETURNED, OrderStatus.RECEIVED, OrderStatus.FULFILLED,
    ]
    assert calendar.marker_status(orders, DAY) == OrderStatus.RETURNED
    assert calendar.marker_status(orders, date(2026, 5, 5)) == OrderStatus.FAILED


def test_empty_day_has_no_marker():
    assert calendar.unique_statuses([], DAY) == []
    assert calendar.marker_status([_order(OrderStatus.RECEIVED, datetime(2026, 5, 3))], DAY) is None
