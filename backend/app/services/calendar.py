"""
Calendar grouping of orders. An order sits on its completion date when it has
one, otherwise on the date it was received.
"""
from datetime import date
from typing import Iterable, List, Optional

from app.models.enums import OrderStatus, status_priority
from app.models.stock import Order


def orders_on(orders: Iterable[Order], day: date) -> List[Order]:
    return [order for order in orders if order.display_date.date() == day]


def sorted_by_priority(orders: Iterable[Order]) -> List[Order]:
    """Highest priority first; ties keep their input order."""
    return sorted(orders, key=lambda order: status_priority(order.status), reverse=True)


def unique_statuses(orders: Iterable[Order], day: date) -> List[OrderStatus]:
    """Distinct statuses of the day's orders, highest priority first."""
    statuses = []
    for order in sorted_by_priority(orders_on(orders, day)):
        status = order.status or OrderStatus.RECEIVED
        if status not in statuses:
            statuses.append(status)
    return statuses


def marker_status(orders: Iterable[Order], day: date) -> Optional[OrderStatus]:
    """Status that colours the day's marker, or None for an empty day."""
    statuses = unique_statuses(orders, day)
    return statuses[0] if statuses else None
