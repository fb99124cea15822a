"""
Order totals, cost and profit.

All functions are total: empty item lists, missing stock items and unset cost
fields count as zero. Negative costs are accepted as entered.

    items_total       = sum(stock_item.price * quantity)
    items_cost_total  = sum(stock_item.cost * quantity)
    total_value       = items_total + shipping_cost + additional_costs
    total_cost        = items_cost_total + shipping_cost + additional_costs
    calculated_profit = items_total - total_cost
"""
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, NamedTuple, Optional

ZERO = Decimal("0")


def _money(value) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def line_total(item) -> Decimal:
    """Price of one order line; a line whose stock item was deleted is worth 0."""
    if item.stock_item is None:
        return ZERO
    return _money(item.stock_item.price) * (item.quantity or 0)


def line_cost(item) -> Decimal:
    if item.stock_item is None:
        return ZERO
    return _money(item.stock_item.cost) * (item.quantity or 0)


def items_total(items: Optional[Iterable]) -> Decimal:
    return sum((line_total(i) for i in items or ()), ZERO)


def items_cost_total(items: Optional[Iterable]) -> Decimal:
    return sum((line_cost(i) for i in items or ()), ZERO)


def total_value(order) -> Decimal:
    return (
        items_total(order.items)
        + _money(order.shipping_cost)
        + _money(order.additional_costs)
    )


def total_cost(order) -> Decimal:
    return (
        items_cost_total(order.items)
        + _money(order.shipping_cost)
        + _money(order.additional_costs)
    )


def calculated_profit(order) -> Decimal:
    return items_total(order.items) - total_cost(order)


class SalesSummary(NamedTuple):
    total_revenue: Decimal
    total_profit: Decimal
    total_orders: int


class MonthlySales(NamedTuple):
    month: str
    revenue: Decimal
    profit: Decimal


def sales_summary(orders: Iterable) -> SalesSummary:
    """Revenue (total order value) and profit summed across orders."""
    revenue = ZERO
    profit = ZERO
    count = 0
    for order in orders:
        revenue += total_value(order)
        profit += calculated_profit(order)
        count += 1
    return SalesSummary(revenue, profit, count)


def monthly_sales(orders: Iterable) -> List[MonthlySales]:
    """Revenue and profit per calendar month of the received date, oldest first."""
    buckets = {}
    for order in orders:
        received = order.order_received_date
        key = datetime(received.year, received.month, 1)
        bucket = buckets.setdefault(key, [ZERO, ZERO])
        bucket[0] += total_value(order)
        bucket[1] += calculated_profit(order)
    return [
        MonthlySales(month.strftime("%b %Y"), revenue, profit)
        for month, (revenue, profit) in sorted(buckets.items())
    ]
