"""
CSV export of orders and stock items.

Columns follow the user's field preferences: visible fields in display order,
built-in fields rendered from the record and custom fields read from its
attributes. Order exports end with a Products column.
"""
import calendar
import csv
import enum
import io
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from app.models.stock import Order, StockItem
from app.services.field_preferences import (
    BuiltInOrderField,
    BuiltInStockField,
    OrderFieldPreferences,
    StockFieldPreferences,
)

NOT_AVAILABLE = "N/A"


class ExportDateRange(str, enum.Enum):
    LAST_30_DAYS = "last_30_days"
    LAST_3_MONTHS = "last_3_months"
    LAST_6_MONTHS = "last_6_months"
    LAST_12_MONTHS = "last_12_months"
    ALL_TIME = "all_time"
    CUSTOM = "custom"


_RANGE_MONTHS = {
    ExportDateRange.LAST_3_MONTHS: 3,
    ExportDateRange.LAST_6_MONTHS: 6,
    ExportDateRange.LAST_12_MONTHS: 12,
}


def _months_before(moment: datetime, months: int) -> datetime:
    """Same day `months` earlier, clamped to the end of shorter months."""
    month_index = moment.year * 12 + moment.month - 1 - months
    year, month = divmod(month_index, 12)
    day = min(moment.day, calendar.monthrange(year, month + 1)[1])
    return moment.replace(year=year, month=month + 1, day=day)


def date_bounds(
    date_range: ExportDateRange,
    now: datetime,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Inclusive received-date bounds for a preset. Custom ranges cover the whole
    start and end days and need both dates.
    """
    if date_range == ExportDateRange.ALL_TIME:
        return None, None
    if date_range == ExportDateRange.CUSTOM:
        if start is None or end is None:
            raise ValueError("Custom range needs start and end dates")
        if start > end:
            raise ValueError("start must be <= end")
        return datetime.combine(start, time.min), datetime.combine(end, time.max)
    if date_range == ExportDateRange.LAST_30_DAYS:
        return now - timedelta(days=30), now
    return _months_before(now, _RANGE_MONTHS[date_range]), now


def filter_orders(
    orders: Iterable[Order],
    start: Optional[datetime],
    end: Optional[datetime],
) -> List[Order]:
    return [
        order for order in orders
        if (start is None or order.order_received_date >= start)
        and (end is None or order.order_received_date <= end)
    ]


def _money(value) -> str:
    return f"{Decimal(value or 0):.2f}"


def _label(value: str) -> str:
    return value.replace("_", " ").title()


def order_field_value(order: Order, field: BuiltInOrderField) -> str:
    if field == BuiltInOrderField.ORDER_DATE:
        return order.order_received_date.date().isoformat()
    if field == BuiltInOrderField.ORDER_REFERENCE:
        return order.order_reference or NOT_AVAILABLE
    if field == BuiltInOrderField.CUSTOMER_NAME:
        return order.customer_name or NOT_AVAILABLE
    if field == BuiltInOrderField.ORDER_STATUS:
        return _label(order.status.value) if order.status else "Received"
    if field == BuiltInOrderField.ITEMS_SECTION:
        return f"{len(order.items)} items"
    if field == BuiltInOrderField.PLATFORM:
        return order.platform.value if order.platform else ""
    if field == BuiltInOrderField.SHIPPING:
        return _money(order.shipping_cost)
    if field == BuiltInOrderField.SELLING_FEES:
        return _money(order.selling_fees)
    if field == BuiltInOrderField.ADDITIONAL_COSTS:
        return _money(order.additional_costs)
    if field == BuiltInOrderField.ORDER_COMPLETION_DATE:
        if order.order_completion_date is None:
            return NOT_AVAILABLE
        return order.order_completion_date.date().isoformat()
    if field == BuiltInOrderField.NOTES:
        return order.notes or ""
    raise ValueError(f"Unhandled order field: {field}")


def stock_field_value(item: StockItem, field: BuiltInStockField) -> str:
    if field == BuiltInStockField.NAME:
        return item.name or NOT_AVAILABLE
    if field == BuiltInStockField.QUANTITY_AVAILABLE:
        return str(item.quantity_available)
    if field == BuiltInStockField.PRICE:
        return _money(item.price)
    if field == BuiltInStockField.COST:
        return _money(item.cost)
    if field == BuiltInStockField.CATEGORY:
        return item.category.name if item.category is not None else "Uncategorized"
    raise ValueError(f"Unhandled stock field: {field}")


def products_summary(order: Order) -> str:
    """ "Name (xQty); ..." for every line, or "No items"."""
    parts = [
        f"{item.stock_item.name if item.stock_item is not None else 'Unknown Item'} (x{item.quantity})"
        for item in order.items
    ]
    return "; ".join(parts) if parts else "No items"


def _write(header: List[str], rows: Iterable[List[str]]) -> str:
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(header)
    writer.writerows(rows)
    return output.getvalue()


def orders_csv(orders: Iterable[Order], preferences: OrderFieldPreferences) -> str:
    fields = preferences.visible_fields
    header = [item.display_name for item in fields] + ["Products"]

    def row(order: Order) -> List[str]:
        values = []
        for item in fields:
            if item.is_built_in and item.built_in_field is not None:
                values.append(order_field_value(order, item.built_in_field))
            elif item.custom_field is not None:
                values.append((order.attributes or {}).get(item.custom_field.name, ""))
        values.append(products_summary(order))
        return values

    return _write(header, (row(order) for order in orders))


def stock_items_csv(stock_items: Iterable[StockItem], preferences: StockFieldPreferences) -> str:
    fields = preferences.visible_fields
    header = [item.display_name for item in fields]

    def row(stock_item: StockItem) -> List[str]:
        values = []
        for item in fields:
            if item.is_built_in and item.built_in_field is not None:
                values.append(stock_field_value(stock_item, item.built_in_field))
            elif item.custom_field is not None:
                values.append((stock_item.attributes or {}).get(item.custom_field.name, ""))
        return values

    return _write(header, (row(stock_item) for stock_item in stock_items))
