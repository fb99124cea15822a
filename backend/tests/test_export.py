"""
Unit tests for CSV export: columns, cell values and date-range presets.
Run from repository root: pytest backend/tests/test_export.py -v
"""
import csv
import io
from datetime import date, datetime
from decimal import Decimal

import pytest

from app.models.enums import OrderStatus, Platform
from app.models.stock import Category, Order, OrderItem, StockItem
from app.services import export
from app.services.export import ExportDateRange
from app.services.field_preferences import (
    CustomOrderField,
    CustomStockField,
    OrderFieldPreferences,
    StockFieldPreferences,
)


def _rows(content):
    return list(csv.reader(io.StringIO(content)))


def _order(received=datetime(2026, 3, 1, 12, 0), items=(), **fields):
    return Order(order_received_date=received, items=list(items), **fields)


def test_orders_csv_with_default_columns():
    order = _order(
        items=[
            OrderItem(stock_item=StockItem(name="Widget"), quantity=2),
            OrderItem(stock_item=None, quantity=1),
        ],
        order_reference="A-1",
        status=OrderStatus.ON_HOLD,
        platform=Platform.EBAY,
        shipping_cost=Decimal("2.5"),
        selling_fees=Decimal("1.25"),
        notes="Fragile, handle with care",
    )
    header, row = _rows(export.orders_csv([order], OrderFieldPreferences.default()))

    assert header == [
        "Order Date", "Order Reference", "Customer Name", "Order Status", "Items", "Platform",
        "Shipping", "Selling Fees", "Additional Costs", "Completion Date", "Notes", "Products",
    ]
    assert row == [
        "2026-03-01", "A-1", "N/A", "On Hold", "2 items", "eBay",
        "2.50", "1.25", "0.00", "N/A", "Fragile, handle with care",
        "Widget (x2); Unknown Item (x1)",
    ]


def test_orders_csv_follows_visibility_order_and_custom_fields():
    prefs = OrderFieldPreferences.default()
    for field_id in ("orderReference", "customerName", "platform", "shipping", "sellingFees",
                     "additionalCosts", "orderCompletionDate", "notes"):
        prefs.set_field_visibility(field_id, False)
    prefs.add_custom_field(CustomOrderField(name="Gift note"))
    prefs.move_field(11, 0)

    gift = _order(status=OrderStatus.SHIPPED, attributes={"Gift note": "Happy birthday"})
    plain = _order(received=datetime(2026, 3, 2, 9, 0), order_completion_date=datetime(2026, 3, 4, 9, 0))
    header, first, second = _rows(export.orders_csv([gift, plain], prefs))

    assert header == ["Gift note", "Order Date", "Order Status", "Items", "Products"]
    assert first == ["Happy birthday", "2026-03-01", "Shipped", "0 items", "No items"]
    assert second == ["", "2026-03-02", "Received", "0 items", "No items"]


def test_stock_items_csv():
    prefs = StockFieldPreferences.default()
    prefs.add_custom_field(CustomStockField(name="Colour"))
    prefs.set_field_visibility("quantityAvailable", False)
    mug = StockItem(
        name="Mug", quantity_available=3, price=Decimal("7.5"), cost=Decimal("2"),
        category=Category(name="Kitchen"), attributes={"Colour": "Blue"},
    )
    plate = StockItem(name="Plate", quantity_available=0, price=Decimal("4"), cost=Decimal("1.10"))

    header, *rows = _rows(export.stock_items_csv([mug, plate], prefs))
    assert header == ["Item Name", "Category", "Item Price", "Item Cost", "Colour"]
    assert rows == [
        ["Mug", "Kitchen", "7.50", "2.00", "Blue"],
        ["Plate", "Uncategorized", "4.00", "1.10", ""],
    ]


def test_empty_export_is_header_only():
    assert _rows(export.stock_items_csv([], StockFieldPreferences.default())) == [
        ["Item Name", "Quantity Available", "Category", "Item Price", "Item Cost"],
    ]


def test_date_bounds_presets():
    now = datetime(2026, 5, 31, 10, 0)
    assert export.date_bounds(ExportDateRange.ALL_TIME, now) == (None, None)
    assert export.date_bounds(ExportDateRange.LAST_30_DAYS, now) == (datetime(2026, 5, 1, 10, 0), now)
    # February has no 31st
    assert export.date_bounds(ExportDateRange.LAST_3_MONTHS, now) == (datetime(2026, 2, 28, 10, 0), now)
    assert export.date_bounds(ExportDateRange.LAST_12_MONTHS, now) == (datetime(2025, 5, 31, 10, 0), now)
    assert export.date_bounds(ExportDateRange.LAST_6_MONTHS, datetime(2026, 2, 15))[0] == datetime(2025, 8, 15)


def test_custom_range_covers_whole_days():
    start, end = export.date_bounds(
        ExportDateRange.CUSTOM, datetime(2026, 5, 31), date(2026, 1, 1), date(2026, 1, 31),
    )
    assert start == datetime(2026, 1, 1, 0, 0)
    assert end == datetime(2026, 1, 31, 23, 59, 59, 999999)

    orders = [
        _order(received=datetime(2025, 12, 31, 23, 59)),
        _order(received=datetime(2026, 1, 1, 0, 0)),
        _order(received=datetime(2026, 1, 31, 23, 0)),
        _order(received=datetime(2026, 2, 1, 0, 0)),
    ]
    kept = export.filter_orders(orders, start, end)
    assert [o.order_received_date for o in kept] == [datetime(2026, 1, 1, 0, 0), datetime(2026, 1, 31, 23, 0)]


def test_custom_range_needs_ordered_dates():
    now = datetime(2026, 5, 31)
    with pytest.raises(ValueError):
        export.date_bounds(ExportDateRange.CUSTOM, now, date(2026, 1, 1), None)
    with pytest.raises(ValueError):
        export.date_bounds(ExportDateRange.CUSTOM, now, date(2026, 2, 1), date(2026, 1, 1))
