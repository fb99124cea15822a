"""
Tests for order line editing before an order is saved.
"""
import uuid
from decimal import Decimal

from app.models.stock import Order, OrderItem, StockItem
from app.services.order_draft import OrderDraft, OrderItemEntry


def _stock(name="Scarf", quantity=3, price="12.50"):
    return StockItem(id=uuid.uuid4(), name=name, quantity_available=quantity,
                     price=Decimal(price), cost=Decimal("4.00"))


def test_new_line_must_fit_available_stock():
    scarf = _stock(quantity=3)
    assert OrderItemEntry(stock_item=scarf, quantity=3).is_valid
    assert not OrderItemEntry(stock_item=scarf, quantity=4).is_valid
    assert OrderItemEntry(stock_item=scarf, quantity=4).has_insufficient_stock
    assert not OrderItemEntry(stock_item=scarf, quantity=0).is_valid
    assert not OrderItemEntry(stock_item=None, quantity=1).is_valid


def test_existing_line_only_needs_positive_quantity():
    scarf = _stock(quantity=0)
    entry = OrderItemEntry(stock_item=scarf, quantity=2, is_from_existing_order=True)
    assert entry.is_valid
    assert entry.has_insufficient_stock


def test_update_stock_item_adds_changes_and_removes():
    draft = OrderDraft()
    scarf = _stock()
    draft.update_stock_item(scarf, 1)
    draft.update_stock_item(scarf, 2)
    assert len(draft.items) == 1
    assert draft.items[0].quantity == 2

    draft.update_stock_item(scarf, 0)
    assert draft.items == []

    # Zero for an absent line does nothing
    draft.update_stock_item(scarf, 0)
    assert draft.items == []


def test_totals_only_count_valid_lines():
    draft = OrderDraft()
    scarf = _stock(quantity=3, price="12.50")
    hat = _stock(name="Hat", quantity=1, price="8.00")
    draft.update_stock_item(scarf, 2)
    draft.update_stock_item(hat, 5)

    assert draft.total_items_price == Decimal("25.00")
    assert [entry.stock_item.name for entry in draft.valid_items] == ["Scarf"]
    assert not draft.has_valid_items

    draft.update_stock_item(hat, 1)
    assert draft.has_valid_items
    assert draft.total_items_price == Decimal("33.00")


def test_empty_draft_has_no_valid_items():
    draft = OrderDraft()
    assert not draft.has_valid_items
    assert draft.total_items_price == Decimal("0")


def test_load_order_marks_lines_existing_and_skips_orphans():
    scarf = _stock(quantity=0)
    order = Order(items=[
        OrderItem(stock_item=scarf, quantity=2),
        OrderItem(stock_item=None, quantity=4),
    ])
    draft = OrderDraft()
    draft.update_stock_item(_stock(name="Other"), 1)
    draft.load_order(order)

    assert len(draft.items) == 1
    assert draft.items[0].is_from_existing_order
    assert draft.has_valid_items
    assert draft.existing_quantities() == {scarf.id: 2}


def test_remove_item_and_clear():
    draft = OrderDraft()
    draft.update_stock_item(_stock(name="A"), 1)
    draft.update_stock_item(_stock(name="B"), 1)
    draft.remove_item(5)
    assert len(draft.items) == 2
    draft.remove_item(0)
    assert [entry.stock_item.name for entry in draft.items] == ["B"]
    draft.clear()
    assert draft.items == []
