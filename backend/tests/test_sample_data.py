"""
Tests for the sample data generator and demo mode reads.
"""
from datetime import datetime
from decimal import Decimal
from unittest.mock import patch

import pytest
from sqlalchemy import func, select

from app.models.enums import DeliveryMethod, OrderStatus, Platform
from app.models.stock import Category, Order, OrderItem, StockItem
from app.services.sample_data import (
    DemoDataService,
    SampleDataGenerator,
)

NOW = datetime(2026, 6, 15, 14, 30)


@pytest.fixture
def sample():
    return SampleDataGenerator(seed=42, now=NOW).generate()


def test_generated_counts(sample):
    assert len(sample.categories) == 10
    assert len(sample.stock_items) == 50
    assert len(sample.orders) == 108


def test_order_items_reference_generated_stock(sample):
    stock_ids = {item.id for item in sample.stock_items}
    for order in sample.orders:
        assert order.items
        for order_item in order.items:
            assert order_item.stock_item.id in stock_ids


def test_stock_prices_are_marked_up_and_capped(sample):
    for item in sample.stock_items:
        assert Decimal("5") <= item.cost <= Decimal("400")
        assert item.cost < item.price <= Decimal("500")
        assert 0 <= item.quantity_available <= 50
        assert item.category is not None


def test_keyword_categories(sample):
    by_name = {item.name: item for item in sample.stock_items}
    assert by_name["Samsung Galaxy Watch"].category.name == "Electronics"
    assert by_name["Vans Old Skool"].category.name == "Footwear"
    assert by_name["Champion Hoodie"].category.name == "Clothing"


def test_five_orders_today(sample):
    today = [o for o in sample.orders if o.order_received_date.date() == NOW.date()]
    assert len(today) == 5
    assert all(o.order_received_date <= NOW for o in today)


def test_history_orders_newest_are_fulfilled(sample):
    history = sorted(sample.orders[25:100], key=lambda o: o.order_received_date, reverse=True)
    assert all((NOW - o.order_received_date).days >= 44 for o in history)
    assert all(o.status == OrderStatus.FULFILLED for o in history[:37])
    assert all(o.tracking_reference.startswith("TRK") for o in history[:37])
    assert all(o.order_completion_date is not None for o in history[:37])
    assert all(o.tracking_reference is None for o in history[37:])


def test_upcoming_orders_are_received_pickups(sample):
    upcoming = sample.orders[100:]
    assert len(upcoming) == 8
    assert all(o.order_received_date > NOW for o in upcoming)
    assert all(o.status == OrderStatus.RECEIVED for o in upcoming)
    assert all(o.delivery_method == DeliveryMethod.COLLECTED for o in upcoming)


def test_generator_clock_defaults_to_utc():
    with patch("app.services.sample_data.utcnow", return_value=NOW):
        assert SampleDataGenerator(seed=1).now == NOW


def test_same_seed_same_data():
    first = SampleDataGenerator(seed=3, now=NOW).generate()
    second = SampleDataGenerator(seed=3, now=NOW).generate()
    assert [s.price for s in first.stock_items] == [s.price for s in second.stock_items]
    assert [o.order_reference for o in first.orders] == [o.order_reference for o in second.orders]


def test_order_reference_formats():
    generator = SampleDataGenerator(seed=1, now=NOW)
    assert generator.order_reference(5, Platform.EBAY) == "EB-100005"
    assert generator.order_reference(5, Platform.VINTED) == "VT10000005"
    assert generator.order_reference(5, Platform.SHOPIFY) == "#1005"
    assert generator.order_reference(5, Platform.CUSTOM) == "ORD-10005"
    assert generator.order_reference(5, Platform.AMAZON).endswith("-1000005")


def test_match_stock_item_uses_alternatives(sample):
    generator = SampleDataGenerator(seed=1, now=NOW)
    assert generator.match_stock_item("Jordan", sample.stock_items).name == "Vintage Nike Air Jordan 1"
    # No product contains "dress"; the first clothing alternative is used
    assert generator.match_stock_item("Dress", sample.stock_items).name == "Champion Hoodie"


def test_realistic_status_for_old_orders_is_completed_stage():
    generator = SampleDataGenerator(seed=1, now=NOW)
    old = datetime(2025, 1, 1)
    allowed = {OrderStatus.FULFILLED, OrderStatus.DELIVERED, OrderStatus.RETURNED,
               OrderStatus.REFUNDED, OrderStatus.CANCELED}
    assert all(generator.realistic_status(old) in allowed for _ in range(50))


@pytest.mark.asyncio
async def test_demo_mode_reads_sample_and_toggling_clears_cache(db):
    demo = DemoDataService(enabled=True, seed=5)
    orders = await demo.get_orders(db)
    assert len(orders) == 108
    dates = [o.order_received_date for o in orders]
    assert dates == sorted(dates, reverse=True)

    first_sample = demo.sample
    assert demo.sample is first_sample
    demo.set_enabled(True)
    assert demo.sample is not first_sample

    demo.set_enabled(False)
    assert await demo.get_orders(db) == []
    assert await demo.get_stock_items(db) == []
    assert await demo.get_categories(db) == []


def test_search_helpers(sample):
    hoodies = DemoDataService.search_stock_items(sample.stock_items, "HOODIE")
    assert {item.name for item in hoodies} == {"Champion Hoodie", "Off-White Hoodie"}
    assert DemoDataService.search_stock_items(sample.stock_items, "") == sample.stock_items

    ebay = DemoDataService.search_orders(sample.orders, "ebay")
    assert ebay
    assert all(o.platform == Platform.EBAY or "ebay" in (o.customer_name or "").lower() for o in ebay)


@pytest.mark.asyncio
async def test_load_into_session_replaces_rows(db):
    db.add(Category(name="Old"))
    await db.commit()

    demo = DemoDataService(seed=11)
    await demo.load_into_session(db)
    assert not demo.is_enabled

    async def count(model):
        return (await db.execute(select(func.count()).select_from(model))).scalar_one()

    assert await count(Category) == 10
    assert await count(StockItem) == 50
    assert await count(Order) == 108
    assert await count(OrderItem) == 108
