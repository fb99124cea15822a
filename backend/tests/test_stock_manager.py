"""
Tests for stock allocation and quantity updates.
"""
import uuid
from decimal import Decimal

import pytest

from app.models.stock import Order, OrderItem, StockItem
from app.services.stock_manager import StockManager


async def _stock(db, quantity=10, name="Mug"):
    item = StockItem(name=name, quantity_available=quantity, price=Decimal("6.00"), cost=Decimal("2.00"))
    db.add(item)
    await db.commit()
    return item


@pytest.mark.asyncio
async def test_pending_allocation_reduces_availability_until_committed(db):
    item = await _stock(db, 10)
    manager = StockManager(db)

    assert manager.set_pending_allocation(item, 3) == 3
    assert manager.available_quantity(item) == 7
    assert manager.can_allocate(item, 7)
    assert not manager.can_allocate(item, 8)
    assert not manager.can_allocate(item, -1)
    assert item.quantity_available == 10

    await manager.commit_pending_changes()
    assert item.quantity_available == 7
    assert manager.pending_changes == {}


@pytest.mark.asyncio
async def test_pending_allocation_is_clamped(db):
    item = await _stock(db, 4)
    manager = StockManager(db)

    assert manager.set_pending_allocation(item, 9) == 4
    # Order already holds 2; dropping to 0 returns at most those 2
    assert manager.set_pending_allocation(item, 0, existing_allocation=2) == -2
    assert manager.pending_delta(item) == -2


@pytest.mark.asyncio
async def test_zero_delta_clears_entry(db):
    item = await _stock(db, 5)
    manager = StockManager(db)
    manager.set_pending_allocation(item, 2)
    assert manager.set_pending_allocation(item, 1, existing_allocation=1) == 0
    assert item.id not in manager.pending_changes


@pytest.mark.asyncio
async def test_existing_allocation_counts_as_available(db):
    item = await _stock(db, 1)
    manager = StockManager(db)
    assert manager.available_quantity(item, existing_allocation=3) == 4
    assert manager.max_allocatable(item) == 1


@pytest.mark.asyncio
async def test_commit_skips_missing_stock_items(db):
    item = await _stock(db, 5)
    manager = StockManager(db)
    manager.set_pending_allocation(item, 2)
    manager._pending[uuid.uuid4()] = 1

    await manager.commit_pending_changes()
    assert item.quantity_available == 3
    assert manager.pending_changes == {}


@pytest.mark.asyncio
async def test_clear_pending_changes(db):
    item = await _stock(db, 5)
    manager = StockManager(db)
    manager.set_pending_allocation(item, 2)
    manager.clear_pending_changes()
    assert manager.available_quantity(item) == 5


@pytest.mark.asyncio
async def test_direct_quantity_changes_never_go_negative(db):
    item = await _stock(db, 5)
    manager = StockManager(db)

    await manager.adjust_stock_quantity(item, 3)
    assert item.quantity_available == 8
    await manager.adjust_stock_quantity(item, -20)
    assert item.quantity_available == 0
    await manager.set_stock_quantity(item, -4)
    assert item.quantity_available == 0
    await manager.set_stock_quantity(item, 12)
    assert item.quantity_available == 12


@pytest.mark.asyncio
async def test_update_for_order_change(db):
    item = await _stock(db, 5)
    manager = StockManager(db)

    await manager.update_stock_for_order_change(item, old_quantity=2, new_quantity=4)
    assert item.quantity_available == 3
    await manager.update_stock_for_order_change(item, old_quantity=4, new_quantity=1)
    assert item.quantity_available == 6
    await manager.update_stock_for_order_change(item, old_quantity=0, new_quantity=50)
    assert item.quantity_available == 0


@pytest.mark.asyncio
async def test_restore_stock_returns_quantities(db):
    mug = await _stock(db, 1, "Mug")
    lamp = await _stock(db, 0, "Lamp")
    order = Order(items=[
        OrderItem(stock_item=mug, quantity=2),
        OrderItem(stock_item=lamp, quantity=3),
        OrderItem(stock_item=None, quantity=7),
    ])
    manager = StockManager(db)

    await manager.restore_stock(order.items)
    assert mug.quantity_available == 3
    assert lamp.quantity_available == 3
