"""
Stock allocation while an order is being edited.

Allocations are tracked as pending deltas per stock item relative to what the
order already holds, and only touch quantity_available when committed.
Quantities never go below zero.
"""
import logging
import uuid
from typing import Dict, Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.stock import OrderItem, StockItem

logger = logging.getLogger(__name__)


class StockManager:
    def __init__(self, db: AsyncSession):
        self.db = db
        self._pending: Dict[uuid.UUID, int] = {}

    # === Availability ===

    def available_quantity(self, stock_item: StockItem, existing_allocation: int = 0) -> int:
        """Base stock plus what the order already holds, minus pending allocations."""
        return stock_item.quantity_available + existing_allocation - self.pending_delta(stock_item)

    def pending_delta(self, stock_item: StockItem) -> int:
        return self._pending.get(stock_item.id, 0)

    @property
    def pending_changes(self) -> Dict[uuid.UUID, int]:
        return dict(self._pending)

    def can_allocate(self, stock_item: StockItem, quantity: int) -> bool:
        return 0 <= quantity <= self.available_quantity(stock_item)

    def max_allocatable(self, stock_item: StockItem) -> int:
        return self.available_quantity(stock_item)

    # === Pending changes ===

    def set_pending_allocation(self, stock_item: StockItem, quantity: int, existing_allocation: int = 0) -> int:
        """
        Record that the order should hold `quantity` of stock_item.
        The delta is clamped to [-existing_allocation, quantity_available];
        a zero delta clears the entry. Returns the recorded delta.
        """
        delta = quantity - existing_allocation
        delta = min(max(-existing_allocation, delta), stock_item.quantity_available)
        if delta == 0:
            self._pending.pop(stock_item.id, None)
        else:
            self._pending[stock_item.id] = delta
        return delta

    def clear_pending_changes(self) -> None:
        self._pending.clear()

    async def commit_pending_changes(self) -> None:
        """Apply pending deltas to stock and clear them."""
        for stock_item_id, delta in self._pending.items():
            stock_item = await self.db.get(StockItem, stock_item_id)
            if stock_item is None:
                logger.warning("Pending allocation for missing stock item %s dropped", stock_item_id)
                continue
            stock_item.quantity_available = max(0, stock_item.quantity_available - delta)
        await self.db.commit()
        logger.debug("Committed %d pending stock allocations", len(self._pending))
        self.clear_pending_changes()

    # === Direct changes ===

    async def set_stock_quantity(self, stock_item: StockItem, quantity: int) -> None:
        stock_item.quantity_available = max(0, quantity)
        await self.db.commit()

    async def adjust_stock_quantity(self, stock_item: StockItem, adjustment: int) -> None:
        """Positive adjustments add stock, negative ones remove it."""
        stock_item.quantity_available = max(0, stock_item.quantity_available + adjustment)
        await self.db.commit()

    async def restore_stock(self, order_items: Iterable[OrderItem]) -> None:
        """Return the quantities of deleted order lines to stock."""
        for order_item in order_items:
            if order_item.stock_item is not None:
                order_item.stock_item.quantity_available += order_item.quantity
        await self.db.commit()

    async def update_stock_for_order_change(self, stock_item: StockItem, old_quantity: int, new_quantity: int) -> None:
        stock_item.quantity_available = max(
            0, stock_item.quantity_available - (new_quantity - old_quantity)
        )
        await self.db.commit()
