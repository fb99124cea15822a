"""
In-progress order lines while an order is created or edited.

Lines loaded from an existing order already hold their stock, so they are only
checked for a positive quantity. New lines must also fit in quantity_available.
"""
import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional

from app.models.stock import Order, StockItem
from app.services.calculations import ZERO


@dataclass
class OrderItemEntry:
    stock_item: Optional[StockItem] = None
    quantity: int = 1
    is_from_existing_order: bool = False
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    @property
    def is_valid(self) -> bool:
        if self.stock_item is None:
            return False
        if self.is_from_existing_order:
            return self.quantity > 0
        return 0 < self.quantity <= self.stock_item.quantity_available

    @property
    def has_insufficient_stock(self) -> bool:
        if self.stock_item is None:
            return False
        return self.quantity > self.stock_item.quantity_available

    @property
    def total_price(self) -> Decimal:
        if self.stock_item is None:
            return ZERO
        return Decimal(self.stock_item.price or 0) * self.quantity


class OrderDraft:
    def __init__(self):
        self.items: List[OrderItemEntry] = []

    @property
    def total_items_price(self) -> Decimal:
        """Sum over valid lines only."""
        return sum((entry.total_price for entry in self.valid_items), ZERO)

    @property
    def valid_items(self) -> List[OrderItemEntry]:
        return [entry for entry in self.items if entry.is_valid]

    @property
    def has_valid_items(self) -> bool:
        """True when there is at least one line and every line is valid."""
        return bool(self.items) and all(entry.is_valid for entry in self.items)

    def _index_of(self, stock_item: StockItem) -> Optional[int]:
        for index, entry in enumerate(self.items):
            if entry.stock_item is not None and entry.stock_item.id == stock_item.id:
                return index
        return None

    def update_stock_item(self, stock_item: StockItem, quantity: int) -> None:
        """Add, change or (quantity 0) remove the line for stock_item."""
        index = self._index_of(stock_item)
        if index is not None:
            if quantity == 0:
                del self.items[index]
            else:
                self.items[index].quantity = quantity
        elif quantity > 0:
            self.items.append(OrderItemEntry(stock_item=stock_item, quantity=quantity))

    def existing_quantities(self) -> Dict[uuid.UUID, int]:
        return {
            entry.stock_item.id: entry.quantity
            for entry in self.items
            if entry.stock_item is not None
        }

    def load_order(self, order: Order) -> None:
        """Replace the draft with the order's lines; lines without stock are skipped."""
        self.items = [
            OrderItemEntry(
                stock_item=item.stock_item,
                quantity=item.quantity,
                is_from_existing_order=True,
            )
            for item in order.items
            if item.stock_item is not None
        ]

    def remove_item(self, index: int) -> None:
        if 0 <= index < len(self.items):
            del self.items[index]

    def clear(self) -> None:
        self.items = []
