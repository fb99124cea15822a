"""
Stock and order models
"""
import uuid
from datetime import datetime, timezone
from typing import Optional, List, Dict
from decimal import Decimal
from sqlalchemy import (
    String, Integer, DateTime, Numeric, Boolean,
    ForeignKey, Text, JSON, Uuid, Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.core.database import Base
from app.models.enums import (
    OrderStatus, Platform, Currency, DeliveryMethod, ShippingCompany,
)
from app.services import calculations


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def enum_column(enum_cls) -> SAEnum:
    """Store enum values (not member names) as plain strings."""
    return SAEnum(
        enum_cls,
        native_enum=False,
        length=30,
        values_callable=lambda members: [m.value for m in members],
    )


class Category(Base):
    """
    User-defined grouping for stock items.
    Deleting a category leaves its stock items uncategorised.
    """
    __tablename__ = "categories"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    color_hex: Mapped[str] = mapped_column(String(9), nullable=False, default="#007AFF")
    icon: Mapped[str] = mapped_column(String(100), nullable=False, default="folder")

    stock_items: Mapped[List["StockItem"]] = relationship(
        "StockItem",
        back_populates="category",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Category {self.name}>"


class StockItem(Base):
    """
    An item held in stock.
    Shared by many order items; deleting it nullifies their reference.
    """
    __tablename__ = "stock_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity_available: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    currency: Mapped[Optional[Currency]] = mapped_column(
        enum_column(Currency),
        nullable=True,
        comment="ISO 4217 currency code",
    )
    # Custom field values keyed by custom field name
    attributes: Mapped[Dict[str, str]] = mapped_column(JSON, nullable=False, default=dict)

    category_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
    )
    category: Mapped[Optional["Category"]] = relationship(
        "Category", back_populates="stock_items"
    )
    order_items: Mapped[List["OrderItem"]] = relationship(
        "OrderItem",
        back_populates="stock_item",
        passive_deletes=True,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<StockItem {self.name} qty={self.quantity_available}>"


class Order(Base):
    """
    A customer order recorded against stock.
    Owns its items: they are deleted with the order.
    Totals and profit are derived on read, never stored.
    """
    __tablename__ = "orders"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    order_received_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, index=True)
    order_reference: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    customer_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    status: Mapped[OrderStatus] = mapped_column(
        enum_column(OrderStatus), nullable=False, default=OrderStatus.RECEIVED
    )
    platform: Mapped[Platform] = mapped_column(
        enum_column(Platform), nullable=False, default=Platform.CUSTOM
    )

    # Cost inputs. additional_costs is entered on its own, it is not the sum of the fee fields.
    shipping_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    selling_fees: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    transaction_fees: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    other_costs: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    additional_costs: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    customer_shipping_charge: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )

    # Fulfilment
    delivery_method: Mapped[Optional[DeliveryMethod]] = mapped_column(
        enum_column(DeliveryMethod), nullable=True
    )
    shipping_method: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    shipping_company: Mapped[Optional[ShippingCompany]] = mapped_column(
        enum_column(ShippingCompany), nullable=True
    )
    tracking_reference: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    order_completion_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Completion reminder
    reminder_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    reminder_time_before_completion: Mapped[int] = mapped_column(
        Integer, nullable=False, default=24 * 60 * 60, comment="Seconds before completion date"
    )
    notification_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    attributes: Mapped[Dict[str, str]] = mapped_column(JSON, nullable=False, default=dict)

    items: Mapped[List["OrderItem"]] = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        onupdate=utcnow
    )

    @property
    def items_total(self) -> Decimal:
        return calculations.items_total(self.items)

    @property
    def items_cost_total(self) -> Decimal:
        return calculations.items_cost_total(self.items)

    @property
    def total_value(self) -> Decimal:
        return calculations.total_value(self)

    @property
    def total_cost(self) -> Decimal:
        return calculations.total_cost(self)

    @property
    def calculated_profit(self) -> Decimal:
        return calculations.calculated_profit(self)

    @property
    def display_date(self) -> datetime:
        """Calendar position: completion date when set, else when received."""
        return self.order_completion_date or self.order_received_date

    def __repr__(self) -> str:
        return f"<Order {self.order_reference or self.id} {self.status}>"


class OrderItem(Base):
    """
    One line of an order: a quantity of a stock item.
    The stock item reference becomes NULL if the stock item is deleted.
    """
    __tablename__ = "order_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    order_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), nullable=False
    )
    stock_item_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("stock_items.id", ondelete="SET NULL"), nullable=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    order: Mapped["Order"] = relationship("Order", back_populates="items")
    stock_item: Mapped[Optional["StockItem"]] = relationship(
        "StockItem", back_populates="order_items"
    )

    @property
    def line_total(self) -> Decimal:
        return calculations.line_total(self)

    def __repr__(self) -> str:
        return f"<OrderItem {self.stock_item_id} qty={self.quantity}>"
