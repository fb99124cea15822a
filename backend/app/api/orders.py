"""
Orders API: CRUD with nested items, search, calendar and sales analytics.

Saving an order never changes stock on its own. Callers opt in with
commit_stock (create/update) or restore_stock (delete).
"""
import logging
import uuid
from collections import defaultdict
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field, field_validator
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.api.deps import get_demo_data, get_reminders
from app.core.database import get_db
from app.models.enums import DeliveryMethod, OrderStatus, Platform, ShippingCompany
from app.models.stock import Order, OrderItem, StockItem, utcnow
from app.services import calculations
from app.services import calendar as order_calendar
from app.services import export
from app.services.export import ExportDateRange
from app.services.order_draft import OrderDraft
from app.services.preference_store import FieldPreferenceStore
from app.services.reminders import ReminderScheduler
from app.services.sample_data import DemoDataService
from app.services.stock_manager import StockManager

router = APIRouter()
logger = logging.getLogger(__name__)


# === Schemas ===

class OrderItemIn(BaseModel):
    stock_item_id: uuid.UUID
    quantity: int = Field(..., ge=1)


class OrderFields(BaseModel):
    order_received_date: Optional[datetime] = None
    order_reference: Optional[str] = Field(None, max_length=100)
    customer_name: Optional[str] = Field(None, max_length=255)
    status: Optional[OrderStatus] = None
    platform: Optional[Platform] = None
    shipping_cost: Optional[Decimal] = None
    selling_fees: Optional[Decimal] = None
    transaction_fees: Optional[Decimal] = None
    other_costs: Optional[Decimal] = None
    additional_costs: Optional[Decimal] = None
    customer_shipping_charge: Optional[Decimal] = None
    delivery_method: Optional[DeliveryMethod] = None
    shipping_method: Optional[str] = Field(None, max_length=100)
    shipping_company: Optional[ShippingCompany] = None
    tracking_reference: Optional[str] = Field(None, max_length=100)
    order_completion_date: Optional[datetime] = None
    reminder_enabled: Optional[bool] = None
    reminder_time_before_completion: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None
    attributes: Optional[Dict[str, str]] = None

    @field_validator("order_received_date", "order_completion_date")
    @classmethod
    def _naive_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Dates are stored as naive UTC."""
        if v is not None and v.tzinfo is not None:
            return v.astimezone(timezone.utc).replace(tzinfo=None)
        return v


class OrderCreate(OrderFields):
    items: List[OrderItemIn] = Field(default_factory=list)


class OrderUpdate(OrderFields):
    items: Optional[List[OrderItemIn]] = None


class StockItemSummary(BaseModel):
    id: uuid.UUID
    name: str
    price: Decimal
    cost: Decimal
    quantity_available: int

    model_config = {"from_attributes": True}


class OrderItemResponse(BaseModel):
    id: uuid.UUID
    quantity: int
    stock_item: Optional[StockItemSummary] = None
    line_total: Decimal

    model_config = {"from_attributes": True}


class OrderResponse(BaseModel):
    id: uuid.UUID
    order_received_date: datetime
    order_reference: Optional[str]
    customer_name: Optional[str]
    status: OrderStatus
    platform: Platform
    shipping_cost: Decimal
    selling_fees: Decimal
    transaction_fees: Decimal
    other_costs: Decimal
    additional_costs: Decimal
    customer_shipping_charge: Decimal
    delivery_method: Optional[DeliveryMethod]
    shipping_method: Optional[str]
    shipping_company: Optional[ShippingCompany]
    tracking_reference: Optional[str]
    order_completion_date: Optional[datetime]
    reminder_enabled: bool
    reminder_time_before_completion: int
    notification_id: Optional[str]
    notes: Optional[str]
    attributes: Dict[str, str]
    items: List[OrderItemResponse]
    # Derived
    items_total: Decimal
    items_cost_total: Decimal
    total_value: Decimal
    total_cost: Decimal
    calculated_profit: Decimal
    display_date: datetime

    model_config = {"from_attributes": True}


# === Helpers ===

def _order_query():
    return select(Order).options(
        selectinload(Order.items).selectinload(OrderItem.stock_item)
    )


async def _load_order(db: AsyncSession, order_id: uuid.UUID) -> Order:
    result = await db.execute(
        _order_query().where(Order.id == order_id).execution_options(populate_existing=True)
    )
    order = result.scalar_one_or_none()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


async def _load_stock_items(db: AsyncSession, lines) -> Dict[uuid.UUID, StockItem]:
    """Stock items referenced by the lines; 400 if any is missing."""
    ids = {line.stock_item_id for line in lines}
    if not ids:
        return {}
    result = await db.execute(select(StockItem).where(StockItem.id.in_(ids)))
    found = {s.id: s for s in result.scalars().all()}
    missing = ids - found.keys()
    if missing:
        raise HTTPException(
            status_code=400,
            detail=f"Stock item not found: {', '.join(sorted(str(m) for m in missing))}",
        )
    return found


def _quantities(lines) -> Dict[uuid.UUID, int]:
    totals: Dict[uuid.UUID, int] = defaultdict(int)
    for line in lines:
        if line.stock_item_id is not None:
            totals[line.stock_item_id] += line.quantity
    return dict(totals)


def _sync_reminder(order: Order, reminders: ReminderScheduler) -> None:
    """Replace any scheduled reminder with one matching the order's current settings."""
    if order.notification_id:
        reminders.cancel_reminder(order.notification_id)
        order.notification_id = None
    if order.reminder_enabled and order.order_completion_date is not None:
        order.notification_id = reminders.schedule_order_completion_reminder(
            order_id=order.id,
            order_reference=order.order_reference,
            customer_name=order.customer_name,
            completion_date=order.order_completion_date,
            time_before_completion=order.reminder_time_before_completion,
        )


# === List / search ===

@router.get("", response_model=List[OrderResponse])
async def list_orders(
    search: Optional[str] = Query(None, description="Match customer, reference, platform or status"),
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    platform: Optional[Platform] = Query(None),
    db: AsyncSession = Depends(get_db),
    demo: DemoDataService = Depends(get_demo_data),
):
    """Orders newest first, from the sample set when demo mode is on."""
    orders = await demo.get_orders(db)
    if status_filter is not None:
        orders = [o for o in orders if o.status == status_filter]
    if platform is not None:
        orders = [o for o in orders if o.platform == platform]
    if search and search.strip():
        orders = demo.search_orders(orders, search.strip())
    return orders


# === Calendar ===

class CalendarDayResponse(BaseModel):
    day: date
    marker_status: Optional[OrderStatus]
    statuses: List[OrderStatus]
    orders: List[OrderResponse]


class CalendarMarker(BaseModel):
    day: date
    marker_status: OrderStatus
    order_count: int


@router.get("/calendar/day", response_model=CalendarDayResponse)
async def get_calendar_day(
    day: date = Query(..., description="YYYY-MM-DD"),
    db: AsyncSession = Depends(get_db),
    demo: DemoDataService = Depends(get_demo_data),
):
    """Orders shown on one calendar day, most urgent first."""
    orders = await demo.get_orders(db)
    return CalendarDayResponse(
        day=day,
        marker_status=order_calendar.marker_status(orders, day),
        statuses=order_calendar.unique_statuses(orders, day),
        orders=order_calendar.sorted_by_priority(order_calendar.orders_on(orders, day)),
    )


@router.get("/calendar/month", response_model=List[CalendarMarker])
async def get_calendar_month(
    year: int = Query(..., ge=1970, le=9999),
    month: int = Query(..., ge=1, le=12),
    db: AsyncSession = Depends(get_db),
    demo: DemoDataService = Depends(get_demo_data),
):
    """One marker per day of the month that has orders."""
    orders = await demo.get_orders(db)
    days = sorted({
        o.display_date.date() for o in orders
        if o.display_date.year == year and o.display_date.month == month
    })
    return [
        CalendarMarker(
            day=d,
            marker_status=order_calendar.marker_status(orders, d),
            order_count=len(order_calendar.orders_on(orders, d)),
        )
        for d in days
    ]


# === Analytics ===

class SalesSummaryResponse(BaseModel):
    total_revenue: Decimal
    total_profit: Decimal
    total_orders: int


class MonthlySalesPoint(BaseModel):
    month: str
    revenue: Decimal
    profit: Decimal


async def _orders_for_analytics(
    db: AsyncSession,
    demo: DemoDataService,
    from_date: Optional[date],
    to_date: Optional[date],
    include_canceled: bool,
) -> List[Order]:
    if from_date and to_date and from_date > to_date:
        raise HTTPException(status_code=400, detail="from must be <= to")
    orders = await demo.get_orders(db)
    if not include_canceled:
        orders = [o for o in orders if o.status != OrderStatus.CANCELED]
    if from_date:
        orders = [o for o in orders if o.order_received_date.date() >= from_date]
    if to_date:
        orders = [o for o in orders if o.order_received_date.date() <= to_date]
    return orders


@router.get("/analytics/summary", response_model=SalesSummaryResponse)
async def get_sales_summary(
    from_date: Optional[date] = Query(None, alias="from", description="Start date (YYYY-MM-DD)"),
    to_date: Optional[date] = Query(None, alias="to", description="End date (YYYY-MM-DD)"),
    include_canceled: bool = Query(False),
    db: AsyncSession = Depends(get_db),
    demo: DemoDataService = Depends(get_demo_data),
):
    """Total revenue, profit and order count."""
    orders = await _orders_for_analytics(db, demo, from_date, to_date, include_canceled)
    summary = calculations.sales_summary(orders)
    return SalesSummaryResponse(**summary._asdict())


@router.get("/analytics/monthly", response_model=List[MonthlySalesPoint])
async def get_monthly_sales(
    from_date: Optional[date] = Query(None, alias="from", description="Start date (YYYY-MM-DD)"),
    to_date: Optional[date] = Query(None, alias="to", description="End date (YYYY-MM-DD)"),
    include_canceled: bool = Query(False),
    db: AsyncSession = Depends(get_db),
    demo: DemoDataService = Depends(get_demo_data),
):
    orders = await _orders_for_analytics(db, demo, from_date, to_date, include_canceled)
    return [MonthlySalesPoint(**row._asdict()) for row in calculations.monthly_sales(orders)]


# === Export ===

@router.get("/export")
async def export_orders(
    date_range: ExportDateRange = Query(ExportDateRange.ALL_TIME, alias="range"),
    start: Optional[date] = Query(None, description="Custom range start, YYYY-MM-DD"),
    end: Optional[date] = Query(None, description="Custom range end, YYYY-MM-DD"),
    db: AsyncSession = Depends(get_db),
    demo: DemoDataService = Depends(get_demo_data),
):
    """CSV of orders received in the range, columns following the order field preferences."""
    now = utcnow()
    try:
        range_start, range_end = export.date_bounds(date_range, now, start, end)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    orders = export.filter_orders(await demo.get_orders(db), range_start, range_end)
    preferences = await FieldPreferenceStore(db).load_order()
    content = export.orders_csv(orders, preferences)
    logger.info("Exported %d orders (%s)", len(orders), date_range.value)

    return StreamingResponse(
        iter([content]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=orders_{now.strftime('%Y%m%d_%H%M%S')}.csv"},
    )


# === Draft validation ===

class DraftLineIn(BaseModel):
    stock_item_id: uuid.UUID
    quantity: int = Field(..., ge=0)


class DraftRequest(BaseModel):
    order_id: Optional[uuid.UUID] = None
    items: List[DraftLineIn] = Field(default_factory=list)


class DraftLineResponse(BaseModel):
    stock_item_id: uuid.UUID
    quantity: int
    is_from_existing_order: bool
    is_valid: bool
    has_insufficient_stock: bool
    total_price: Decimal


class DraftResponse(BaseModel):
    items: List[DraftLineResponse]
    total_items_price: Decimal
    has_valid_items: bool


@router.post("/draft", response_model=DraftResponse)
async def validate_order_draft(body: DraftRequest, db: AsyncSession = Depends(get_db)):
    """
    Check order lines against stock before saving. With order_id, the order's
    current lines are loaded first and the requested lines are applied on top
    (quantity 0 removes a line).
    """
    draft = OrderDraft()
    if body.order_id is not None:
        draft.load_order(await _load_order(db, body.order_id))
    stock_items = await _load_stock_items(db, body.items)
    for line in body.items:
        draft.update_stock_item(stock_items[line.stock_item_id], line.quantity)
    return DraftResponse(
        items=[
            DraftLineResponse(
                stock_item_id=entry.stock_item.id,
                quantity=entry.quantity,
                is_from_existing_order=entry.is_from_existing_order,
                is_valid=entry.is_valid,
                has_insufficient_stock=entry.has_insufficient_stock,
                total_price=entry.total_price,
            )
            for entry in draft.items
        ],
        total_items_price=draft.total_items_price,
        has_valid_items=draft.has_valid_items,
    )


# === CRUD ===

@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    body: OrderCreate,
    commit_stock: bool = Query(False, description="Take the ordered quantities out of stock"),
    db: AsyncSession = Depends(get_db),
    reminders: ReminderScheduler = Depends(get_reminders),
):
    stock_items = await _load_stock_items(db, body.items)
    manager = StockManager(db)
    if commit_stock:
        for stock_item_id, quantity in _quantities(body.items).items():
            stock_item = stock_items[stock_item_id]
            if not manager.can_allocate(stock_item, quantity):
                raise HTTPException(
                    status_code=400,
                    detail=f"Insufficient stock for {stock_item.name}: {stock_item.quantity_available} available",
                )
            manager.set_pending_allocation(stock_item, quantity)

    fields = body.model_dump(exclude={"items"}, exclude_none=True)
    order = Order(id=uuid.uuid4(), **fields)
    for line in body.items:
        order.items.append(OrderItem(stock_item=stock_items[line.stock_item_id], quantity=line.quantity))
    db.add(order)
    await db.flush()
    _sync_reminder(order, reminders)

    if commit_stock:
        await manager.commit_pending_changes()
    else:
        await db.commit()
    logger.info("Created order %s with %d items", order.id, len(body.items))
    return await _load_order(db, order.id)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    demo: DemoDataService = Depends(get_demo_data),
):
    if demo.is_enabled:
        for order in await demo.get_orders(db):
            if order.id == order_id:
                return order
        raise HTTPException(status_code=404, detail="Order not found")
    return await _load_order(db, order_id)


@router.put("/{order_id}", response_model=OrderResponse)
async def update_order(
    order_id: uuid.UUID,
    body: OrderUpdate,
    commit_stock: bool = Query(False, description="Apply item quantity changes to stock"),
    db: AsyncSession = Depends(get_db),
    reminders: ReminderScheduler = Depends(get_reminders),
):
    """
    Update order fields; when items are given they replace the order's lines.
    With commit_stock, every increase is checked against stock before anything
    changes, and stock is written in the same commit as the order.
    """
    order = await _load_order(db, order_id)

    manager = None
    if body.items is not None:
        stock_items = await _load_stock_items(db, body.items)
        old_quantities = _quantities(order.items)
        new_quantities = _quantities(body.items)
        if commit_stock:
            manager = StockManager(db)
            for stock_item_id in old_quantities.keys() | new_quantities.keys():
                stock_item = stock_items.get(stock_item_id) or await db.get(StockItem, stock_item_id)
                if stock_item is None:
                    continue
                old_quantity = old_quantities.get(stock_item_id, 0)
                new_quantity = new_quantities.get(stock_item_id, 0)
                if new_quantity > manager.available_quantity(stock_item, existing_allocation=old_quantity):
                    raise HTTPException(
                        status_code=400,
                        detail=f"Insufficient stock for {stock_item.name}: {stock_item.quantity_available} available",
                    )
                manager.set_pending_allocation(stock_item, new_quantity, existing_allocation=old_quantity)

    changes = body.model_dump(exclude={"items"}, exclude_unset=True)
    for k, v in changes.items():
        if v is None and k in ("order_received_date", "status", "platform", "reminder_enabled",
                               "reminder_time_before_completion", "attributes"):
            continue
        if v is None and k in ("shipping_cost", "selling_fees", "transaction_fees", "other_costs",
                               "additional_costs", "customer_shipping_charge"):
            v = Decimal("0")
        setattr(order, k, v)

    if body.items is not None:
        order.items.clear()
        for line in body.items:
            order.items.append(OrderItem(stock_item=stock_items[line.stock_item_id], quantity=line.quantity))

    await db.flush()
    _sync_reminder(order, reminders)
    if manager is not None:
        await manager.commit_pending_changes()
    else:
        await db.commit()
    return await _load_order(db, order_id)


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_order(
    order_id: uuid.UUID,
    restore_stock: bool = Query(False, description="Return the order's quantities to stock"),
    db: AsyncSession = Depends(get_db),
    reminders: ReminderScheduler = Depends(get_reminders),
):
    """Delete an order and its items."""
    order = await _load_order(db, order_id)
    if restore_stock:
        await StockManager(db).restore_stock(order.items)
    reminders.cancel_all_order_reminders(order.id)
    await db.delete(order)
    await db.commit()
    logger.info("Deleted order %s (stock restored: %s)", order_id, restore_stock)
