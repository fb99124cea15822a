"""
Stock API: categories and stock items.

Listings follow demo mode: when it is on they return the sample set instead of
persisted rows. Creating stock items and categories is limited on the free tier.
"""
import logging
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field, field_validator
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.api.deps import get_demo_data, get_entitlements
from app.core.config import settings
from app.core.database import get_db
from app.models.enums import Currency
from app.models.stock import Category, StockItem, utcnow
from app.services import export
from app.services.entitlements import EntitlementService
from app.services.preference_store import FieldPreferenceStore
from app.services.sample_data import DemoDataService
from app.services.stock_manager import StockManager

router = APIRouter()
logger = logging.getLogger(__name__)

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}([0-9A-Fa-f]{2})?$"


# === Categories ===

class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    color_hex: str = Field(default="#007AFF", pattern=HEX_COLOR_PATTERN)
    icon: str = Field(default="folder", max_length=100)


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    color_hex: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    icon: Optional[str] = Field(None, max_length=100)


class CategoryResponse(BaseModel):
    id: uuid.UUID
    name: str
    color_hex: str
    icon: str

    model_config = {"from_attributes": True}


async def _get_category(db: AsyncSession, category_id: uuid.UUID) -> Category:
    category = await db.get(Category, category_id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


@router.get("/categories", response_model=List[CategoryResponse])
async def list_categories(
    db: AsyncSession = Depends(get_db),
    demo: DemoDataService = Depends(get_demo_data),
):
    """Categories sorted by name."""
    return await demo.get_categories(db)


@router.post("/categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    body: CategoryCreate,
    db: AsyncSession = Depends(get_db),
    entitlements: EntitlementService = Depends(get_entitlements),
):
    count = (await db.execute(select(func.count()).select_from(Category))).scalar_one()
    if not entitlements.can_add_category(count):
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail=f"Free plan is limited to {entitlements.category_limit} categories",
        )
    category = Category(name=body.name.strip(), color_hex=body.color_hex, icon=body.icon)
    db.add(category)
    await db.commit()
    await db.refresh(category)
    return category


@router.get("/categories/{category_id}", response_model=CategoryResponse)
async def get_category(category_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    return await _get_category(db, category_id)


@router.put("/categories/{category_id}", response_model=CategoryResponse)
async def update_category(category_id: uuid.UUID, body: CategoryUpdate, db: AsyncSession = Depends(get_db)):
    category = await _get_category(db, category_id)
    for k, v in body.model_dump(exclude_unset=True).items():
        if v is not None:
            setattr(category, k, v.strip() if k == "name" else v)
    await db.commit()
    await db.refresh(category)
    return category


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(category_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """Delete a category; its stock items become uncategorised."""
    category = await _get_category(db, category_id)
    await db.delete(category)
    await db.commit()


# === Stock items ===

def default_currency() -> Optional[Currency]:
    """Configured DEFAULT_CURRENCY, or None when it is not a supported code."""
    try:
        return Currency(settings.DEFAULT_CURRENCY)
    except ValueError:
        logger.warning("Unsupported DEFAULT_CURRENCY %r; new items get no currency", settings.DEFAULT_CURRENCY)
        return None


class StockItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    quantity_available: int = Field(default=0, ge=0)
    price: Decimal = Field(default=Decimal("0"), ge=0)
    cost: Decimal = Field(default=Decimal("0"), ge=0)
    currency: Optional[Currency] = Field(default_factory=default_currency)
    category_id: Optional[uuid.UUID] = None
    attributes: Dict[str, str] = Field(default_factory=dict)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


class StockItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    quantity_available: Optional[int] = Field(None, ge=0)
    price: Optional[Decimal] = Field(None, ge=0)
    cost: Optional[Decimal] = Field(None, ge=0)
    currency: Optional[Currency] = None
    category_id: Optional[uuid.UUID] = None
    attributes: Optional[Dict[str, str]] = None


class StockItemResponse(BaseModel):
    id: uuid.UUID
    name: str
    quantity_available: int
    price: Decimal
    cost: Decimal
    currency: Optional[Currency]
    attributes: Dict[str, str]
    category: Optional[CategoryResponse] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class QuantityAdjustment(BaseModel):
    adjustment: int


class QuantitySet(BaseModel):
    quantity: int


async def _load_stock_item(db: AsyncSession, stock_item_id: uuid.UUID) -> StockItem:
    result = await db.execute(
        select(StockItem)
        .where(StockItem.id == stock_item_id)
        .options(selectinload(StockItem.category))
        .execution_options(populate_existing=True)
    )
    stock_item = result.scalar_one_or_none()
    if not stock_item:
        raise HTTPException(status_code=404, detail="Stock item not found")
    return stock_item


@router.get("/items", response_model=List[StockItemResponse])
async def list_stock_items(
    search: Optional[str] = Query(None, description="Match name or attribute values"),
    category_id: Optional[uuid.UUID] = Query(None),
    db: AsyncSession = Depends(get_db),
    demo: DemoDataService = Depends(get_demo_data),
):
    """Stock items sorted by name, from the sample set when demo mode is on."""
    items = await demo.get_stock_items(db)
    if category_id is not None:
        items = [i for i in items if i.category is not None and i.category.id == category_id]
    if search and search.strip():
        items = demo.search_stock_items(items, search.strip())
    return items


@router.get("/items/export")
async def export_stock_items(
    db: AsyncSession = Depends(get_db),
    demo: DemoDataService = Depends(get_demo_data),
):
    """CSV of all stock items, columns following the stock field preferences."""
    items = await demo.get_stock_items(db)
    preferences = await FieldPreferenceStore(db).load_stock()
    content = export.stock_items_csv(items, preferences)
    logger.info("Exported %d stock items", len(items))

    filename = f"stock_items_{utcnow().strftime('%Y%m%d_%H%M%S')}.csv"
    return StreamingResponse(
        iter([content]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.post("/items", response_model=StockItemResponse, status_code=status.HTTP_201_CREATED)
async def create_stock_item(
    body: StockItemCreate,
    db: AsyncSession = Depends(get_db),
    entitlements: EntitlementService = Depends(get_entitlements),
):
    count = (await db.execute(select(func.count()).select_from(StockItem))).scalar_one()
    if not entitlements.can_add_stock_item(count):
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail=f"Free plan is limited to {entitlements.stock_limit} stock items",
        )
    if body.category_id is not None:
        await _get_category(db, body.category_id)

    stock_item = StockItem(**body.model_dump())
    db.add(stock_item)
    await db.commit()
    logger.info("Created stock item %s (%s)", stock_item.id, stock_item.name)
    return await _load_stock_item(db, stock_item.id)


@router.get("/items/{stock_item_id}", response_model=StockItemResponse)
async def get_stock_item(stock_item_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    return await _load_stock_item(db, stock_item_id)


@router.put("/items/{stock_item_id}", response_model=StockItemResponse)
async def update_stock_item(
    stock_item_id: uuid.UUID,
    body: StockItemUpdate,
    db: AsyncSession = Depends(get_db),
):
    stock_item = await _load_stock_item(db, stock_item_id)
    changes = body.model_dump(exclude_unset=True)
    if changes.get("category_id") is not None:
        await _get_category(db, changes["category_id"])
    for k, v in changes.items():
        if v is None and k not in ("category_id", "currency"):
            continue
        setattr(stock_item, k, v.strip() if k == "name" else v)
    await db.commit()
    return await _load_stock_item(db, stock_item_id)


@router.post("/items/{stock_item_id}/adjust", response_model=StockItemResponse)
async def adjust_stock_item_quantity(
    stock_item_id: uuid.UUID,
    body: QuantityAdjustment,
    db: AsyncSession = Depends(get_db),
):
    """Add (positive) or remove (negative) stock. Quantity never drops below zero."""
    stock_item = await _load_stock_item(db, stock_item_id)
    await StockManager(db).adjust_stock_quantity(stock_item, body.adjustment)
    return await _load_stock_item(db, stock_item_id)


@router.put("/items/{stock_item_id}/quantity", response_model=StockItemResponse)
async def set_stock_item_quantity(
    stock_item_id: uuid.UUID,
    body: QuantitySet,
    db: AsyncSession = Depends(get_db),
):
    stock_item = await _load_stock_item(db, stock_item_id)
    await StockManager(db).set_stock_quantity(stock_item, body.quantity)
    return await _load_stock_item(db, stock_item_id)


@router.delete("/items/{stock_item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_stock_item(stock_item_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """Delete a stock item. Order lines that used it keep their quantity but lose the reference."""
    stock_item = await _load_stock_item(db, stock_item_id)
    await db.delete(stock_item)
    await db.commit()
    logger.info("Deleted stock item %s", stock_item_id)
