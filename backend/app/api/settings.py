"""
Settings API endpoints
- Field preferences for stock and order forms
- Demo mode and sample data loading
- Enabled order statuses and platforms
- Attribute and order templates
"""
import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import BaseModel, Field, ValidationError
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_demo_data
from app.core.database import get_db
from app.models.enums import OrderStatus, Platform, TemplateType
from app.models.templates import AttributeTemplate, OrderTemplate
from app.services import app_settings
from app.services.field_preferences import CustomOrderField, CustomStockField, FieldPreferences
from app.services.preference_store import ORDER, PREFERENCE_CLASSES, STOCK, FieldPreferenceStore
from app.services.sample_data import DemoDataService

router = APIRouter()
logger = logging.getLogger(__name__)

_CUSTOM_FIELD_CLASSES = {STOCK: CustomStockField, ORDER: CustomOrderField}


# === Pydantic Schemas ===

class FieldMove(BaseModel):
    from_index: int = Field(..., ge=0)
    to_index: int = Field(..., ge=0)


class FieldVisibility(BaseModel):
    is_visible: bool


class DemoModeUpdate(BaseModel):
    enabled: bool


class DemoModeResponse(BaseModel):
    enabled: bool


class SampleLoadResponse(BaseModel):
    categories: int
    stock_items: int
    orders: int


class EnabledStatuses(BaseModel):
    statuses: List[OrderStatus]


class EnabledPlatforms(BaseModel):
    platforms: List[Platform]


class AttributeTemplateCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    attributes: Dict[str, str] = Field(default_factory=dict)
    template_type: TemplateType
    is_default: bool = False


class AttributeTemplateUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    attributes: Optional[Dict[str, str]] = None
    is_default: Optional[bool] = None


class AttributeTemplateResponse(BaseModel):
    id: uuid.UUID
    name: str
    attributes: Dict[str, str]
    template_type: TemplateType
    date_created: datetime
    is_default: bool

    model_config = {"from_attributes": True}


class OrderTemplateCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    status: OrderStatus = OrderStatus.RECEIVED
    platform: Platform = Platform.CUSTOM
    custom_attributes: Dict[str, str] = Field(default_factory=dict)
    is_default: bool = False


class OrderTemplateUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    status: Optional[OrderStatus] = None
    platform: Optional[Platform] = None
    custom_attributes: Optional[Dict[str, str]] = None
    is_default: Optional[bool] = None


class OrderTemplateResponse(BaseModel):
    id: uuid.UUID
    name: str
    status: OrderStatus
    platform: Platform
    custom_attributes: Dict[str, str]
    date_created: datetime
    is_default: bool

    model_config = {"from_attributes": True}


# === Field Preference Endpoints ===

def _check_preference_type(preference_type: str) -> str:
    if preference_type not in PREFERENCE_CLASSES:
        raise HTTPException(status_code=404, detail=f"Unknown preference type: {preference_type}")
    return preference_type


def _preferences_body(preferences: FieldPreferences) -> Dict[str, Any]:
    """Stored document shape plus the visible field ids in display order."""
    body = preferences.model_dump(by_alias=True, mode="json")
    body["visibleFieldIds"] = [item.id for item in preferences.visible_fields]
    return body


@router.get("/field-preferences/{preference_type}")
async def get_field_preferences(preference_type: str, db: AsyncSession = Depends(get_db)):
    """Field preferences, or the defaults when none are stored."""
    _check_preference_type(preference_type)
    return _preferences_body(await FieldPreferenceStore(db).load(preference_type))


@router.put("/field-preferences/{preference_type}")
async def replace_field_preferences(
    preference_type: str,
    document: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
):
    """Replace the whole preference document."""
    _check_preference_type(preference_type)
    try:
        preferences = PREFERENCE_CLASSES[preference_type].model_validate(document)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid field preferences: {e.error_count()} errors")
    preferences.field_items = preferences.all_fields_in_order
    preferences.update_sort_orders()
    await FieldPreferenceStore(db).save(preference_type, preferences)
    return _preferences_body(preferences)


@router.post("/field-preferences/{preference_type}/custom-fields", status_code=status.HTTP_201_CREATED)
async def add_custom_field(
    preference_type: str,
    field: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
):
    """Append a custom field. Names must be unique within a preference type."""
    _check_preference_type(preference_type)
    try:
        custom_field = _CUSTOM_FIELD_CLASSES[preference_type].model_validate(field)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid custom field: {e.error_count()} errors")
    store = FieldPreferenceStore(db)
    preferences = await store.load(preference_type)
    try:
        preferences.add_custom_field(custom_field)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    await store.save(preference_type, preferences)
    return _preferences_body(preferences)


@router.delete("/field-preferences/{preference_type}/fields/{field_id}")
async def remove_field(preference_type: str, field_id: str, db: AsyncSession = Depends(get_db)):
    _check_preference_type(preference_type)
    store = FieldPreferenceStore(db)
    preferences = await store.load(preference_type)
    try:
        preferences.get_field(field_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Field not found: {field_id}")
    preferences.remove_field(field_id)
    await store.save(preference_type, preferences)
    return _preferences_body(preferences)


@router.post("/field-preferences/{preference_type}/move")
async def move_field(
    preference_type: str,
    body: FieldMove,
    db: AsyncSession = Depends(get_db),
):
    """Move a field within the display order."""
    _check_preference_type(preference_type)
    store = FieldPreferenceStore(db)
    preferences = await store.load(preference_type)
    try:
        preferences.move_field(body.from_index, body.to_index)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    await store.save(preference_type, preferences)
    return _preferences_body(preferences)


@router.put("/field-preferences/{preference_type}/fields/{field_id}/visibility")
async def set_field_visibility(
    preference_type: str,
    field_id: str,
    body: FieldVisibility,
    db: AsyncSession = Depends(get_db),
):
    _check_preference_type(preference_type)
    store = FieldPreferenceStore(db)
    preferences = await store.load(preference_type)
    try:
        preferences.set_field_visibility(field_id, body.is_visible)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Field not found: {field_id}")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    await store.save(preference_type, preferences)
    return _preferences_body(preferences)


@router.post("/field-preferences/{preference_type}/reset")
async def reset_field_preferences(preference_type: str, db: AsyncSession = Depends(get_db)):
    """Forget stored preferences and return the defaults."""
    _check_preference_type(preference_type)
    return _preferences_body(await FieldPreferenceStore(db).reset(preference_type))


# === Demo Mode Endpoints ===

@router.get("/demo-mode", response_model=DemoModeResponse)
async def get_demo_mode(demo: DemoDataService = Depends(get_demo_data)):
    return DemoModeResponse(enabled=demo.is_enabled)


@router.put("/demo-mode", response_model=DemoModeResponse)
async def set_demo_mode(
    body: DemoModeUpdate,
    db: AsyncSession = Depends(get_db),
    demo: DemoDataService = Depends(get_demo_data),
):
    """Switch listings between sample data and stored data."""
    await app_settings.set_demo_mode(db, body.enabled)
    demo.set_enabled(body.enabled)
    return DemoModeResponse(enabled=demo.is_enabled)


@router.post("/sample-data/load", response_model=SampleLoadResponse)
async def load_sample_data(
    db: AsyncSession = Depends(get_db),
    demo: DemoDataService = Depends(get_demo_data),
):
    """Replace all stored stock, categories and orders with a generated sample set."""
    data = await demo.load_into_session(db)
    return SampleLoadResponse(
        categories=len(data.categories),
        stock_items=len(data.stock_items),
        orders=len(data.orders),
    )


# === Enabled Statuses / Platforms ===

@router.get("/order-statuses", response_model=EnabledStatuses)
async def get_enabled_statuses(db: AsyncSession = Depends(get_db)):
    return EnabledStatuses(statuses=await app_settings.get_enabled_statuses(db))


@router.put("/order-statuses", response_model=EnabledStatuses)
async def set_enabled_statuses(body: EnabledStatuses, db: AsyncSession = Depends(get_db)):
    if not body.statuses:
        raise HTTPException(status_code=400, detail="At least one order status must stay enabled")
    await app_settings.set_enabled_statuses(db, body.statuses)
    return EnabledStatuses(statuses=await app_settings.get_enabled_statuses(db))


@router.get("/platforms", response_model=EnabledPlatforms)
async def get_enabled_platforms(db: AsyncSession = Depends(get_db)):
    return EnabledPlatforms(platforms=await app_settings.get_enabled_platforms(db))


@router.put("/platforms", response_model=EnabledPlatforms)
async def set_enabled_platforms(body: EnabledPlatforms, db: AsyncSession = Depends(get_db)):
    if not body.platforms:
        raise HTTPException(status_code=400, detail="At least one platform must stay enabled")
    await app_settings.set_enabled_platforms(db, body.platforms)
    return EnabledPlatforms(platforms=await app_settings.get_enabled_platforms(db))


# === Attribute Template Endpoints ===

async def _clear_attribute_defaults(db: AsyncSession, template_type: TemplateType) -> None:
    await db.execute(
        update(AttributeTemplate)
        .where(AttributeTemplate.template_type == template_type)
        .values(is_default=False)
    )


@router.get("/attribute-templates", response_model=List[AttributeTemplateResponse])
async def list_attribute_templates(
    template_type: Optional[TemplateType] = None,
    db: AsyncSession = Depends(get_db),
):
    q = select(AttributeTemplate).order_by(AttributeTemplate.name)
    if template_type is not None:
        q = q.where(AttributeTemplate.template_type == template_type)
    result = await db.execute(q)
    return list(result.scalars().all())


@router.post("/attribute-templates", response_model=AttributeTemplateResponse, status_code=status.HTTP_201_CREATED)
async def create_attribute_template(body: AttributeTemplateCreate, db: AsyncSession = Depends(get_db)):
    """Create an attribute template; a new default replaces the previous default of its type."""
    if body.is_default:
        await _clear_attribute_defaults(db, body.template_type)
    template = AttributeTemplate(
        name=body.name.strip(),
        attributes=body.attributes,
        template_type=body.template_type,
        is_default=body.is_default,
    )
    db.add(template)
    await db.commit()
    await db.refresh(template)
    return template


@router.put("/attribute-templates/{template_id}", response_model=AttributeTemplateResponse)
async def update_attribute_template(
    template_id: uuid.UUID,
    body: AttributeTemplateUpdate,
    db: AsyncSession = Depends(get_db),
):
    template = await db.get(AttributeTemplate, template_id)
    if not template:
        raise HTTPException(status_code=404, detail="Attribute template not found")
    if body.is_default:
        await _clear_attribute_defaults(db, template.template_type)
    for k, v in body.model_dump(exclude_unset=True).items():
        if v is not None:
            setattr(template, k, v.strip() if k == "name" else v)
    await db.commit()
    await db.refresh(template)
    return template


@router.delete("/attribute-templates/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_attribute_template(template_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    template = await db.get(AttributeTemplate, template_id)
    if not template:
        raise HTTPException(status_code=404, detail="Attribute template not found")
    await db.delete(template)
    await db.commit()


# === Order Template Endpoints ===

@router.get("/order-templates", response_model=List[OrderTemplateResponse])
async def list_order_templates(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(OrderTemplate).order_by(OrderTemplate.name))
    return list(result.scalars().all())


@router.post("/order-templates", response_model=OrderTemplateResponse, status_code=status.HTTP_201_CREATED)
async def create_order_template(body: OrderTemplateCreate, db: AsyncSession = Depends(get_db)):
    """Create an order template; at most one order template is the default."""
    if body.is_default:
        await db.execute(update(OrderTemplate).values(is_default=False))
    template = OrderTemplate(
        name=body.name.strip(),
        status=body.status,
        platform=body.platform,
        custom_attributes=body.custom_attributes,
        is_default=body.is_default,
    )
    db.add(template)
    await db.commit()
    await db.refresh(template)
    return template


@router.put("/order-templates/{template_id}", response_model=OrderTemplateResponse)
async def update_order_template(
    template_id: uuid.UUID,
    body: OrderTemplateUpdate,
    db: AsyncSession = Depends(get_db),
):
    template = await db.get(OrderTemplate, template_id)
    if not template:
        raise HTTPException(status_code=404, detail="Order template not found")
    if body.is_default:
        await db.execute(update(OrderTemplate).values(is_default=False))
    for k, v in body.model_dump(exclude_unset=True).items():
        if v is not None:
            setattr(template, k, v.strip() if k == "name" else v)
    await db.commit()
    await db.refresh(template)
    return template


@router.delete("/order-templates/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_order_template(template_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    template = await db.get(OrderTemplate, template_id)
    if not template:
        raise HTTPException(status_code=404, detail="Order template not found")
    await db.delete(template)
    await db.commit()
