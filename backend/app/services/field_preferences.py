"""
Field preferences: which form fields are shown for stock items and orders,
in what order, plus user-defined custom fields.

A preference set is an ordered list of field items. Each item is either a
built-in field (fixed tag) or a custom field, and carries its own visibility
flag and sort order. Structural changes renumber sort orders densely (0..n-1).

Required built-in fields are always visible: stored documents that hide them
are normalised on load, and hiding them explicitly is refused.

Serialised with camelCase keys so documents written by earlier clients
({"fieldItems": [{"isBuiltIn": ..., "builtInField": ..., ...}]}) still load.
"""
import enum
import uuid
from typing import ClassVar, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# === Built-in fields ===

class BuiltInStockField(str, enum.Enum):
    NAME = "name"
    QUANTITY_AVAILABLE = "quantityAvailable"
    PRICE = "price"
    COST = "cost"
    CATEGORY = "category"

    @property
    def display_name(self) -> str:
        return _STOCK_DISPLAY_NAMES[self]

    @property
    def is_required(self) -> bool:
        return self in (BuiltInStockField.NAME, BuiltInStockField.PRICE)

    @property
    def system_image(self) -> str:
        return _STOCK_IMAGES[self]


_STOCK_DISPLAY_NAMES = {
    BuiltInStockField.NAME: "Item Name",
    BuiltInStockField.QUANTITY_AVAILABLE: "Quantity Available",
    BuiltInStockField.PRICE: "Item Price",
    BuiltInStockField.COST: "Item Cost",
    BuiltInStockField.CATEGORY: "Category",
}

_STOCK_IMAGES = {
    BuiltInStockField.NAME: "tag",
    BuiltInStockField.QUANTITY_AVAILABLE: "number.square",
    BuiltInStockField.PRICE: "dollarsign.circle",
    BuiltInStockField.COST: "creditcard",
    BuiltInStockField.CATEGORY: "folder",
}


class BuiltInOrderField(str, enum.Enum):
    ORDER_DATE = "orderDate"
    ORDER_REFERENCE = "orderReference"
    CUSTOMER_NAME = "customerName"
    ORDER_STATUS = "orderStatus"
    ITEMS_SECTION = "itemsSection"
    PLATFORM = "platform"
    SHIPPING = "shipping"
    SELLING_FEES = "sellingFees"
    ADDITIONAL_COSTS = "additionalCosts"
    ORDER_COMPLETION_DATE = "orderCompletionDate"
    NOTES = "notes"

    @property
    def display_name(self) -> str:
        return _ORDER_DISPLAY_NAMES[self]

    @property
    def is_required(self) -> bool:
        return self in (
            BuiltInOrderField.ORDER_DATE,
            BuiltInOrderField.ORDER_STATUS,
            BuiltInOrderField.ITEMS_SECTION,
        )

    @property
    def system_image(self) -> str:
        return _ORDER_IMAGES[self]


_ORDER_DISPLAY_NAMES = {
    BuiltInOrderField.ORDER_DATE: "Order Date",
    BuiltInOrderField.ORDER_REFERENCE: "Order Reference",
    BuiltInOrderField.CUSTOMER_NAME: "Customer Name",
    BuiltInOrderField.ORDER_STATUS: "Order Status",
    BuiltInOrderField.ITEMS_SECTION: "Items",
    BuiltInOrderField.PLATFORM: "Platform",
    BuiltInOrderField.SHIPPING: "Shipping",
    BuiltInOrderField.SELLING_FEES: "Selling Fees",
    BuiltInOrderField.ADDITIONAL_COSTS: "Additional Costs",
    BuiltInOrderField.ORDER_COMPLETION_DATE: "Completion Date",
    BuiltInOrderField.NOTES: "Notes",
}

_ORDER_IMAGES = {
    BuiltInOrderField.ORDER_DATE: "calendar",
    BuiltInOrderField.ORDER_REFERENCE: "number",
    BuiltInOrderField.CUSTOMER_NAME: "person",
    BuiltInOrderField.ORDER_STATUS: "checklist",
    BuiltInOrderField.ITEMS_SECTION: "list.bullet.rectangle",
    BuiltInOrderField.PLATFORM: "square.stack.3d.down.forward",
    BuiltInOrderField.SHIPPING: "truck.box.badge.clock",
    BuiltInOrderField.SELLING_FEES: "dollarsign.circle",
    BuiltInOrderField.ADDITIONAL_COSTS: "dollarsign.circle",
    BuiltInOrderField.ORDER_COMPLETION_DATE: "calendar.badge.checkmark",
    BuiltInOrderField.NOTES: "text.alignleft",
}


# === Custom fields ===

class StockFieldType(str, enum.Enum):
    TEXT = "text"
    NUMBER = "number"
    DROPDOWN = "dropdown"


class OrderFieldType(str, enum.Enum):
    TEXT = "text"


_FIELD_TYPE_IMAGES = {"text": "textformat", "number": "number", "dropdown": "list.bullet"}


class CustomStockField(_CamelModel):
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str = Field(..., min_length=1, max_length=100)
    placeholder: str = ""
    field_type: StockFieldType = StockFieldType.TEXT
    is_required: bool = False
    is_visible: bool = True
    dropdown_options: List[str] = Field(default_factory=list)


class CustomOrderField(_CamelModel):
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str = Field(..., min_length=1, max_length=100)
    placeholder: str = ""
    field_type: OrderFieldType = OrderFieldType.TEXT
    is_required: bool = False
    is_visible: bool = True
    dropdown_options: List[str] = Field(default_factory=list)


# === Field items ===

class FieldItem(_CamelModel):
    """Shared behaviour of stock and order field items."""

    is_built_in: bool
    is_visible: bool = True
    sort_order: int = 0

    @model_validator(mode="after")
    def _required_built_ins_stay_visible(self):
        if self.is_built_in and self.built_in_field is not None and self.built_in_field.is_required:
            self.is_visible = True
        return self

    @property
    def id(self) -> str:
        """Built-in tag, or "custom_<name>" for custom fields."""
        if self.is_built_in and self.built_in_field is not None:
            return self.built_in_field.value
        if self.custom_field is not None:
            return f"custom_{self.custom_field.name}"
        return "unknown"

    @property
    def display_name(self) -> str:
        if self.is_built_in:
            return self.built_in_field.display_name if self.built_in_field else "Unknown Field"
        return self.custom_field.name if self.custom_field else "Unknown Field"

    @property
    def is_required(self) -> bool:
        if self.is_built_in:
            return self.built_in_field.is_required if self.built_in_field else False
        return self.custom_field.is_required if self.custom_field else False

    @property
    def system_image(self) -> str:
        if self.is_built_in:
            return self.built_in_field.system_image if self.built_in_field else "questionmark"
        if self.custom_field is None:
            return "questionmark"
        return _FIELD_TYPE_IMAGES.get(self.custom_field.field_type.value, "textformat")

    @classmethod
    def built_in(cls, field, is_visible: bool = True, sort_order: int = 0):
        return cls(is_built_in=True, built_in_field=field, is_visible=is_visible, sort_order=sort_order)

    @classmethod
    def custom(cls, field, is_visible: bool = True, sort_order: int = 0):
        return cls(is_built_in=False, custom_field=field, is_visible=is_visible, sort_order=sort_order)


class StockFieldItem(FieldItem):
    built_in_field: Optional[BuiltInStockField] = None
    custom_field: Optional[CustomStockField] = None


class OrderFieldItem(FieldItem):
    built_in_field: Optional[BuiltInOrderField] = None
    custom_field: Optional[CustomOrderField] = None


# === Preference sets ===

class FieldPreferences(_CamelModel):
    """Ordered field list with add/remove/move bookkeeping."""

    item_class: ClassVar[Type[FieldItem]]
    default_order: ClassVar[tuple] = ()

    @classmethod
    def default(cls):
        return cls(field_items=[
            cls.item_class.built_in(field, is_visible=True, sort_order=index)
            for index, field in enumerate(cls.default_order)
        ])

    def field_ids(self) -> List[str]:
        return [item.id for item in self.field_items]

    def get_field(self, field_id: str):
        for item in self.field_items:
            if item.id == field_id:
                return item
        raise KeyError(field_id)

    def add_custom_field(self, field) -> None:
        """Append a custom field, visible, at the end of the order."""
        item = self.item_class.custom(field, is_visible=True, sort_order=len(self.field_items))
        if item.id in self.field_ids():
            raise ValueError(f"A field named '{field.name}' already exists")
        self.field_items.append(item)

    def remove_field(self, field_id: str) -> None:
        """Remove a field and close the gap in sort orders."""
        self.field_items = [item for item in self.all_fields_in_order if item.id != field_id]
        self.update_sort_orders()

    def move_field(self, from_index: int, to_index: int) -> None:
        """Move the field at from_index (in display order) to to_index, then renumber."""
        items = self.all_fields_in_order
        count = len(items)
        if not (0 <= from_index < count and 0 <= to_index < count):
            raise ValueError(f"Move {from_index} -> {to_index} out of range for {count} fields")
        items.insert(to_index, items.pop(from_index))
        self.field_items = items
        self.update_sort_orders()

    def update_sort_orders(self) -> None:
        for index, item in enumerate(self.field_items):
            item.sort_order = index

    def set_field_visibility(self, field_id: str, visible: bool) -> None:
        item = self.get_field(field_id)
        if not visible and item.is_built_in and item.is_required:
            raise ValueError(f"'{item.display_name}' is required and cannot be hidden")
        item.is_visible = visible

    def is_field_visible(self, field_id: str) -> bool:
        """Visibility of a field; fields not in the list count as visible."""
        try:
            return self.get_field(field_id).is_visible
        except KeyError:
            return True

    @property
    def visible_fields(self) -> list:
        return sorted(
            (item for item in self.field_items if item.is_visible),
            key=lambda item: item.sort_order,
        )

    @property
    def all_fields_in_order(self) -> list:
        return sorted(self.field_items, key=lambda item: item.sort_order)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, data):
        return cls.model_validate_json(data)


class StockFieldPreferences(FieldPreferences):
    item_class: ClassVar[Type[FieldItem]] = StockFieldItem
    default_order: ClassVar[tuple] = (
        BuiltInStockField.NAME,
        BuiltInStockField.QUANTITY_AVAILABLE,
        BuiltInStockField.CATEGORY,
        BuiltInStockField.PRICE,
        BuiltInStockField.COST,
    )

    field_items: List[StockFieldItem] = Field(default_factory=list)


class OrderFieldPreferences(FieldPreferences):
    item_class: ClassVar[Type[FieldItem]] = OrderFieldItem
    default_order: ClassVar[tuple] = (
        BuiltInOrderField.ORDER_DATE,
        BuiltInOrderField.ORDER_REFERENCE,
        BuiltInOrderField.CUSTOMER_NAME,
        BuiltInOrderField.ORDER_STATUS,
        BuiltInOrderField.ITEMS_SECTION,
        BuiltInOrderField.PLATFORM,
        BuiltInOrderField.SHIPPING,
        BuiltInOrderField.SELLING_FEES,
        BuiltInOrderField.ADDITIONAL_COSTS,
        BuiltInOrderField.ORDER_COMPLETION_DATE,
        BuiltInOrderField.NOTES,
    )

    field_items: List[OrderFieldItem] = Field(default_factory=list)
