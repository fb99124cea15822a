"""
Database models
"""
from app.models.settings import FieldPreferenceDocument, LegacyPreference, AppSetting
from app.models.stock import Category, StockItem, Order, OrderItem
from app.models.templates import AttributeTemplate, OrderTemplate

__all__ = [
    # Settings
    "FieldPreferenceDocument",
    "LegacyPreference",
    "AppSetting",
    # Stock
    "Category",
    "StockItem",
    "Order",
    "OrderItem",
    # Templates
    "AttributeTemplate",
    "OrderTemplate",
]
