"""
Reusable form templates for stock items and orders
"""
import uuid
from datetime import datetime
from typing import Dict
from sqlalchemy import String, DateTime, Boolean, JSON, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from app.core.database import Base
from app.models.enums import OrderStatus, Platform, TemplateType
from app.models.stock import enum_column, utcnow


class AttributeTemplate(Base):
    """Named set of custom attribute values applied to a new stock item or order."""
    __tablename__ = "attribute_templates"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    attributes: Mapped[Dict[str, str]] = mapped_column(JSON, nullable=False, default=dict)
    template_type: Mapped[TemplateType] = mapped_column(enum_column(TemplateType), nullable=False)
    date_created: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False)

    def __repr__(self) -> str:
        return f"<AttributeTemplate {self.name} ({self.template_type.value})>"


class OrderTemplate(Base):
    """
    Prefilled order form: status, platform and custom attributes.
    Customer name and items are never part of a template.
    """
    __tablename__ = "order_templates"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    status: Mapped[OrderStatus] = mapped_column(enum_column(OrderStatus), nullable=False)
    platform: Mapped[Platform] = mapped_column(enum_column(Platform), nullable=False)
    custom_attributes: Mapped[Dict[str, str]] = mapped_column(JSON, nullable=False, default=dict)
    date_created: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False)

    def __repr__(self) -> str:
        return f"<OrderTemplate {self.name} default={self.is_default}>"
