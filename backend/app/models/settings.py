"""
Settings and preference storage models
"""
from datetime import datetime
from typing import Any
from sqlalchemy import String, Integer, DateTime, Text, JSON, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from app.core.database import Base
from app.models.stock import utcnow


class FieldPreferenceDocument(Base):
    """
    One JSON document per preference type ("stock" or "order").
    The whole field list is replaced on every save.
    """
    __tablename__ = "field_preference_documents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    preference_type: Mapped[str] = mapped_column(String(20), nullable=False, comment="stock or order")
    doc_id: Mapped[str] = mapped_column(String(50), nullable=False, default="default")
    field_items_data: Mapped[str] = mapped_column(Text, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        onupdate=utcnow
    )

    __table_args__ = (
        UniqueConstraint("preference_type", "doc_id", name="uq_field_preference_doc"),
    )

    def __repr__(self) -> str:
        return f"<FieldPreferenceDocument {self.preference_type}:{self.doc_id} v{self.version}>"


class LegacyPreference(Base):
    """
    Flat key-value blobs written by older app versions.
    Read once by the preference migration and then deleted.
    """
    __tablename__ = "legacy_preferences"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<LegacyPreference {self.key}>"


class AppSetting(Base):
    """
    Small JSON-valued settings: demo mode, enabled statuses and platforms.
    """
    __tablename__ = "app_settings"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[Any] = mapped_column(JSON, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<AppSetting {self.key}>"
