"""
Persistence for field preferences: one JSON document per preference type.

Reads never fail: a missing or undecodable document yields the default field
list (the failure is logged). Writes replace the whole document.

Older clients kept the same JSON blobs in a flat key-value table
(legacy_preferences). migrate_legacy_preferences() imports them once and
deletes the legacy rows; nothing writes to that table afterwards.
"""
import logging
from typing import Optional, Type

from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.settings import FieldPreferenceDocument, LegacyPreference
from app.services.field_preferences import (
    OrderFieldPreferences,
    StockFieldPreferences,
    FieldPreferences,
)

logger = logging.getLogger(__name__)

DEFAULT_DOC_ID = "default"
SCHEMA_VERSION = 1

STOCK = "stock"
ORDER = "order"

PREFERENCE_CLASSES = {
    STOCK: StockFieldPreferences,
    ORDER: OrderFieldPreferences,
}

# Keys used by the flat key-value store of earlier releases
LEGACY_KEYS = {
    STOCK: "stockFieldPreferences",
    ORDER: "orderFieldPreferences",
}


class FieldPreferenceStore:
    """Load and save field preference documents through one session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_document(self, preference_type: str) -> Optional[FieldPreferenceDocument]:
        result = await self.db.execute(
            select(FieldPreferenceDocument).where(
                FieldPreferenceDocument.preference_type == preference_type,
                FieldPreferenceDocument.doc_id == DEFAULT_DOC_ID,
            )
        )
        return result.scalar_one_or_none()

    async def _load_stored(self, preference_type: str) -> Optional[FieldPreferences]:
        """Stored preferences, or None if there is no usable document."""
        cls: Type[FieldPreferences] = PREFERENCE_CLASSES[preference_type]
        document = await self._get_document(preference_type)
        if document is None:
            return None
        try:
            return cls.from_json(document.field_items_data)
        except ValidationError:
            logger.warning(
                "Stored %s field preferences could not be decoded; using defaults",
                preference_type,
                exc_info=True,
            )
            return None

    async def load(self, preference_type: str) -> FieldPreferences:
        stored = await self._load_stored(preference_type)
        if stored is None:
            return PREFERENCE_CLASSES[preference_type].default()
        return stored

    async def save(self, preference_type: str, preferences: FieldPreferences) -> None:
        """Replace the stored document with the given preferences."""
        data = preferences.to_json()
        document = await self._get_document(preference_type)
        if document is None:
            self.db.add(FieldPreferenceDocument(
                preference_type=preference_type,
                doc_id=DEFAULT_DOC_ID,
                field_items_data=data,
                version=SCHEMA_VERSION,
            ))
        else:
            document.field_items_data = data
            document.version = SCHEMA_VERSION
        await self.db.commit()
        logger.debug("Saved %s field preferences (%d fields)", preference_type, len(preferences.field_items))

    async def reset(self, preference_type: str) -> FieldPreferences:
        """Drop the stored document so reads fall back to defaults."""
        await self.db.execute(
            delete(FieldPreferenceDocument).where(
                FieldPreferenceDocument.preference_type == preference_type
            )
        )
        await self.db.commit()
        return PREFERENCE_CLASSES[preference_type].default()

    async def load_stock(self) -> StockFieldPreferences:
        return await self.load(STOCK)

    async def save_stock(self, preferences: StockFieldPreferences) -> None:
        await self.save(STOCK, preferences)

    async def load_order(self) -> OrderFieldPreferences:
        return await self.load(ORDER)

    async def save_order(self, preferences: OrderFieldPreferences) -> None:
        await self.save(ORDER, preferences)


async def migrate_legacy_preferences(db: AsyncSession) -> list:
    """
    Move legacy key-value preference blobs into documents.
    A legacy blob is only imported when no document exists for its type.
    Legacy rows are deleted either way. Returns the migrated types.
    """
    store = FieldPreferenceStore(db)
    migrated = []
    for preference_type, key in LEGACY_KEYS.items():
        legacy = await db.get(LegacyPreference, key)
        if legacy is None:
            continue
        if await store._get_document(preference_type) is None:
            cls = PREFERENCE_CLASSES[preference_type]
            try:
                preferences = cls.from_json(legacy.value)
            except ValidationError:
                logger.warning("Legacy %s preferences are unreadable; discarding", preference_type)
            else:
                logger.info("Migrating %s field preferences from legacy store", preference_type)
                await store.save(preference_type, preferences)
                migrated.append(preference_type)
        await db.delete(legacy)
        await db.commit()
    return migrated
