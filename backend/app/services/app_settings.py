"""
JSON-valued app settings: demo mode and enabled statuses/platforms.
"""
from typing import Any, List

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.enums import OrderStatus, Platform
from app.models.settings import AppSetting

DEMO_MODE_KEY = "is_demo_mode_enabled"
ENABLED_STATUSES_KEY = "enabled_order_statuses"
ENABLED_PLATFORMS_KEY = "enabled_platforms"


async def get_setting(db: AsyncSession, key: str, default: Any = None) -> Any:
    row = await db.get(AppSetting, key)
    if row is None or row.value is None:
        return default
    return row.value


async def set_setting(db: AsyncSession, key: str, value: Any) -> None:
    row = await db.get(AppSetting, key)
    if row is None:
        db.add(AppSetting(key=key, value=value))
    else:
        row.value = value
    await db.commit()


async def get_demo_mode(db: AsyncSession) -> bool:
    return bool(await get_setting(db, DEMO_MODE_KEY, settings.DEMO_MODE_DEFAULT))


async def set_demo_mode(db: AsyncSession, enabled: bool) -> None:
    await set_setting(db, DEMO_MODE_KEY, bool(enabled))


async def get_enabled_statuses(db: AsyncSession) -> List[OrderStatus]:
    """Statuses offered in order forms, in declaration order. All by default."""
    stored = await get_setting(db, ENABLED_STATUSES_KEY)
    if stored is None:
        return list(OrderStatus)
    return [s for s in OrderStatus if s.value in stored]


async def set_enabled_statuses(db: AsyncSession, statuses: List[OrderStatus]) -> None:
    await set_setting(db, ENABLED_STATUSES_KEY, [s.value for s in statuses])


async def get_enabled_platforms(db: AsyncSession) -> List[Platform]:
    stored = await get_setting(db, ENABLED_PLATFORMS_KEY)
    if stored is None:
        return list(Platform)
    return [p for p in Platform if p.value in stored]


async def set_enabled_platforms(db: AsyncSession, platforms: List[Platform]) -> None:
    await set_setting(db, ENABLED_PLATFORMS_KEY, [p.value for p in platforms])
