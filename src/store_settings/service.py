"""
Paramètres de la boutique.

Les paramètres par défaut sont créés à la première lecture.
"""
import logging
import re
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from src.config import settings
from src.core.utils import utc_now
from src.store_settings.exceptions import InvalidSettingValueException, StoreSettingNotFoundException
from src.store_settings.models import StoreSetting

logger = logging.getLogger(__name__)

ORDER_PREFIX_SLUG = "order_prefix"
ORDER_PREFIX_PATTERN = re.compile(r"^[A-Za-z0-9]{1,10}$")

DEFAULT_SETTINGS: Dict[str, Dict[str, str]] = {
    ORDER_PREFIX_SLUG: {"name": "Order number prefix", "value": settings.DEFAULT_ORDER_PREFIX},
}


class StoreSettingService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _seed_defaults(self) -> None:
        existing = set((await self.db.execute(select(StoreSetting.slug))).scalars().all())
        missing = [slug for slug in DEFAULT_SETTINGS if slug not in existing]
        if not missing:
            return
        for slug in missing:
            self.db.add(StoreSetting(slug=slug, **DEFAULT_SETTINGS[slug]))
        await self.db.flush()
        logger.info(f"[StoreSettingService] Paramètres par défaut créés: {', '.join(missing)}")

    async def list_settings(self) -> List[StoreSetting]:
        await self._seed_defaults()
        await self.db.commit()
        return list((await self.db.execute(select(StoreSetting).order_by(StoreSetting.slug))).scalars().all())

    async def get_value(self, slug: str, default: Optional[str] = None) -> Optional[str]:
        stmt = select(StoreSetting.value).where(StoreSetting.slug == slug)
        value = (await self.db.execute(stmt)).scalar_one_or_none()
        return value if value else default

    async def get_order_prefix(self) -> str:
        return await self.get_value(ORDER_PREFIX_SLUG, settings.DEFAULT_ORDER_PREFIX)

    async def update_setting(self, slug: str, value: str) -> StoreSetting:
        await self._seed_defaults()
        setting = (await self.db.execute(select(StoreSetting).where(StoreSetting.slug == slug))).scalars().first()
        if setting is None:
            raise StoreSettingNotFoundException(slug)

        value = value.strip()
        if slug == ORDER_PREFIX_SLUG and not ORDER_PREFIX_PATTERN.match(value):
            raise InvalidSettingValueException("Order prefix must be 1-10 alphanumeric characters")

        setting.value = value
        setting.updated_at = utc_now()
        self.db.add(setting)
        await self.db.commit()
        await self.db.refresh(setting)
        logger.info(f"[StoreSettingService] Paramètre '{slug}' mis à jour: {value}")
        return setting
