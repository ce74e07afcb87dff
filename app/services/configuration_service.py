import copy
from typing import List, Optional, Tuple

from sqlalchemy import select, desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import SystemConfiguration, User
from app.core.presets import DEFAULT_CONFIGURATION, BUSINESS_PRESETS, CONFIGURATION_KEYS
from app.exceptions.errors import NotFoundError, PermissionDeniedError, VersionConflictError
from app.utils.retry import retry_read
from app.core.logger import get_logger

logger = get_logger("configuration_service")


def _check_key(key: str) -> None:
    if key not in CONFIGURATION_KEYS:
        raise NotFoundError(f"Unknown configuration '{key}'")


class ConfigurationService:
    """Versioned branding/content documents. Every change appends a new version."""

    @staticmethod
    async def _latest(db: AsyncSession, key: str) -> Optional[SystemConfiguration]:
        result = await db.execute(
            select(SystemConfiguration)
            .where(SystemConfiguration.key == key)
            .order_by(desc(SystemConfiguration.version))
            .limit(1)
        )
        return result.scalar_one_or_none()

    @staticmethod
    @retry_read
    async def get(db: AsyncSession, key: str) -> Tuple[dict, int]:
        """Current value and version; version 0 means the built-in defaults."""
        _check_key(key)
        latest = await ConfigurationService._latest(db, key)
        if latest is None:
            return copy.deepcopy(DEFAULT_CONFIGURATION[key]), 0
        return latest.value, latest.version

    @staticmethod
    async def _append_version(
        db: AsyncSession, key: str, value: dict, actor: User,
        expected_version: Optional[int], preset_id: Optional[str] = None
    ) -> SystemConfiguration:
        latest = await ConfigurationService._latest(db, key)
        current_version = latest.version if latest else 0
        if expected_version is not None and expected_version != current_version:
            raise VersionConflictError(
                f"{key} is at version {current_version}, not {expected_version}"
            )

        entry = SystemConfiguration(
            key=key,
            version=current_version + 1,
            value=value,
            preset_id=preset_id,
            updated_by=actor.id,
        )
        db.add(entry)
        try:
            await db.flush()
        except IntegrityError:
            # Someone else wrote the same version first
            raise VersionConflictError(f"{key} was updated concurrently")
        return entry

    @staticmethod
    async def update(
        db: AsyncSession, actor: User, key: str, changes: dict, expected_version: Optional[int] = None
    ) -> SystemConfiguration:
        """Merge `changes` over the current value and store it as the next version."""
        if not actor.is_admin:
            raise PermissionDeniedError()
        _check_key(key)
        try:
            current, _ = await ConfigurationService.get(db, key)
            merged = {**current, **changes}
            entry = await ConfigurationService._append_version(db, key, merged, actor, expected_version)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(f"{actor.id} updated {key} to version {entry.version}")
        return entry

    @staticmethod
    async def apply_preset(db: AsyncSession, actor: User, preset_id: str) -> List[SystemConfiguration]:
        if not actor.is_admin:
            raise PermissionDeniedError()
        preset = BUSINESS_PRESETS.get(preset_id)
        if preset is None:
            raise NotFoundError("Business preset not found")
        try:
            entries = [
                await ConfigurationService._append_version(
                    db, key, copy.deepcopy(preset[key]), actor, None, preset_id=preset_id
                )
                for key in CONFIGURATION_KEYS
            ]
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(f"{actor.id} applied preset {preset_id}")
        return entries

    @staticmethod
    async def history(db: AsyncSession, key: str, limit: int = 50) -> List[SystemConfiguration]:
        _check_key(key)
        result = await db.execute(
            select(SystemConfiguration)
            .where(SystemConfiguration.key == key)
            .order_by(desc(SystemConfiguration.version))
            .limit(limit)
        )
        return result.scalars().all()
