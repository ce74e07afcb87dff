from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.models import User
from app.services.configuration_service import ConfigurationService
from app.schemas.config_schemas import (
    ConfigUpdateRequest, ConfigResponse, ConfigVersionResponse, PresetAppliedResponse
)


class ConfigController:
    """Controller for versioned branding and content configuration."""

    @staticmethod
    async def get(db: AsyncSession, key: str) -> ConfigResponse:
        value, version = await ConfigurationService.get(db, key)
        return ConfigResponse(key=key, version=version, value=value)

    @staticmethod
    async def update(db: AsyncSession, actor: User, key: str, request: ConfigUpdateRequest) -> ConfigResponse:
        entry = await ConfigurationService.update(db, actor, key, request.value, request.expected_version)
        return ConfigResponse(key=entry.key, version=entry.version, value=entry.value)

    @staticmethod
    async def history(db: AsyncSession, key: str) -> List[ConfigVersionResponse]:
        return [ConfigVersionResponse.model_validate(entry) for entry in await ConfigurationService.history(db, key)]

    @staticmethod
    async def apply_preset(db: AsyncSession, actor: User, preset_id: str) -> PresetAppliedResponse:
        entries = await ConfigurationService.apply_preset(db, actor, preset_id)
        company = next(
            (entry.value.get("company_name") for entry in entries if entry.key == "branding"), preset_id
        )
        return PresetAppliedResponse(
            message=f"Successfully applied {company} preset",
            preset_id=preset_id,
            configurations=[
                ConfigResponse(key=entry.key, version=entry.version, value=entry.value) for entry in entries
            ],
        )
