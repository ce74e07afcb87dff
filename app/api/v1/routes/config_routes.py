from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.database.connection import get_db
from app.middlewares.clerk_auth import require_admin
from app.api.v1.controllers.config_controller import ConfigController
from app.models.user import User
from app.schemas.config_schemas import (
    ConfigUpdateRequest, ConfigResponse, ConfigVersionResponse, PresetAppliedResponse
)

router = APIRouter(tags=["Configuration"])


@router.get("/config/{key}", response_model=ConfigResponse, summary="Get Branding or Content")
async def get_configuration(key: str, db: AsyncSession = Depends(get_db)):
    return await ConfigController.get(db, key)


@router.put(
    "/admin/config/{key}",
    response_model=ConfigResponse,
    description="Stores a new version. Pass `expected_version` to fail with 409 if someone else saved first."
)
async def update_configuration(
    key: str,
    request: ConfigUpdateRequest,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return await ConfigController.update(db, admin, key, request)


@router.get("/admin/config/{key}/history", response_model=List[ConfigVersionResponse])
async def configuration_history(
    key: str,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return await ConfigController.history(db, key)


@router.post("/admin/config/apply-preset/{preset_id}", response_model=PresetAppliedResponse)
async def apply_preset(
    preset_id: str,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return await ConfigController.apply_preset(db, admin, preset_id)
