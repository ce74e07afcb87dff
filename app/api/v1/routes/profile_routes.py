from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.connection import get_db
from app.middlewares.clerk_auth import get_authenticated_user, require_staff
from app.api.v1.controllers.profile_controller import ProfileController
from app.models.user import User
from app.schemas.profile_schemas import ClientProfileResponse

router = APIRouter(tags=["Profile"])


@router.get("/client/profile", response_model=ClientProfileResponse)
async def get_my_profile(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_authenticated_user)
):
    return await ProfileController.get_profile(db, user.id)


@router.get("/admin/clients/{client_id}/profile", response_model=ClientProfileResponse)
async def get_client_profile(
    client_id: str,
    db: AsyncSession = Depends(get_db),
    staff: User = Depends(require_staff)
):
    return await ProfileController.get_profile(db, client_id)
