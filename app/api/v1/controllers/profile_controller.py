from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions.handlers import EXPECTED_ERRORS
from app.services.profile_service import ProfileService
from app.schemas.profile_schemas import ClientProfileResponse
from app.core.logger import get_logger

logger = get_logger("profile_controller")


class ProfileController:

    @staticmethod
    async def get_profile(db: AsyncSession, user_id: str) -> ClientProfileResponse:
        try:
            profile = await ProfileService.client_profile(db, user_id)
            return ClientProfileResponse.model_validate(profile, from_attributes=True)
        except EXPECTED_ERRORS:
            raise
        except Exception as e:
            logger.error(f"Error building profile for {user_id}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to load profile"
            )
