from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.models import User
from app.enums import UserRole
from app.services.user_service import UserService
from app.schemas.user_schemas import UserCreate, UserResponse, UserUpdate


class UserController:

    @staticmethod
    async def list_users(db: AsyncSession, role: Optional[UserRole]) -> List[UserResponse]:
        return [UserResponse.model_validate(user) for user in await UserService.list_users(db, role)]

    @staticmethod
    async def create_user(db: AsyncSession, data: UserCreate) -> UserResponse:
        fields = data.model_dump(exclude={"email", "role"}, exclude_none=True)
        user = await UserService.create_user(db, data.email, data.role, **fields)
        return UserResponse.model_validate(user)

    @staticmethod
    async def update_user(db: AsyncSession, actor: User, user_id: str, data: UserUpdate) -> UserResponse:
        user = await UserService.update_user(db, actor, user_id, data.model_dump(exclude_unset=True, exclude_none=True))
        return UserResponse.model_validate(user)

    @staticmethod
    async def deactivate_user(db: AsyncSession, actor: User, user_id: str) -> UserResponse:
        return UserResponse.model_validate(await UserService.deactivate_user(db, actor, user_id))
