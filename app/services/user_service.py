from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import User
from app.enums import UserRole
from app.exceptions.errors import InvalidStateError, NotFoundError, PermissionDeniedError
from app.core.logger import get_logger

logger = get_logger("user_service")


class UserService:

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: str) -> Optional[User]:
        return await db.get(User, user_id)

    @staticmethod
    async def get_by_clerk_id(db: AsyncSession, clerk_id: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.clerk_id == clerk_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    @staticmethod
    async def list_users(db: AsyncSession, role: Optional[UserRole] = None, include_inactive: bool = False) -> List[User]:
        stmt = select(User)
        if role is not None:
            stmt = stmt.where(User.role == role)
        if not include_inactive:
            stmt = stmt.where(User.is_active.is_(True))
        result = await db.execute(stmt.order_by(User.created_at))
        return result.scalars().all()

    @staticmethod
    async def create_user(db: AsyncSession, email: str, role: UserRole = UserRole.CLIENT, **fields) -> User:
        user = User(email=email, role=role, is_active=True, **fields)
        db.add(user)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise InvalidStateError(f"A user with email {email} already exists")
        logger.info(f"Created user {user.email} ({role.value})")
        return user

    @staticmethod
    async def update_user(db: AsyncSession, actor: User, user_id: str, data: dict) -> User:
        if not actor.is_admin:
            raise PermissionDeniedError()
        user = await db.get(User, user_id)
        if not user:
            raise NotFoundError("User not found")
        if user.id == actor.id and data.get("role") not in (None, UserRole.ADMIN):
            raise InvalidStateError("Admins cannot remove their own admin role")
        for field, value in data.items():
            setattr(user, field, value)
        await db.commit()
        logger.info(f"{actor.id} updated user {user_id}: {sorted(data.keys())}")
        return user

    @staticmethod
    async def deactivate_user(db: AsyncSession, actor: User, user_id: str) -> User:
        if not actor.is_admin:
            raise PermissionDeniedError()
        if user_id == actor.id:
            raise InvalidStateError("You cannot deactivate your own account")
        user = await db.get(User, user_id)
        if not user:
            raise NotFoundError("User not found")
        user.is_active = False
        await db.commit()
        logger.info(f"{actor.id} deactivated user {user_id}")
        return user
