from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.database.connection import get_db
from app.models.user import User
from app.enums import UserRole
from app.middlewares.clerk_auth import get_authenticated_user, require_staff, require_admin
from app.api.v1.controllers.user_controller import UserController
from app.schemas.user_schemas import UserCreate, UserResponse, UserUpdate
from app.core.logger import get_logger

logger = get_logger("user_routes")
router = APIRouter(tags=["User"])


@router.get("/user/me", response_model=UserResponse)
async def get_current_user(current_user: User = Depends(get_authenticated_user)):
    """Get current authenticated user's information"""
    return UserResponse.model_validate(current_user)


@router.get("/users", response_model=List[UserResponse], summary="List active users")
async def list_users(
    role: Optional[UserRole] = Query(None),
    db: AsyncSession = Depends(get_db),
    staff: User = Depends(require_staff)
):
    return await UserController.list_users(db, role)


@router.post("/admin/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    data: UserCreate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Create an account ahead of the user's first sign-in (linked by email)."""
    return await UserController.create_user(db, data)


@router.patch("/users/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    data: UserUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return await UserController.update_user(db, admin, user_id, data)


@router.delete("/users/{user_id}", response_model=UserResponse, summary="Deactivate user (soft delete)")
async def deactivate_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return await UserController.deactivate_user(db, admin, user_id)
