from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.database.connection import get_db
from app.middlewares.clerk_auth import get_authenticated_user, require_admin
from app.api.v1.controllers.membership_controller import MembershipController
from app.models.user import User
from app.schemas.membership_schemas import (
    MembershipTypeCreate, MembershipTypeResponse, MembershipAssignRequest, MembershipResponse
)

router = APIRouter(tags=["Memberships"])


@router.get("/memberships/types", response_model=List[MembershipTypeResponse])
async def list_membership_types(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_authenticated_user)
):
    return await MembershipController.list_types(db)


@router.get("/memberships/me", response_model=List[MembershipResponse])
async def list_my_memberships(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_authenticated_user)
):
    return await MembershipController.list_for_user(db, user.id)


@router.post("/admin/membership-types", response_model=MembershipTypeResponse, status_code=status.HTTP_201_CREATED)
async def create_membership_type(
    data: MembershipTypeCreate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return await MembershipController.create_type(db, admin, data)


@router.post(
    "/admin/memberships",
    response_model=MembershipResponse,
    status_code=status.HTTP_201_CREATED,
    description="Start a membership for a user and grant its credits, expiring with the membership."
)
async def assign_membership(
    request: MembershipAssignRequest,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return await MembershipController.assign(db, admin, request.user_id, request.membership_type_id)


@router.post("/admin/memberships/{membership_id}/cancel", response_model=MembershipResponse)
async def cancel_membership(
    membership_id: str,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return await MembershipController.cancel(db, admin, membership_id)
