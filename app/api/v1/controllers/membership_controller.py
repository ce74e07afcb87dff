from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.models import User
from app.services.membership_service import MembershipService
from app.schemas.membership_schemas import MembershipTypeCreate, MembershipTypeResponse, MembershipResponse


class MembershipController:

    @staticmethod
    async def list_types(db: AsyncSession) -> List[MembershipTypeResponse]:
        return [MembershipTypeResponse.model_validate(item) for item in await MembershipService.list_membership_types(db)]

    @staticmethod
    async def create_type(db: AsyncSession, actor: User, data: MembershipTypeCreate) -> MembershipTypeResponse:
        membership_type = await MembershipService.create_membership_type(db, actor, data.model_dump())
        return MembershipTypeResponse.model_validate(membership_type)

    @staticmethod
    async def list_for_user(db: AsyncSession, user_id: str) -> List[MembershipResponse]:
        return [MembershipResponse.model_validate(item) for item in await MembershipService.list_user_memberships(db, user_id)]

    @staticmethod
    async def assign(db: AsyncSession, actor: User, user_id: str, membership_type_id: str) -> MembershipResponse:
        membership = await MembershipService.assign_membership(db, actor, user_id, membership_type_id)
        await db.refresh(membership, attribute_names=["membership_type"])
        return MembershipResponse.model_validate(membership)

    @staticmethod
    async def cancel(db: AsyncSession, actor: User, membership_id: str) -> MembershipResponse:
        membership = await MembershipService.cancel_membership(db, actor, membership_id)
        return MembershipResponse.model_validate(membership)
