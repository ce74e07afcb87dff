from datetime import timedelta
from typing import List, Optional

from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import MembershipType, Membership, CreditPackage, User
from app.enums import MembershipStatus, CreditSource, RelatedEntityType
from app.exceptions.errors import InvalidStateError, NotFoundError, PermissionDeniedError
from app.services.credit_ledger_service import CreditLedgerService
from app.utils.dates import utc_now
from app.core.logger import get_logger

logger = get_logger("membership_service")


class MembershipService:
    """Memberships and credit packages; both feed the ledger through grants."""

    @staticmethod
    async def list_membership_types(db: AsyncSession) -> List[MembershipType]:
        result = await db.execute(
            select(MembershipType).where(MembershipType.is_active.is_(True)).order_by(MembershipType.price)
        )
        return result.scalars().all()

    @staticmethod
    async def create_membership_type(db: AsyncSession, actor: User, data: dict) -> MembershipType:
        if not actor.is_admin:
            raise PermissionDeniedError()
        membership_type = MembershipType(**data)
        db.add(membership_type)
        await db.commit()
        return membership_type

    @staticmethod
    async def list_user_memberships(db: AsyncSession, user_id: str) -> List[Membership]:
        result = await db.execute(
            select(Membership).where(Membership.user_id == user_id).order_by(desc(Membership.start_date))
        )
        return result.scalars().unique().all()

    @staticmethod
    async def get_active_membership(db: AsyncSession, user_id: str) -> Optional[Membership]:
        result = await db.execute(
            select(Membership)
            .where(
                Membership.user_id == user_id,
                Membership.status == MembershipStatus.ACTIVE,
                Membership.end_date > utc_now(),
            )
            .order_by(desc(Membership.end_date))
        )
        return result.scalars().first()

    @staticmethod
    async def assign_membership(db: AsyncSession, actor: User, user_id: str, membership_type_id: str) -> Membership:
        """Start a membership and grant its credits, expiring with the membership."""
        if not actor.is_admin:
            raise PermissionDeniedError()
        user = await db.get(User, user_id)
        if not user or not user.is_active:
            raise NotFoundError("User not found")
        membership_type = await db.get(MembershipType, membership_type_id)
        if not membership_type or not membership_type.is_active:
            raise NotFoundError("Membership type not found")

        start = utc_now()
        membership = Membership(
            user_id=user_id,
            membership_type_id=membership_type.id,
            start_date=start,
            end_date=start + timedelta(days=membership_type.duration_days),
            status=MembershipStatus.ACTIVE,
        )
        db.add(membership)
        await db.flush()

        if membership_type.credit_amount > 0:
            await CreditLedgerService.grant(
                db, user_id, membership_type.credit_amount,
                source=CreditSource.MEMBERSHIP,
                expiry_date=membership.end_date,
                source_id=membership.id,
                related_entity_type=RelatedEntityType.MEMBERSHIP,
                related_entity_id=membership.id,
                actor_id=actor.id,
                note=f"Membership: {membership_type.name}",
            )
        await db.commit()
        logger.info(f"{actor.id} assigned membership {membership_type.name} to {user_id}")
        return membership

    @staticmethod
    async def cancel_membership(db: AsyncSession, actor: User, membership_id: str) -> Membership:
        """Credits already granted stay until they expire."""
        if not actor.is_admin:
            raise PermissionDeniedError()
        membership = await db.get(Membership, membership_id)
        if not membership:
            raise NotFoundError("Membership not found")
        if membership.status in (MembershipStatus.CANCELLED, MembershipStatus.EXPIRED):
            raise InvalidStateError(f"Membership is already {membership.status.value.lower()}")
        membership.status = MembershipStatus.CANCELLED
        await db.commit()
        logger.info(f"Membership {membership_id} cancelled by {actor.id}")
        return membership

    @staticmethod
    async def list_packages(db: AsyncSession, include_inactive: bool = False) -> List[CreditPackage]:
        stmt = select(CreditPackage)
        if not include_inactive:
            stmt = stmt.where(CreditPackage.is_active.is_(True))
        result = await db.execute(stmt.order_by(CreditPackage.credits))
        return result.scalars().all()

    @staticmethod
    async def create_package(db: AsyncSession, actor: User, data: dict) -> CreditPackage:
        if not actor.is_admin:
            raise PermissionDeniedError()
        package = CreditPackage(**data)
        db.add(package)
        await db.commit()
        logger.info(f"Credit package {package.name} created by {actor.id}")
        return package

    @staticmethod
    async def update_package(db: AsyncSession, actor: User, package_id: str, data: dict) -> CreditPackage:
        if not actor.is_admin:
            raise PermissionDeniedError()
        package = await db.get(CreditPackage, package_id)
        if not package:
            raise NotFoundError("Credit package not found")
        for field, value in data.items():
            setattr(package, field, value)
        await db.commit()
        return package

    @staticmethod
    async def deactivate_package(db: AsyncSession, actor: User, package_id: str) -> CreditPackage:
        return await MembershipService.update_package(db, actor, package_id, {"is_active": False})

    @staticmethod
    async def assign_package(db: AsyncSession, actor: User, package_id: str, user_id: str):
        if not actor.is_admin:
            raise PermissionDeniedError()
        package = await db.get(CreditPackage, package_id)
        if not package or not package.is_active:
            raise NotFoundError("Credit package not found")
        user = await db.get(User, user_id)
        if not user or not user.is_active:
            raise NotFoundError("User not found")

        credit = await CreditLedgerService.grant(
            db, user_id, package.credits,
            source=CreditSource.PURCHASE,
            expiry_date=utc_now() + timedelta(days=package.validity_days),
            source_id=package.id,
            related_entity_type=RelatedEntityType.PACKAGE,
            related_entity_id=package.id,
            actor_id=actor.id,
            note=f"Package: {package.name}",
        )
        await db.commit()
        logger.info(f"{actor.id} assigned package {package.name} to {user_id}")
        return credit
