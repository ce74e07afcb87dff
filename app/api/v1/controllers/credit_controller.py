from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.models import User
from app.enums import RelatedEntityType
from app.exceptions.errors import NotFoundError
from app.exceptions.handlers import EXPECTED_ERRORS
from app.services.credit_ledger_service import CreditLedgerService
from app.services.membership_service import MembershipService
from app.schemas.credit_schemas import (
    CreditGrantRequest, CreditEntryResponse, CreditLogResponse, CreditBalanceResponse,
    UserCreditsResponse, CreditPackageCreate, CreditPackageUpdate, CreditPackageResponse
)
from app.core.logger import get_logger

logger = get_logger("credit_controller")


class CreditController:
    """Controller for the credit ledger and credit packages."""

    @staticmethod
    async def get_balance(db: AsyncSession, user: User) -> CreditBalanceResponse:
        try:
            balance = await CreditLedgerService.read_balance(db, user.id)
            next_expiry = await CreditLedgerService.next_expiry(db, user.id)
            await db.commit()
            return CreditBalanceResponse(user_id=user.id, balance=balance, next_expiry=next_expiry)
        except EXPECTED_ERRORS:
            raise
        except Exception as e:
            logger.error(f"Error getting balance for {user.id}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to get credit balance"
            )

    @staticmethod
    async def list_entries(db: AsyncSession, user: User) -> List[CreditEntryResponse]:
        entries = await CreditLedgerService.list_entries(db, user.id)
        await db.commit()
        return [CreditEntryResponse.model_validate(entry) for entry in entries]

    @staticmethod
    async def get_history(db: AsyncSession, user: User, limit: int) -> List[CreditLogResponse]:
        logs = await CreditLedgerService.get_history(db, user.id, limit)
        return [CreditLogResponse.model_validate(log) for log in logs]

    @staticmethod
    async def get_user_credits(db: AsyncSession, user_id: str) -> UserCreditsResponse:
        if not await db.get(User, user_id):
            raise NotFoundError("User not found")
        balance = await CreditLedgerService.read_balance(db, user_id)
        entries = await CreditLedgerService.list_entries(db, user_id)
        history = await CreditLedgerService.get_history(db, user_id, 50)
        await db.commit()
        return UserCreditsResponse(
            user_id=user_id,
            balance=balance,
            entries=[CreditEntryResponse.model_validate(entry) for entry in entries],
            history=[CreditLogResponse.model_validate(log) for log in history],
        )

    @staticmethod
    async def grant(db: AsyncSession, actor: User, request: CreditGrantRequest) -> CreditEntryResponse:
        try:
            if not await db.get(User, request.user_id):
                raise NotFoundError("User not found")
            credit = await CreditLedgerService.grant(
                db, request.user_id, request.amount,
                source=request.source,
                expiry_date=request.expiry_date,
                related_entity_type=RelatedEntityType.ADMIN,
                actor_id=actor.id,
                note=request.note,
            )
            await db.commit()
            return CreditEntryResponse.model_validate(credit)
        except EXPECTED_ERRORS:
            raise
        except Exception as e:
            await db.rollback()
            logger.error(f"Error granting credits to {request.user_id}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to grant credits"
            )

    @staticmethod
    async def list_packages(db: AsyncSession, include_inactive: bool = False) -> List[CreditPackageResponse]:
        packages = await MembershipService.list_packages(db, include_inactive)
        return [CreditPackageResponse.model_validate(package) for package in packages]

    @staticmethod
    async def create_package(db: AsyncSession, actor: User, data: CreditPackageCreate) -> CreditPackageResponse:
        package = await MembershipService.create_package(db, actor, data.model_dump())
        return CreditPackageResponse.model_validate(package)

    @staticmethod
    async def update_package(
        db: AsyncSession, actor: User, package_id: str, data: CreditPackageUpdate
    ) -> CreditPackageResponse:
        package = await MembershipService.update_package(
            db, actor, package_id, data.model_dump(exclude_unset=True, exclude_none=True)
        )
        return CreditPackageResponse.model_validate(package)

    @staticmethod
    async def deactivate_package(db: AsyncSession, actor: User, package_id: str) -> CreditPackageResponse:
        package = await MembershipService.deactivate_package(db, actor, package_id)
        return CreditPackageResponse.model_validate(package)

    @staticmethod
    async def assign_package(db: AsyncSession, actor: User, package_id: str, user_id: str) -> CreditEntryResponse:
        credit = await MembershipService.assign_package(db, actor, package_id, user_id)
        return CreditEntryResponse.model_validate(credit)
