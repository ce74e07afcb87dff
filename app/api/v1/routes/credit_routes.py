from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.database.connection import get_db
from app.middlewares.clerk_auth import get_authenticated_user, require_staff, require_admin
from app.api.v1.controllers.credit_controller import CreditController
from app.models.user import User
from app.schemas.credit_schemas import (
    CreditGrantRequest, CreditEntryResponse, CreditLogResponse, CreditBalanceResponse,
    UserCreditsResponse, CreditPackageCreate, CreditPackageUpdate, CreditPackageResponse,
    PackageAssignRequest
)
import os

router = APIRouter(tags=["Credits"])

IS_DEVELOPMENT = os.getenv("ENVIRONMENT", "development") == "development"
_DEV_NOTE = " **Development Mode**: use the X-Development-User header." if IS_DEVELOPMENT else ""


@router.get(
    "/credits/balance",
    response_model=CreditBalanceResponse,
    summary="Get Credit Balance",
    description="Remaining credits across active, unexpired ledger entries." + _DEV_NOTE
)
async def get_balance(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_authenticated_user)
):
    return await CreditController.get_balance(db, user)


@router.get("/credits/entries", response_model=List[CreditEntryResponse], summary="List Ledger Entries")
async def list_entries(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_authenticated_user)
):
    return await CreditController.list_entries(db, user)


@router.get("/credits/history", response_model=List[CreditLogResponse], summary="Credit Audit Log")
async def get_history(
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_authenticated_user)
):
    return await CreditController.get_history(db, user, limit)


@router.post(
    "/admin/credits/grant",
    response_model=CreditEntryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Grant Credits"
)
async def grant_credits(
    request: CreditGrantRequest,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return await CreditController.grant(db, admin, request)


@router.get("/admin/users/{user_id}/credits", response_model=UserCreditsResponse)
async def get_user_credits(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    staff: User = Depends(require_staff)
):
    return await CreditController.get_user_credits(db, user_id)


@router.get("/credit-packages", response_model=List[CreditPackageResponse], tags=["Credit Packages"])
async def list_packages(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_authenticated_user)
):
    return await CreditController.list_packages(db)


@router.post(
    "/admin/credit-packages",
    response_model=CreditPackageResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Credit Packages"]
)
async def create_package(
    data: CreditPackageCreate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return await CreditController.create_package(db, admin, data)


@router.put("/admin/credit-packages/{package_id}", response_model=CreditPackageResponse, tags=["Credit Packages"])
async def update_package(
    package_id: str,
    data: CreditPackageUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return await CreditController.update_package(db, admin, package_id, data)


@router.delete("/admin/credit-packages/{package_id}", response_model=CreditPackageResponse, tags=["Credit Packages"])
async def deactivate_package(
    package_id: str,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return await CreditController.deactivate_package(db, admin, package_id)


@router.post(
    "/admin/credit-packages/{package_id}/assign",
    response_model=CreditEntryResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Credit Packages"]
)
async def assign_package(
    package_id: str,
    request: PackageAssignRequest,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return await CreditController.assign_package(db, admin, package_id, request.user_id)
