from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.database.connection import get_db
from app.middlewares.clerk_auth import require_staff
from app.api.v1.controllers.report_controller import ReportController
from app.models.user import User
from app.schemas.report_schemas import (
    BookingStatsResponse, TopClassResponse, AttendanceTrendResponse, RevenueTrendResponse
)

router = APIRouter(prefix="/admin/reports", tags=["Reports"])

Days = Path(..., ge=1, le=365, description="Length of the reporting window in days")


@router.get(
    "/booking-stats/{days}",
    response_model=BookingStatsResponse,
    description="Bookings, active users, revenue and average session length for the last `days` days, "
                "with growth against the preceding window of the same length."
)
async def booking_stats(
    days: int = Days,
    db: AsyncSession = Depends(get_db),
    staff: User = Depends(require_staff)
):
    return await ReportController.booking_stats(db, days)


@router.get("/top-classes/{days}", response_model=List[TopClassResponse])
async def top_classes(
    days: int = Days,
    limit: int = Query(10, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
    staff: User = Depends(require_staff)
):
    return await ReportController.top_classes(db, days, limit)


@router.get("/attendance/{days}", response_model=List[AttendanceTrendResponse])
async def attendance(
    days: int = Days,
    db: AsyncSession = Depends(get_db),
    staff: User = Depends(require_staff)
):
    return await ReportController.attendance(db, days)


@router.get("/revenue/{days}", response_model=List[RevenueTrendResponse])
async def revenue(
    days: int = Days,
    db: AsyncSession = Depends(get_db),
    staff: User = Depends(require_staff)
):
    return await ReportController.revenue(db, days)
