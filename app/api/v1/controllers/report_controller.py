from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.exceptions.handlers import EXPECTED_ERRORS
from app.services.reporting_service import ReportingService
from app.schemas.report_schemas import (
    BookingStatsResponse, TopClassResponse, AttendanceTrendResponse, RevenueTrendResponse
)
from app.core.logger import get_logger

logger = get_logger("report_controller")


class ReportController:
    """Controller for admin dashboard reports."""

    @staticmethod
    async def booking_stats(db: AsyncSession, days: int) -> BookingStatsResponse:
        try:
            return BookingStatsResponse(**await ReportingService.booking_stats(db, days))
        except EXPECTED_ERRORS:
            raise
        except Exception as e:
            logger.error(f"Error computing booking stats for {days} days: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to compute booking stats"
            )

    @staticmethod
    async def top_classes(db: AsyncSession, days: int, limit: int) -> List[TopClassResponse]:
        return [TopClassResponse(**row) for row in await ReportingService.top_classes(db, days, limit)]

    @staticmethod
    async def attendance(db: AsyncSession, days: int) -> List[AttendanceTrendResponse]:
        return [AttendanceTrendResponse(**row) for row in await ReportingService.attendance_trends(db, days)]

    @staticmethod
    async def revenue(db: AsyncSession, days: int) -> List[RevenueTrendResponse]:
        return [RevenueTrendResponse(**row) for row in await ReportingService.revenue_trends(db, days)]
