from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.models import User
from app.enums import BookingStatus
from app.exceptions.handlers import EXPECTED_ERRORS
from app.services.booking_service import BookingService
from app.schemas.booking_schemas import BookingResponse, CancelBookingResponse
from app.schemas.schedule_schemas import ClassAvailabilityResponse
from app.core.logger import get_logger

logger = get_logger("booking_controller")


class BookingController:
    """Controller for class and private session bookings."""

    @staticmethod
    async def book_class(db: AsyncSession, user: User, class_id: str) -> BookingResponse:
        try:
            booking = await BookingService.book_class(db, user, class_id)
            return BookingResponse.model_validate(booking)
        except EXPECTED_ERRORS:
            raise
        except Exception as e:
            logger.error(f"Unexpected error booking class {class_id}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to book class"
            )

    @staticmethod
    async def book_private_session(db: AsyncSession, user: User, session_id: str) -> BookingResponse:
        try:
            booking = await BookingService.book_private_session(db, user, session_id)
            return BookingResponse.model_validate(booking)
        except EXPECTED_ERRORS:
            raise
        except Exception as e:
            logger.error(f"Unexpected error booking private session {session_id}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to book private session"
            )

    @staticmethod
    async def admin_book_class(db: AsyncSession, actor: User, user_id: str, class_id: str) -> BookingResponse:
        booking = await BookingService.admin_book_class(db, actor, user_id, class_id)
        return BookingResponse.model_validate(booking)

    @staticmethod
    async def admin_book_private_session(
        db: AsyncSession, actor: User, user_id: str, session_id: str
    ) -> BookingResponse:
        booking = await BookingService.admin_book_private_session(db, actor, user_id, session_id)
        return BookingResponse.model_validate(booking)

    @staticmethod
    async def cancel_booking(
        db: AsyncSession, actor: User, booking_id: str, reason: Optional[str]
    ) -> CancelBookingResponse:
        try:
            booking, refunded = await BookingService.cancel_booking(db, booking_id, actor, reason)
            return CancelBookingResponse(
                booking=BookingResponse.model_validate(booking),
                credits_refunded=refunded,
            )
        except EXPECTED_ERRORS:
            raise
        except Exception as e:
            logger.error(f"Unexpected error cancelling booking {booking_id}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to cancel booking"
            )

    @staticmethod
    async def mark_attendance(
        db: AsyncSession, actor: User, booking_id: str, attendance: BookingStatus
    ) -> BookingResponse:
        booking = await BookingService.mark_attendance(db, booking_id, actor, attendance)
        return BookingResponse.model_validate(booking)

    @staticmethod
    async def list_bookings(
        db: AsyncSession, user: User, booking_status: Optional[BookingStatus], upcoming_only: bool
    ) -> List[BookingResponse]:
        bookings = await BookingService.list_user_bookings(
            db, user.id, status=booking_status, upcoming_only=upcoming_only
        )
        return [BookingResponse.model_validate(booking) for booking in bookings]

    @staticmethod
    async def get_class_availability(db: AsyncSession, class_id: str) -> ClassAvailabilityResponse:
        return ClassAvailabilityResponse(**await BookingService.get_class_availability(db, class_id))
