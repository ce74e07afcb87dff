from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.database.connection import get_db
from app.middlewares.clerk_auth import get_authenticated_user, require_staff
from app.api.v1.controllers.booking_controller import BookingController
from app.models.user import User
from app.enums import BookingStatus
from app.schemas.booking_schemas import (
    BookClassRequest, BookPrivateSessionRequest, AdminBookClassRequest, AdminBookPrivateSessionRequest,
    CancelBookingRequest, AttendanceRequest, BookingResponse, CancelBookingResponse
)
import os

router = APIRouter(tags=["Bookings"])

IS_DEVELOPMENT = os.getenv("ENVIRONMENT", "development") == "development"


@router.post(
    "/bookings/class",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book a Class",
    description="Claims a seat and redeems the class's credit cost in one transaction. "
                "Fails with 400 when the class is full, already booked, or credits are insufficient." +
                (" **Development Mode**: use the X-Development-User header." if IS_DEVELOPMENT else "")
)
async def book_class(
    request: BookClassRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_authenticated_user)
):
    return await BookingController.book_class(db, user, request.class_id)


@router.post(
    "/bookings/private",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book a Private Session"
)
async def book_private_session(
    request: BookPrivateSessionRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_authenticated_user)
):
    return await BookingController.book_private_session(db, user, request.session_id)


@router.get("/bookings", response_model=List[BookingResponse], summary="My Bookings")
async def list_bookings(
    booking_status: Optional[BookingStatus] = Query(None, alias="status"),
    upcoming: bool = Query(False),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_authenticated_user)
):
    return await BookingController.list_bookings(db, user, booking_status, upcoming)


@router.post("/bookings/{booking_id}/cancel", response_model=CancelBookingResponse, summary="Cancel Booking")
async def cancel_booking(
    booking_id: str,
    request: CancelBookingRequest = CancelBookingRequest(),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_authenticated_user)
):
    """Credits are refunded when cancelling before the cutoff window, or when staff cancel."""
    return await BookingController.cancel_booking(db, user, booking_id, request.reason)


@router.post(
    "/admin/bookings/class",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book a Class for a User"
)
async def admin_book_class(
    request: AdminBookClassRequest,
    db: AsyncSession = Depends(get_db),
    staff: User = Depends(require_staff)
):
    return await BookingController.admin_book_class(db, staff, request.user_id, request.class_id)


@router.post(
    "/admin/bookings/private",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Assign a Private Session to a User",
    description="Claims an open private slot for the user. No credits are charged."
)
async def admin_book_private_session(
    request: AdminBookPrivateSessionRequest,
    db: AsyncSession = Depends(get_db),
    staff: User = Depends(require_staff)
):
    return await BookingController.admin_book_private_session(db, staff, request.user_id, request.session_id)


@router.post("/admin/bookings/{booking_id}/attendance", response_model=BookingResponse)
async def mark_attendance(
    booking_id: str,
    request: AttendanceRequest,
    db: AsyncSession = Depends(get_db),
    staff: User = Depends(require_staff)
):
    return await BookingController.mark_attendance(db, staff, booking_id, request.status)
