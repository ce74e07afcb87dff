from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from app.enums import BookableType, BookingStatus, BookingType


class BookClassRequest(BaseModel):
    class_id: str


class BookPrivateSessionRequest(BaseModel):
    session_id: str


class AdminBookClassRequest(BaseModel):
    user_id: str
    class_id: str


class AdminBookPrivateSessionRequest(BaseModel):
    user_id: str
    session_id: str


class CancelBookingRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class AttendanceRequest(BaseModel):
    status: BookingStatus


class BookingResponse(BaseModel):
    id: str
    user_id: str
    bookable_type: BookableType
    entity_id: str
    status: BookingStatus
    booking_type: BookingType
    credit_amount: int
    refunded: bool
    session_name: Optional[str] = None
    starts_at: datetime
    ends_at: datetime
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class CancelBookingResponse(BaseModel):
    booking: BookingResponse
    credits_refunded: int
