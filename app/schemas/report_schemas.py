from pydantic import BaseModel
from datetime import date


class BookingStatsResponse(BaseModel):
    period_days: int
    total_bookings: int
    active_users: int
    credits_redeemed: int
    revenue: float
    avg_session_minutes: float
    booking_growth: float
    user_growth: float
    revenue_growth: float


class TopClassResponse(BaseModel):
    class_name: str
    bookings: int
    capacity: int
    utilization_rate: float


class AttendanceTrendResponse(BaseModel):
    date: date
    bookings: int
    attended: int
    no_show: int


class RevenueTrendResponse(BaseModel):
    date: date
    credits: int
    revenue: float
