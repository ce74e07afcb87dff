from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime

from app.schemas.user_schemas import UserResponse
from app.schemas.booking_schemas import BookingResponse
from app.schemas.membership_schemas import MembershipResponse
from app.schemas.home_onboarding_schemas import OnboardingStatusResponse


class ClientProfileResponse(BaseModel):
    user: UserResponse
    credit_balance: int
    next_credit_expiry: Optional[datetime] = None
    active_membership: Optional[MembershipResponse] = None
    total_sessions: int
    sessions_this_month: int
    recent_bookings: List[BookingResponse]
    unread_messages: int
    onboarding: Optional[OnboardingStatusResponse] = None
