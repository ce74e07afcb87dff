"""
Shared enums for the application.
"""

from .user_enums import (
    UserRole,
    STAFF_ROLES,
    MembershipStatus,
    MessagePriority
)
from .credit_enums import (
    CreditSource,
    CreditStatus,
    CreditOperation,
    RelatedEntityType
)
from .booking_enums import (
    BookableType,
    BookingStatus,
    BookingType,
    SessionStatus,
    BOOKING_TRANSITIONS,
    can_transition_booking
)
from .onboarding_enums import (
    OnboardingStepStatus,
    OnboardingStage,
    STAGE_ORDER,
    can_transition_stage
)

__all__ = [
    "UserRole",
    "STAFF_ROLES",
    "MembershipStatus",
    "MessagePriority",
    "CreditSource",
    "CreditStatus",
    "CreditOperation",
    "RelatedEntityType",
    "BookableType",
    "BookingStatus",
    "BookingType",
    "SessionStatus",
    "BOOKING_TRANSITIONS",
    "can_transition_booking",
    "OnboardingStepStatus",
    "OnboardingStage",
    "STAGE_ORDER",
    "can_transition_stage"
]
