"""
API v1 routes package.
Studio booking backend routes.
"""

from .health_routes import router as health_router
from .user_routes import router as user_router
from .credit_routes import router as credit_router
from .membership_routes import router as membership_router
from .schedule_routes import router as schedule_router
from .booking_routes import router as booking_router
from .onboarding_routes import router as onboarding_router
from .report_routes import router as report_router
from .messaging_routes import router as messaging_router
from .profile_routes import router as profile_router
from .config_routes import router as config_router
from .motivation_routes import router as motivation_router

__all__ = [
    "health_router",
    "user_router",
    "credit_router",
    "membership_router",
    "schedule_router",
    "booking_router",
    "onboarding_router",
    "report_router",
    "messaging_router",
    "profile_router",
    "config_router",
    "motivation_router"
]
