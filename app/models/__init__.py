"""
Models package for the application.
"""

from .user import User
from .membership import MembershipType, Membership
from .credit import Credit, CreditLog
from .credit_package import CreditPackage
from .service_type import ServiceType
from .scheduled_class import ScheduledClass
from .private_session import PrivateSession
from .booking import Booking
from .home_onboarding import HomeUserOnboarding, HomeUserPostureAssessment, SafetyVideoLog
from .messaging import ClientMessage, UserNotification
from .system_configuration import SystemConfiguration
from .motivation_quote import DailyMotivationQuote

__all__ = [
    "User",
    "MembershipType",
    "Membership",
    "Credit",
    "CreditLog",
    "CreditPackage",
    "ServiceType",
    "ScheduledClass",
    "PrivateSession",
    "Booking",
    "HomeUserOnboarding",
    "HomeUserPostureAssessment",
    "SafetyVideoLog",
    "ClientMessage",
    "UserNotification",
    "SystemConfiguration",
    "DailyMotivationQuote",
]
