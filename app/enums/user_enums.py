"""
User-related enums for the application.
"""

from enum import Enum


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    TRAINER = "TRAINER"
    CLIENT = "CLIENT"
    HOME_USER = "HOME_USER"


STAFF_ROLES = frozenset({UserRole.ADMIN, UserRole.TRAINER})


class MembershipStatus(str, Enum):
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"


class MessagePriority(str, Enum):
    LOW = "LOW"
    NORMAL = "NORMAL"
    HIGH = "HIGH"
