"""
Scheduling and booking enums, with the allowed booking status transitions.
"""

from enum import Enum


class BookableType(str, Enum):
    CLASS = "CLASS"
    PRIVATE_SESSION = "PRIVATE_SESSION"


class BookingStatus(str, Enum):
    BOOKED = "BOOKED"
    CANCELLED = "CANCELLED"
    ATTENDED = "ATTENDED"
    NO_SHOW = "NO_SHOW"


class BookingType(str, Enum):
    SELF = "SELF"
    ADMIN = "ADMIN"


class SessionStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


BOOKING_TRANSITIONS = {
    BookingStatus.BOOKED: frozenset({
        BookingStatus.CANCELLED,
        BookingStatus.ATTENDED,
        BookingStatus.NO_SHOW,
    }),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.ATTENDED: frozenset(),
    BookingStatus.NO_SHOW: frozenset(),
}


def can_transition_booking(current: BookingStatus, target: BookingStatus) -> bool:
    return target in BOOKING_TRANSITIONS.get(BookingStatus(current), frozenset())
