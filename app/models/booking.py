from sqlalchemy import Column, String, DateTime, Integer, Boolean, Text, ForeignKey, Index, Enum as SQLEnum, text
from sqlalchemy.orm import relationship
from app.database.base import Base
from app.enums import BookableType, BookingStatus, BookingType
from app.utils.dates import utc_now
import cuid


class Booking(Base):
    """A user's claim on a class seat or private session. Never deleted, only cancelled."""

    __tablename__ = "bookings"

    id = Column(String(25), primary_key=True, index=True, default=lambda: cuid.cuid())
    user_id = Column(String(25), ForeignKey("users.id"), nullable=False, index=True)
    bookable_type = Column(SQLEnum(BookableType, native_enum=False, length=20), nullable=False)
    entity_id = Column(String(25), nullable=False, index=True)
    status = Column(SQLEnum(BookingStatus, native_enum=False, length=20), nullable=False, default=BookingStatus.BOOKED)
    booking_type = Column(SQLEnum(BookingType, native_enum=False, length=20), nullable=False, default=BookingType.SELF)
    credit_amount = Column(Integer, nullable=False, default=0)
    refunded = Column(Boolean, nullable=False, default=False)
    session_name = Column(String(150), nullable=True)
    starts_at = Column(DateTime, nullable=False)
    ends_at = Column(DateTime, nullable=False)
    created_by = Column(String(25), ForeignKey("users.id"), nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    user = relationship("User", back_populates="bookings", foreign_keys=[user_id])

    __table_args__ = (
        # At most one live booking per user per class/session
        Index(
            "uq_bookings_active_user_entity",
            "user_id", "bookable_type", "entity_id",
            unique=True,
            postgresql_where=text("status <> 'CANCELLED'"),
            sqlite_where=text("status <> 'CANCELLED'"),
        ),
        Index("ix_bookings_created_at", "created_at"),
    )

    @property
    def is_active(self) -> bool:
        return self.status != BookingStatus.CANCELLED
