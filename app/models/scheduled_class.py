from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, Index, Enum as SQLEnum, CheckConstraint
from sqlalchemy.orm import relationship
from app.database.base import Base
from app.enums import SessionStatus
from app.utils.dates import utc_now
import cuid


class ScheduledClass(Base):
    """A group class occurrence. `booked_count` only moves through conditional updates."""

    __tablename__ = "scheduled_classes"

    id = Column(String(25), primary_key=True, index=True, default=lambda: cuid.cuid())
    name = Column(String(150), nullable=False)
    service_type_id = Column(String(25), ForeignKey("service_types.id"), nullable=True)
    instructor_id = Column(String(25), ForeignKey("users.id"), nullable=True)
    starts_at = Column(DateTime, nullable=False)
    ends_at = Column(DateTime, nullable=False)
    capacity = Column(Integer, nullable=False)
    booked_count = Column(Integer, nullable=False, default=0)
    credit_cost = Column(Integer, nullable=False, default=1)
    location = Column(String(150), nullable=True)
    status = Column(SQLEnum(SessionStatus, native_enum=False, length=20), nullable=False, default=SessionStatus.SCHEDULED)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    service_type = relationship("ServiceType", lazy="joined")
    instructor = relationship("User", lazy="joined")

    __table_args__ = (
        CheckConstraint("capacity > 0", name="capacity_positive"),
        CheckConstraint("booked_count >= 0 AND booked_count <= capacity", name="booked_within_capacity"),
        CheckConstraint("credit_cost >= 0", name="credit_cost_non_negative"),
        CheckConstraint("ends_at > starts_at", name="ends_after_start"),
        Index("ix_scheduled_classes_status_start", "status", "starts_at"),
    )

    @property
    def spots_left(self) -> int:
        return max(self.capacity - self.booked_count, 0)

    @property
    def duration_minutes(self) -> int:
        return int((self.ends_at - self.starts_at).total_seconds() // 60)
