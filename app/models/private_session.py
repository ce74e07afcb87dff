from sqlalchemy import Column, String, DateTime, Integer, Text, ForeignKey, Index, Enum as SQLEnum, CheckConstraint
from sqlalchemy.orm import relationship
from app.database.base import Base
from app.enums import SessionStatus
from app.utils.dates import utc_now
import cuid


class PrivateSession(Base):
    """One-to-one slot with a trainer. Capacity is implicitly one client."""

    __tablename__ = "private_sessions"

    id = Column(String(25), primary_key=True, index=True, default=lambda: cuid.cuid())
    trainer_id = Column(String(25), ForeignKey("users.id"), nullable=False, index=True)
    client_id = Column(String(25), ForeignKey("users.id"), nullable=True, index=True)
    service_type_id = Column(String(25), ForeignKey("service_types.id"), nullable=True)
    starts_at = Column(DateTime, nullable=False)
    ends_at = Column(DateTime, nullable=False)
    credit_cost = Column(Integer, nullable=False, default=1)
    location = Column(String(150), nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(SQLEnum(SessionStatus, native_enum=False, length=20), nullable=False, default=SessionStatus.SCHEDULED)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    trainer = relationship("User", foreign_keys=[trainer_id], lazy="joined")
    service_type = relationship("ServiceType", lazy="joined")

    __table_args__ = (
        CheckConstraint("credit_cost >= 0", name="credit_cost_non_negative"),
        CheckConstraint("ends_at > starts_at", name="ends_after_start"),
        Index("ix_private_sessions_status_start", "status", "starts_at"),
    )

    @property
    def is_open(self) -> bool:
        return self.client_id is None and self.status == SessionStatus.SCHEDULED
